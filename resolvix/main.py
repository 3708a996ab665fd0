from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from resolvix.core.config import settings
from resolvix.core.database import Base, SessionLocal, engine
from resolvix.core.errors import ResolvixError

# Import models so SQLAlchemy registers tables for create_all().
import resolvix.models.assignment_tracker  # noqa: F401
import resolvix.models.chat_message  # noqa: F401
import resolvix.models.log  # noqa: F401
import resolvix.models.notification_settings  # noqa: F401
import resolvix.models.profile  # noqa: F401
import resolvix.models.recommendation  # noqa: F401
import resolvix.models.ticket  # noqa: F401

# Routes
from resolvix.api.routes import agents, auth, chat, logs, notifications, team, tickets
from resolvix.services.auth_service import bootstrap_admin
from resolvix.services.team_service import normalize_stored_roles
from resolvix.services.tracker_service import ensure_tracker_rows

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting up: initializing database...")
    try:
        Base.metadata.create_all(bind=engine)
        db = SessionLocal()
        try:
            ensure_tracker_rows(db)
            normalize_stored_roles(db)
            # Optional admin bootstrap for first-time setup (or password reset).
            if settings.ADMIN_BOOTSTRAP_EMAIL and settings.ADMIN_BOOTSTRAP_PASSWORD:
                bootstrap_admin(db, settings.ADMIN_BOOTSTRAP_EMAIL, settings.ADMIN_BOOTSTRAP_PASSWORD)
        finally:
            db.close()
        logger.info("Database initialized successfully.")
    except Exception:
        logger.exception("Database initialization failed")

    yield
    logger.info("Shutting down...")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ResolvixError)
async def resolvix_error_handler(request: Request, exc: ResolvixError):
    # Only the short message reaches the client; services log the technical cause.
    if exc.status_code >= 500:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc.message)
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message}, headers=headers)


app.include_router(auth.router, prefix=f"{settings.API_V1_STR}/auth", tags=["Auth"])
app.include_router(team.router, prefix=f"{settings.API_V1_STR}/team", tags=["Team"])
app.include_router(tickets.router, prefix=f"{settings.API_V1_STR}/tickets", tags=["Tickets"])
app.include_router(chat.router, prefix=f"{settings.API_V1_STR}/tickets", tags=["Ticket Chat"])
app.include_router(logs.router, prefix=f"{settings.API_V1_STR}/logs", tags=["Logs"])
app.include_router(notifications.router, prefix=f"{settings.API_V1_STR}/notifications", tags=["Notifications"])
app.include_router(agents.router, prefix=f"{settings.API_V1_STR}/agents", tags=["Agents"])


@app.get("/")
def read_root():
    return {"status": "success", "message": f"Welcome to {settings.PROJECT_NAME} API"}
