from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from resolvix.api.dependencies import get_db
from resolvix.api.security import get_current_user, require_ingest_access
from resolvix.models.profile import Profile
from resolvix.schemas.log_schema import LogIngestRequest, LogLevel, LogResponse
from resolvix.services.change_feed import get_change_feed, sse_stream
from resolvix.services.log_service import ingest_log, list_logs

router = APIRouter()


@router.post("/", response_model=LogResponse, status_code=201)
def ingest(
    request: LogIngestRequest,
    db: Session = Depends(get_db),
    caller: Optional[Profile] = Depends(require_ingest_access),
):
    return ingest_log(
        db,
        level=request.level,
        source=request.source,
        message=request.message,
        metadata=request.metadata,
        timestamp=request.timestamp,
    )


@router.get("/", response_model=List[LogResponse])
def recent_logs(
    level: Optional[LogLevel] = None,
    source: Optional[str] = None,
    search: Optional[str] = None,
    limit: Optional[int] = Query(default=None, ge=1),
    db: Session = Depends(get_db),
    user: Profile = Depends(get_current_user),
):
    """Newest first, for the live log viewer's initial fill."""
    return list_logs(db, level=level, source=source, search=search, limit=limit)


@router.get("/stream")
async def stream_logs(level: Optional[LogLevel] = None, user: Profile = Depends(get_current_user)):
    filters = {"level": level} if level else {}
    sub = get_change_feed().subscribe("logs", ("INSERT",), **filters)
    return StreamingResponse(
        sse_stream(sub),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
