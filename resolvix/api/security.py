import hmac
import logging
from typing import Optional

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from resolvix.api.dependencies import get_db
from resolvix.core.config import settings
from resolvix.core.errors import AuthError
from resolvix.models.profile import Profile
from resolvix.services.auth_service import decode_token

logger = logging.getLogger(__name__)

_http_bearer = HTTPBearer(auto_error=False)

AUTH_COOKIE = "auth_token"
INGEST_KEY_HEADER = "X-Ingest-Key"


def _extract_bearer_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials],
) -> Optional[str]:
    if credentials and credentials.scheme.lower() == "bearer":
        return credentials.credentials

    cookie_token = request.cookies.get(AUTH_COOKIE)
    if cookie_token:
        return cookie_token

    return None


def _profile_from_token(db: Session, token: str) -> Profile:
    payload = decode_token(token)
    profile_id = payload.get("sub")
    if not profile_id:
        raise AuthError("Invalid token payload")

    profile = db.query(Profile).filter(Profile.id == int(profile_id)).first()
    if not profile:
        raise AuthError("User not found")
    if profile.status != "active":
        raise AuthError("This account is disabled")
    return profile


def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_http_bearer),
) -> Profile:
    token = _extract_bearer_token(request, credentials)
    if not token:
        raise AuthError()
    return _profile_from_token(db, token)


def require_admin(user: Profile = Depends(get_current_user)) -> Profile:
    if not user.is_admin:
        raise HTTPException(status_code=403, detail="Admin access required")
    return user


def require_ingest_access(
    request: Request,
    db: Session = Depends(get_db),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_http_bearer),
) -> Optional[Profile]:
    """Machine callers present X-Ingest-Key; people use their normal session.

    With INGEST_API_KEY unset (development) ingestion is open and the caller
    is anonymous unless a session is sent anyway. Returns the profile, if any.
    """
    key = request.headers.get(INGEST_KEY_HEADER)
    if settings.INGEST_API_KEY and key:
        if hmac.compare_digest(key, settings.INGEST_API_KEY):
            return None
        logger.warning("Rejected ingestion request with a bad %s", INGEST_KEY_HEADER)
        raise AuthError("Invalid ingest key")

    token = _extract_bearer_token(request, credentials)
    if token:
        return _profile_from_token(db, token)
    if settings.INGEST_API_KEY:
        raise AuthError()
    return None
