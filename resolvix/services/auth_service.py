import datetime as dt
import logging
from typing import Any, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from resolvix.core.config import settings
from resolvix.core.errors import AuthError
from resolvix.models.profile import Profile

logger = logging.getLogger(__name__)

# PBKDF2-SHA256 avoids bcrypt backend/version issues and the 72-byte input limit.
_pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return _pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return _pwd_context.verify(password, password_hash)
    except ValueError:
        return False


def create_access_token(*, subject: str, expires_minutes: Optional[int] = None) -> str:
    now = dt.datetime.now(dt.timezone.utc)
    expire_minutes = expires_minutes if expires_minutes is not None else settings.ACCESS_TOKEN_EXPIRE_MINUTES
    expire = now + dt.timedelta(minutes=int(expire_minutes))

    payload: dict[str, Any] = {
        "sub": subject,
        "iat": int(now.timestamp()),
        "exp": int(expire.timestamp()),
    }
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> dict[str, Any]:
    try:
        return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        raise AuthError("Invalid token") from e


def authenticate(db: Session, email: str, password: str) -> Profile:
    profile = db.query(Profile).filter(Profile.email == email.strip().lower()).first()
    if not profile or not verify_password(password, profile.password_hash):
        raise AuthError("Invalid email or password")
    if profile.status != "active":
        logger.info("Login refused for inactive profile %s", profile.id)
        raise AuthError("This account is disabled")
    return profile


def bootstrap_admin(db: Session, email: str, password: str) -> Profile:
    """Create the admin profile, or reset its password and role if it exists."""
    email = email.strip().lower()
    admin = db.query(Profile).filter(Profile.email == email).first()
    if not admin:
        admin = Profile(
            email=email,
            password_hash=hash_password(password),
            full_name="Administrator",
            role="admin",
            status="active",
        )
        db.add(admin)
        db.commit()
        logger.info("Bootstrapped admin profile '%s'", email)
    else:
        admin.password_hash = hash_password(password)
        admin.role = "admin"
        admin.status = "active"
        db.commit()
        logger.info("Updated admin profile '%s' from bootstrap settings", email)
    return admin
