import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from resolvix.core.errors import BackendError, NotFoundError
from resolvix.models.profile import Profile
from resolvix.services.auth_service import hash_password
from resolvix.services.roles import legacy_aliases, stored_values

logger = logging.getLogger(__name__)


class DuplicateEmailError(Exception):
    pass


def find_by_email(db: Session, email: str) -> Optional[Profile]:
    return db.query(Profile).filter(Profile.email == email.strip().lower()).first()


def _commit(db: Session, action: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Could not %s", action)
        raise BackendError("Could not save the team member. Please retry.") from e


def create_profile(
    db: Session,
    *,
    email: str,
    password: str,
    full_name: Optional[str],
    role: str = "support",
) -> Profile:
    if find_by_email(db, email):
        raise DuplicateEmailError(email)
    profile = Profile(
        email=email.strip().lower(),
        password_hash=hash_password(password),
        full_name=full_name,
        role=role,
        status="active",
    )
    db.add(profile)
    try:
        db.commit()
    except IntegrityError as e:
        # Lost a race with another sign-up for the same address.
        db.rollback()
        raise DuplicateEmailError(email) from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Could not create profile for %s", email)
        raise BackendError("Could not save the team member. Please retry.") from e
    db.refresh(profile)
    logger.info("Created %s profile %s", role, profile.id)
    return profile


def list_profiles(db: Session, role: Optional[str] = None) -> List[Profile]:
    q = db.query(Profile)
    if role:
        q = q.filter(Profile.role.in_(stored_values(role)))
    return q.order_by(Profile.id.asc()).all()


def normalize_stored_roles(db: Session) -> int:
    """Rewrite legacy role values (``viewer``) to their canonical role.

    Returns the number of profiles changed.
    """
    changed = 0
    for alias, role in legacy_aliases().items():
        result = db.execute(
            update(Profile)
            .where(Profile.role == alias)
            .values(role=role)
            .execution_options(synchronize_session=False)
        )
        changed += result.rowcount or 0
    _commit(db, "normalize stored roles")
    if changed:
        logger.info("Normalized %s profile role(s) to canonical values", changed)
    return changed


def update_profile(
    db: Session,
    profile_id: int,
    *,
    role: Optional[str] = None,
    status: Optional[str] = None,
    full_name: Optional[str] = None,
) -> Profile:
    profile = db.query(Profile).filter(Profile.id == profile_id).first()
    if not profile:
        raise NotFoundError("Team member not found")

    if role is not None and role != profile.role:
        # Pool membership is read at intake time; the cursor is not adjusted.
        logger.info("Profile %s role %s -> %s", profile.id, profile.role, role)
        profile.role = role
    if status is not None:
        profile.status = status
    if full_name is not None:
        profile.full_name = full_name
    profile.updated_at = datetime.now(timezone.utc)
    _commit(db, f"update profile {profile_id}")
    db.refresh(profile)
    return profile
