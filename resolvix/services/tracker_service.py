import logging

from sqlalchemy import update
from sqlalchemy.orm import Session

from resolvix.models.assignment_tracker import AssignmentTracker
from resolvix.services.roles import ASSIGNMENT_ROLES

logger = logging.getLogger(__name__)


def ensure_tracker_rows(db: Session) -> int:
    """Create a tracker row at -1 for every assignment role that has none.

    Returns the number of rows created.
    """
    existing = {t.role for t in db.query(AssignmentTracker).all()}
    created = 0
    for role in ASSIGNMENT_ROLES:
        if role not in existing:
            db.add(AssignmentTracker(role=role, last_index=-1))
            created += 1
    if created:
        db.commit()
        logger.info("Seeded %s assignment tracker row(s)", created)
    return created


def advance_cursor(db: Session, role: str, pool_size: int) -> int:
    """Atomically move the role's cursor to the next pool index and return it.

    Single-statement fetch-and-increment modulo ``pool_size``; the caller owns
    the transaction, so nothing is visible to other sessions until it commits.
    A role without a tracker row starts at index 0.
    """
    if pool_size <= 0:
        raise ValueError("pool_size must be positive")

    stmt = (
        update(AssignmentTracker)
        .where(AssignmentTracker.role == role)
        .values(last_index=(AssignmentTracker.last_index + 1) % pool_size)
        .returning(AssignmentTracker.last_index)
        .execution_options(synchronize_session=False)
    )
    next_index = db.execute(stmt).scalar_one_or_none()
    if next_index is not None:
        return next_index

    # First assignment ever for this role. A concurrent first intake for the
    # same role fails the unique constraint on flush and surfaces as a
    # retryable backend error.
    db.add(AssignmentTracker(role=role, last_index=0))
    db.flush()
    return 0


def get_cursors(db: Session) -> dict[str, int]:
    return {t.role: t.last_index for t in db.query(AssignmentTracker).all()}
