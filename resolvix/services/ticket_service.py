import logging
from datetime import datetime, timezone
from typing import Any, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from resolvix.core.errors import BackendError, NotFoundError, ValidationError
from resolvix.models.log import Log
from resolvix.models.profile import Profile
from resolvix.models.ticket import Ticket
from resolvix.services.change_feed import get_change_feed

logger = logging.getLogger(__name__)

# Fields a user may change after creation. Status is a plain field: any of
# the six values can be set from any other (no transition guard).
MUTABLE_FIELDS = ("status", "priority", "severity", "description", "title", "assignees")


def ticket_to_event(ticket: Ticket) -> dict:
    return {
        "id": ticket.id,
        "title": ticket.title,
        "status": ticket.status,
        "priority": ticket.priority,
        "severity": ticket.severity,
        "assignees": list(ticket.assignees or []),
        "updated_at": ticket.updated_at.isoformat() if ticket.updated_at else None,
    }


def get_ticket(db: Session, ticket_id: int) -> Ticket:
    ticket = db.query(Ticket).filter(Ticket.id == ticket_id).first()
    if not ticket:
        raise NotFoundError("Ticket not found")
    return ticket


def _check_profiles_exist(db: Session, profile_ids: List[int]) -> None:
    if not profile_ids:
        return
    found = {p.id for p in db.query(Profile.id).filter(Profile.id.in_(profile_ids)).all()}
    unknown = [pid for pid in profile_ids if pid not in found]
    if unknown:
        raise ValidationError(f"Unknown assignee profile id(s): {unknown}")


def create_ticket(
    db: Session,
    *,
    title: str,
    created_by: Optional[int],
    description: Optional[str] = None,
    priority: str = "medium",
    severity: Optional[str] = None,
    assignees: Optional[List[int]] = None,
    log_id: Optional[int] = None,
    application: Optional[str] = None,
    system_ip: Optional[str] = None,
) -> Ticket:
    """Manual ticket creation. No round-robin; assignees are whatever the user picked."""
    if not title or not title.strip():
        raise ValidationError("Ticket title is required")
    assignees = list(assignees or [])
    _check_profiles_exist(db, assignees)
    if log_id is not None and db.get(Log, log_id) is None:
        raise NotFoundError("Log not found")

    ticket = Ticket(
        title=title.strip(),
        description=description,
        status="open",
        priority=priority,
        severity=severity,
        assignees=assignees,
        log_id=log_id,
        application=application,
        system_ip=system_ip,
        created_by=created_by,
    )
    try:
        db.add(ticket)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Manual ticket insert failed")
        raise BackendError("Could not create the ticket. Please retry.") from e
    db.refresh(ticket)
    get_change_feed().publish("tickets", "INSERT", ticket_to_event(ticket))
    return ticket


def list_tickets(
    db: Session,
    *,
    status: Optional[str] = None,
    priority: Optional[str] = None,
    assignee: Optional[int] = None,
    limit: int = 200,
) -> List[Ticket]:
    q = db.query(Ticket)
    if status:
        q = q.filter(Ticket.status == status)
    if priority:
        q = q.filter(Ticket.priority == priority)
    q = q.order_by(Ticket.created_at.desc(), Ticket.id.desc())

    if assignee is None:
        return q.limit(limit).all()

    # JSON containment differs per backend; filter in Python.
    matched: List[Ticket] = []
    for t in q.all():
        if len(matched) >= limit:
            break
        if assignee in (t.assignees or []):
            matched.append(t)
    return matched


def update_ticket(db: Session, ticket_id: int, changes: dict[str, Any]) -> Ticket:
    """Apply a partial update (last write wins) and stamp updated_at."""
    ticket = get_ticket(db, ticket_id)

    unknown = set(changes) - set(MUTABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Fields cannot be changed: {', '.join(sorted(unknown))}")
    for key in ("status", "priority"):
        if key in changes and changes[key] is None:
            raise ValidationError(f"{key} cannot be empty")
    if "assignees" in changes:
        changes["assignees"] = list(changes["assignees"] or [])
        _check_profiles_exist(db, changes["assignees"])

    previous_status = ticket.status
    for key, value in changes.items():
        setattr(ticket, key, value)
    ticket.updated_at = datetime.now(timezone.utc)

    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Update of ticket %s failed", ticket_id)
        raise BackendError("Could not update the ticket. Please retry.") from e
    db.refresh(ticket)

    if ticket.status != previous_status:
        logger.info("Ticket %s status %s -> %s", ticket.id, previous_status, ticket.status)
    get_change_feed().publish("tickets", "UPDATE", ticket_to_event(ticket))
    return ticket
