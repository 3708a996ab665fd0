"""Ticket intake: turn an incident signal into a ticket with rotated owners.

Every intake assigns one member from each role pool (admin, engineer,
support). Each role keeps its own round-robin cursor in
``assignment_tracker``; pools are snapshotted at call time and ordered by
profile id, so membership changes simply shift who sits at each index.

Pool load, cursor advance and ticket insert share one transaction. An empty
pool aborts before any write; a failed insert rolls the cursors back.
"""
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from resolvix.core.errors import BackendError, InsufficientUsersError, NotFoundError, ValidationError
from resolvix.models.log import Log
from resolvix.models.profile import Profile
from resolvix.models.ticket import Ticket
from resolvix.services.change_feed import get_change_feed
from resolvix.services.roles import ASSIGNMENT_ROLES, normalize_role
from resolvix.services.ticket_service import ticket_to_event
from resolvix.services.tracker_service import advance_cursor

logger = logging.getLogger(__name__)

_REQUIRED_FIELDS = ("timestamp", "system_ip", "log_line")


def load_role_pools(db: Session) -> dict[str, list[Profile]]:
    """Partition all profiles into assignment pools, each ordered by id."""
    pools: dict[str, list[Profile]] = {role: [] for role in ASSIGNMENT_ROLES}
    for profile in db.query(Profile).order_by(Profile.id.asc()).all():
        try:
            role = normalize_role(profile.role)
        except ValueError:
            logger.warning("Profile %s has unknown role %r; skipped for assignment", profile.id, profile.role)
            continue
        pools[role].append(profile)
    return pools


def _validate_required(values: dict) -> None:
    missing = []
    for name in _REQUIRED_FIELDS:
        value = values.get(name)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(name)
    if missing:
        raise ValidationError("Missing required fields: " + ", ".join(missing))


def intake_ticket(
    db: Session,
    *,
    timestamp: Optional[datetime],
    system_ip: Optional[str],
    log_line: Optional[str],
    log_path: Optional[str] = None,
    application: Optional[str] = None,
    severity: Optional[str] = None,
    log_id: Optional[int] = None,
    title: Optional[str] = None,
    description: Optional[str] = None,
    priority: str = "medium",
    created_by: Optional[int] = None,
) -> Ticket:
    _validate_required({"timestamp": timestamp, "system_ip": system_ip, "log_line": log_line})

    if log_id is not None and db.get(Log, log_id) is None:
        raise NotFoundError("Log not found")

    pools = load_role_pools(db)
    empty = [role for role, members in pools.items() if not members]
    if empty:
        logger.warning("Ticket intake aborted: empty role pool(s) %s", empty)
        raise InsufficientUsersError(empty)

    try:
        assignees: list[int] = []
        indexes: dict[str, int] = {}
        for role in ASSIGNMENT_ROLES:
            members = pools[role]
            index = advance_cursor(db, role, len(members))
            indexes[role] = index
            assignees.append(members[index].id)

        ticket = Ticket(
            title=title or _default_title(application, log_line),
            description=description,
            status="open",
            priority=priority,
            severity=severity,
            assignees=assignees,
            application=application,
            system_ip=system_ip.strip(),
            log_path=log_path,
            log_line=log_line,
            timestamp=timestamp,
            log_id=log_id,
            created_by=created_by,
        )
        db.add(ticket)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Ticket intake failed while writing ticket/tracker")
        raise BackendError("Could not create the ticket. Please retry.") from e

    db.refresh(ticket)
    logger.info(
        "Ticket %s created from %s with assignees %s (cursors %s)",
        ticket.id, system_ip, assignees, indexes,
    )
    get_change_feed().publish("tickets", "INSERT", ticket_to_event(ticket))
    return ticket


def _default_title(application: Optional[str], log_line: str) -> str:
    line = " ".join(log_line.split())
    if len(line) > 80:
        line = line[:77] + "..."
    return f"[{application}] {line}" if application else line
