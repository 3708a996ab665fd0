import logging
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from resolvix.core.errors import BackendError
from resolvix.models.recommendation import Recommendation
from resolvix.models.ticket import Ticket
from resolvix.services.ticket_service import get_ticket

logger = logging.getLogger(__name__)

DOCS_BASE_URL = "https://docs.example.com"


def _context_source(ticket: Ticket) -> str:
    if ticket.log is not None and ticket.log.source:
        return ticket.log.source
    return ticket.application or "service"


def build_recommendations(ticket: Ticket) -> List[dict]:
    """Template the advisory batch from the ticket and its source log."""
    source = _context_source(ticket)
    subject = source if source != "service" else "the affected service"
    return [
        {
            "title": f"Check {source} configuration",
            "description": f"Review configuration files for {subject} to ensure all parameters are correctly set.",
            "url": f"{DOCS_BASE_URL}/{source}-config",
        },
        {
            "title": "Monitor system resources",
            "description": "Check CPU, memory, and disk usage to identify potential resource constraints.",
            "url": f"{DOCS_BASE_URL}/monitoring",
        },
        {
            "title": "Review recent deployments",
            "description": "Check if any recent deployments or changes could be related to this issue.",
            "url": f"{DOCS_BASE_URL}/deployment-history",
        },
    ]


def generate_recommendations(db: Session, ticket_id: int) -> List[Recommendation]:
    """Append a fresh batch for the ticket. Earlier batches are kept."""
    ticket = get_ticket(db, ticket_id)
    rows = [Recommendation(ticket_id=ticket.id, **rec) for rec in build_recommendations(ticket)]
    try:
        db.add_all(rows)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Could not store recommendations for ticket %s", ticket_id)
        raise BackendError("Could not generate recommendations. Please retry.") from e
    for r in rows:
        db.refresh(r)
    logger.info("Generated %d recommendations for ticket %s", len(rows), ticket_id)
    return rows


def list_recommendations(db: Session, ticket_id: int) -> List[Recommendation]:
    get_ticket(db, ticket_id)
    return (
        db.query(Recommendation)
        .filter(Recommendation.ticket_id == ticket_id)
        .order_by(Recommendation.created_at.desc(), Recommendation.id.desc())
        .all()
    )
