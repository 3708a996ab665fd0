import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from resolvix.api.dependencies import get_db
from resolvix.api.security import get_current_user, require_ingest_access
from resolvix.models.profile import Profile
from resolvix.schemas.ticket_schema import (
    CreateTicketRequest,
    RecommendationResponse,
    TicketDetail,
    TicketIntakeRequest,
    TicketPriority,
    TicketResponse,
    TicketStatus,
    UpdateTicketRequest,
)
from resolvix.services.intake_service import intake_ticket
from resolvix.services.recommendation_service import generate_recommendations, list_recommendations
from resolvix.services.ticket_service import create_ticket, get_ticket, list_tickets, update_ticket

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/intake", response_model=TicketResponse, status_code=201)
def intake(
    request: TicketIntakeRequest,
    db: Session = Depends(get_db),
    caller: Optional[Profile] = Depends(require_ingest_access),
):
    """Create a ticket from a log line and assign one admin, engineer and support member."""
    return intake_ticket(
        db,
        timestamp=request.timestamp,
        system_ip=request.system_ip,
        log_line=request.log_line,
        log_path=request.log_path,
        application=request.application,
        severity=request.severity,
        log_id=request.log_id,
        created_by=caller.id if caller else None,
    )


@router.post("/", response_model=TicketResponse, status_code=201)
def create(request: CreateTicketRequest, db: Session = Depends(get_db), user: Profile = Depends(get_current_user)):
    return create_ticket(db, created_by=user.id, **request.model_dump())


@router.get("/", response_model=List[TicketResponse])
def index(
    status: Optional[TicketStatus] = None,
    priority: Optional[TicketPriority] = None,
    assignee: Optional[int] = None,
    limit: int = Query(default=200, ge=1, le=1000),
    db: Session = Depends(get_db),
    user: Profile = Depends(get_current_user),
):
    return list_tickets(db, status=status, priority=priority, assignee=assignee, limit=limit)


@router.get("/{ticket_id}", response_model=TicketDetail)
def show(ticket_id: int, db: Session = Depends(get_db), user: Profile = Depends(get_current_user)):
    return get_ticket(db, ticket_id)


@router.patch("/{ticket_id}", response_model=TicketResponse)
def update(
    ticket_id: int,
    request: UpdateTicketRequest,
    db: Session = Depends(get_db),
    user: Profile = Depends(get_current_user),
):
    changes = request.model_dump(exclude_unset=True)
    ticket = update_ticket(db, ticket_id, changes)
    logger.info("Ticket %s updated by profile %s: %s", ticket_id, user.id, sorted(changes))
    return ticket


@router.get("/{ticket_id}/recommendations", response_model=List[RecommendationResponse])
def recommendations(ticket_id: int, db: Session = Depends(get_db), user: Profile = Depends(get_current_user)):
    return list_recommendations(db, ticket_id)


@router.post("/{ticket_id}/recommendations", response_model=List[RecommendationResponse], status_code=201)
def generate(ticket_id: int, db: Session = Depends(get_db), user: Profile = Depends(get_current_user)):
    return generate_recommendations(db, ticket_id)
