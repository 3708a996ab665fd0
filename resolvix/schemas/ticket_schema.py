from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from resolvix.schemas.log_schema import LogResponse

TicketStatus = Literal["open", "in-progress", "in-queue", "resolved", "closed", "reopened"]
TicketPriority = Literal["low", "medium", "high", "critical"]


class TicketIntakeRequest(BaseModel):
    timestamp: datetime = Field(..., description="When the offending line was logged")
    system_ip: str = Field(..., min_length=1, max_length=64)
    log_line: str = Field(..., min_length=1)
    log_path: Optional[str] = None
    application: Optional[str] = None
    severity: Optional[str] = None
    log_id: Optional[int] = Field(default=None, description="Originating log entry, if stored")


class CreateTicketRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    priority: TicketPriority = "medium"
    severity: Optional[str] = None
    assignees: List[int] = Field(default_factory=list)
    log_id: Optional[int] = None
    application: Optional[str] = None
    system_ip: Optional[str] = None


class UpdateTicketRequest(BaseModel):
    status: Optional[TicketStatus] = None
    priority: Optional[TicketPriority] = None
    severity: Optional[str] = None
    description: Optional[str] = None
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    assignees: Optional[List[int]] = None


class TicketResponse(BaseModel):
    id: int
    title: Optional[str] = None
    status: str
    priority: str
    severity: Optional[str] = None
    description: Optional[str] = None
    assignees: List[int] = []
    application: Optional[str] = None
    system_ip: Optional[str] = None
    log_path: Optional[str] = None
    log_line: Optional[str] = None
    timestamp: Optional[datetime] = None
    log_id: Optional[int] = None
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class TicketDetail(TicketResponse):
    log: Optional[LogResponse] = None


class RecommendationResponse(BaseModel):
    id: int
    ticket_id: int
    title: str
    description: Optional[str] = None
    url: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
