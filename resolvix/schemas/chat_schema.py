from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class PostMessageRequest(BaseModel):
    message: str = Field(..., max_length=10000)
    attachments: Optional[dict[str, Any]] = None


class AssistantQuery(BaseModel):
    query: str = Field(..., max_length=4000, description="Question for the ticket assistant")


class ChatMessageResponse(BaseModel):
    id: int
    ticket_id: int
    user_id: Optional[int] = Field(default=None, description="Author profile; null for assistant/system")
    type: str
    message: str
    attachments: Optional[dict[str, Any]] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
