from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

LogLevel = Literal["debug", "info", "warning", "error"]


class LogIngestRequest(BaseModel):
    level: LogLevel
    source: str = Field(..., min_length=1, max_length=255)
    message: str = Field(..., min_length=1)
    metadata: dict[str, Any] = Field(default_factory=dict)
    timestamp: Optional[datetime] = None


class LogResponse(BaseModel):
    id: int
    level: str
    source: str
    message: str
    metadata: dict[str, Any] = Field(default_factory=dict, validation_alias="meta")
    timestamp: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
