from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class NotificationSettingsResponse(BaseModel):
    email: bool
    push: bool
    sms: bool
    slack: bool
    email_address: Optional[str] = None
    slack_webhook: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class NotificationSettingsUpdate(BaseModel):
    email: Optional[bool] = None
    push: Optional[bool] = None
    sms: Optional[bool] = None
    slack: Optional[bool] = None
    email_address: Optional[str] = Field(default=None, max_length=255)
    slack_webhook: Optional[str] = Field(default=None, max_length=1024)


class StartAgentRequest(BaseModel):
    node_ip: str = Field(..., min_length=1, max_length=255)
    log_file: Optional[str] = None
