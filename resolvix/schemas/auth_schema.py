from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from resolvix.services.roles import Role, legacy_aliases, normalize_role

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class RegisterRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=255, pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=8, max_length=256)
    full_name: Optional[str] = Field(default=None, max_length=255)


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=255, pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=1, max_length=256)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class ProfileResponse(BaseModel):
    id: int
    email: str
    full_name: Optional[str] = None
    role: str
    status: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator("role", mode="before")
    @classmethod
    def _display_canonical_role(cls, v):
        return legacy_aliases().get(v, v)


class UpdateMeRequest(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=255)


class InviteMemberRequest(RegisterRequest):
    role: Role = "support"

    @field_validator("role", mode="before")
    @classmethod
    def _canonical_role(cls, v):
        return normalize_role(v)


class UpdateMemberRequest(BaseModel):
    role: Optional[Role] = None
    status: Optional[str] = Field(default=None, pattern="^(active|inactive)$")

    @field_validator("role", mode="before")
    @classmethod
    def _canonical_role(cls, v):
        return None if v is None else normalize_role(v)
