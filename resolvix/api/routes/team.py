from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from resolvix.api.dependencies import get_db
from resolvix.api.security import get_current_user, require_admin
from resolvix.models.profile import Profile
from resolvix.schemas.auth_schema import InviteMemberRequest, ProfileResponse, UpdateMemberRequest
from resolvix.services.roles import normalize_role
from resolvix.services.team_service import DuplicateEmailError, create_profile, list_profiles, update_profile

router = APIRouter()


@router.get("/", response_model=List[ProfileResponse])
def list_team(
    role: Optional[str] = None,
    db: Session = Depends(get_db),
    user: Profile = Depends(get_current_user),
):
    if role:
        try:
            role = normalize_role(role)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
    return list_profiles(db, role=role)


@router.post("/", response_model=ProfileResponse, status_code=201)
def invite_member(request: InviteMemberRequest, db: Session = Depends(get_db), admin: Profile = Depends(require_admin)):
    try:
        return create_profile(
            db,
            email=request.email,
            password=request.password,
            full_name=request.full_name,
            role=request.role,
        )
    except DuplicateEmailError:
        raise HTTPException(status_code=409, detail="Email already registered")


@router.patch("/{profile_id}", response_model=ProfileResponse)
def update_member(
    profile_id: int,
    request: UpdateMemberRequest,
    db: Session = Depends(get_db),
    admin: Profile = Depends(require_admin),
):
    if profile_id == admin.id and request.role not in (None, "admin"):
        raise HTTPException(status_code=400, detail="Admins cannot demote themselves")
    return update_profile(db, profile_id, role=request.role, status=request.status)
