from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from resolvix.api.dependencies import get_db
from resolvix.api.security import AUTH_COOKIE, get_current_user
from resolvix.models.profile import Profile
from resolvix.schemas.auth_schema import (
    LoginRequest,
    ProfileResponse,
    RegisterRequest,
    TokenResponse,
    UpdateMeRequest,
)
from resolvix.services.auth_service import authenticate, create_access_token
from resolvix.services.team_service import DuplicateEmailError, create_profile, update_profile


router = APIRouter()


@router.post("/register", response_model=ProfileResponse)
def register(request: RegisterRequest, db: Session = Depends(get_db)):
    # Self sign-up always lands in the support role; admins promote from Team.
    try:
        return create_profile(
            db,
            email=request.email,
            password=request.password,
            full_name=request.full_name,
            role="support",
        )
    except DuplicateEmailError:
        raise HTTPException(status_code=409, detail="Email already registered")


@router.post("/login", response_model=TokenResponse)
def login(request: LoginRequest, response: Response, db: Session = Depends(get_db)):
    profile = authenticate(db, request.email, request.password)
    token = create_access_token(subject=str(profile.id))
    response.set_cookie(AUTH_COOKIE, token, httponly=True, samesite="lax")
    return TokenResponse(access_token=token)


@router.post("/logout", status_code=204)
def logout():
    # Tokens are stateless; signing out just drops the cookie.
    response = Response(status_code=204)
    response.delete_cookie(AUTH_COOKIE)
    return response


@router.get("/me", response_model=ProfileResponse)
def me(user: Profile = Depends(get_current_user)):
    return user


@router.patch("/me", response_model=ProfileResponse)
def update_me(request: UpdateMeRequest, db: Session = Depends(get_db), user: Profile = Depends(get_current_user)):
    return update_profile(db, user.id, full_name=request.full_name)
