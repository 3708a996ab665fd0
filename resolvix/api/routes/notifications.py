from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from resolvix.api.dependencies import get_db
from resolvix.api.security import get_current_user
from resolvix.models.profile import Profile
from resolvix.schemas.settings_schema import NotificationSettingsResponse, NotificationSettingsUpdate
from resolvix.services.notification_service import get_settings, update_settings

router = APIRouter()


@router.get("/settings", response_model=NotificationSettingsResponse)
def read_settings(db: Session = Depends(get_db), user: Profile = Depends(get_current_user)):
    return get_settings(db, user)


@router.put("/settings", response_model=NotificationSettingsResponse)
def write_settings(
    request: NotificationSettingsUpdate,
    db: Session = Depends(get_db),
    user: Profile = Depends(get_current_user),
):
    return update_settings(db, user, request.model_dump(exclude_unset=True))
