from sqlalchemy.orm import Session

from resolvix.models.notification_settings import NotificationSettings
from resolvix.models.profile import Profile

CHANNELS = ("email", "push", "sms", "slack")


def get_settings(db: Session, profile: Profile) -> NotificationSettings:
    """Return the profile's notification settings, creating defaults on first read."""
    row = db.query(NotificationSettings).filter(NotificationSettings.profile_id == profile.id).first()
    if row:
        return row
    row = NotificationSettings(
        profile_id=profile.id,
        email=True,
        push=True,
        sms=False,
        slack=True,
        email_address=profile.email,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def update_settings(db: Session, profile: Profile, changes: dict) -> NotificationSettings:
    row = get_settings(db, profile)
    for key, value in changes.items():
        if value is None and key in CHANNELS:
            continue
        setattr(row, key, value)
    db.commit()
    db.refresh(row)
    return row
