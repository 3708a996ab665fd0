from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func

from resolvix.core.database import Base


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    full_name = Column(String(255), nullable=True)

    # "admin" | "engineer" | "support" (see services.roles)
    role = Column(String(32), nullable=False, default="support", index=True)
    status = Column(String(32), nullable=False, default="active")

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
