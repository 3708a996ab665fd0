from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from resolvix.core.database import Base
import resolvix.models.log  # noqa: F401  (registers "Log" for the relationship)

class Ticket(Base):
    __tablename__ = "tickets"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=True)
    status = Column(String(32), default="open", nullable=False, index=True)
    priority = Column(String(32), default="medium", nullable=False, index=True)
    severity = Column(String(64), nullable=True)
    description = Column(Text, nullable=True)

    # Ordered profile ids, one per participating role pool (admin, engineer, support)
    assignees = Column(JSON, default=list, nullable=False)

    application = Column(String(255), nullable=True)
    system_ip = Column(String(64), nullable=True)
    log_path = Column(String(1024), nullable=True)
    log_line = Column(Text, nullable=True)
    timestamp = Column(DateTime(timezone=True), nullable=True)

    log_id = Column(Integer, ForeignKey("logs.id"), nullable=True, index=True)
    created_by = Column(Integer, ForeignKey("profiles.id"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    log = relationship("Log", lazy="joined")
