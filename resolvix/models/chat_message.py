from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, JSON
from sqlalchemy.sql import func

from resolvix.core.database import Base


class ChatMessage(Base):
    __tablename__ = "chat_messages"

    id = Column(Integer, primary_key=True, index=True)
    ticket_id = Column(Integer, ForeignKey("tickets.id"), index=True, nullable=False)

    # NULL for assistant/system messages
    user_id = Column(Integer, ForeignKey("profiles.id"), nullable=True)
    # "user" | "ai" | "system"
    type = Column(String(16), nullable=False, default="user")
    message = Column(Text, nullable=False)
    attachments = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
