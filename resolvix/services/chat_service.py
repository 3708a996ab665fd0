import logging
from typing import Iterator, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from resolvix.core.errors import BackendError, ValidationError
from resolvix.models.chat_message import ChatMessage
from resolvix.services.change_feed import get_change_feed
from resolvix.services.ticket_service import get_ticket

logger = logging.getLogger(__name__)

MESSAGE_TYPES = ("user", "ai", "system")


def message_to_event(msg: ChatMessage) -> dict:
    return {
        "id": msg.id,
        "ticket_id": msg.ticket_id,
        "user_id": msg.user_id,
        "type": msg.type,
        "message": msg.message,
        "created_at": msg.created_at.isoformat() if msg.created_at else None,
    }


def post_message(
    db: Session,
    ticket_id: int,
    user_id: Optional[int],
    text: Optional[str],
    *,
    message_type: str = "user",
    attachments: Optional[dict] = None,
) -> ChatMessage:
    """Append a message to a ticket's thread. Messages are never edited or deleted."""
    body = (text or "").strip()
    if not body:
        raise ValidationError("Message cannot be empty")
    if message_type not in MESSAGE_TYPES:
        raise ValidationError(f"Unknown message type '{message_type}'")
    if message_type == "user" and user_id is None:
        raise ValidationError("User messages need an author")

    get_ticket(db, ticket_id)

    msg = ChatMessage(
        ticket_id=ticket_id,
        user_id=user_id if message_type == "user" else None,
        type=message_type,
        message=body,
        attachments=attachments,
    )
    try:
        db.add(msg)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Could not store chat message for ticket %s", ticket_id)
        raise BackendError("Could not send the message. Please retry.") from e
    db.refresh(msg)

    get_change_feed().publish("chat_messages", "INSERT", message_to_event(msg))
    return msg


def iter_messages(
    db: Session,
    ticket_id: int,
    *,
    message_type: Optional[str] = None,
    batch_size: int = 100,
) -> Iterator[ChatMessage]:
    """Lazily yield a ticket's messages, oldest first.

    Ties on created_at fall back to insertion order (id). Each call starts a
    fresh query, so the sequence can be restarted by calling again.
    """
    q = db.query(ChatMessage).filter(ChatMessage.ticket_id == ticket_id)
    if message_type:
        q = q.filter(ChatMessage.type == message_type)
    q = q.order_by(ChatMessage.created_at.asc(), ChatMessage.id.asc())
    yield from q.yield_per(batch_size)


def recent_history_text(db: Session, ticket_id: int, limit: int = 10) -> str:
    msgs = (
        db.query(ChatMessage)
        .filter(ChatMessage.ticket_id == ticket_id)
        .order_by(ChatMessage.created_at.desc(), ChatMessage.id.desc())
        .limit(limit)
        .all()
    )
    parts: list[str] = []
    for m in reversed(msgs):
        role = "Assistant" if m.type == "ai" else ("System" if m.type == "system" else "User")
        parts.append(f"{role}: {m.message}")
    return "\n".join(parts)
