"""Ticket assistant: answers a user's question inside the ticket thread.

The answer is produced by the LLM collaborator and appended to the thread as
an ordinary chat message of type ``ai``. It runs after the HTTP response as
a background task with its own session.
"""
import logging
from typing import Optional

from langchain_core.prompts import ChatPromptTemplate
from sqlalchemy.orm import Session

from resolvix.core.config import settings
from resolvix.core.errors import ResolvixError
from resolvix.models.chat_message import ChatMessage
from resolvix.models.ticket import Ticket
from resolvix.services.chat_service import post_message, recent_history_text
from resolvix.services import llm_router
from resolvix.services.ticket_service import get_ticket

logger = logging.getLogger(__name__)

UNAVAILABLE_REPLY = "The assistant is unavailable right now. Please try again in a moment."

_SYSTEM_PROMPT = """You are the Resolvix incident assistant helping an on-call team triage a ticket.
Answer the engineer's question using the ticket details and the conversation so far.
Be concise and practical: suggest concrete diagnostic steps or commands when useful.
If the details are not enough to answer, say what extra information would help.

Ticket:
{ticket}

Conversation so far:
{history}
"""


_PROMPT = ChatPromptTemplate.from_messages([
    ("system", _SYSTEM_PROMPT),
    ("human", "{query}"),
])


def describe_ticket(ticket: Ticket) -> str:
    lines = [
        f"Title: {ticket.title or '-'}",
        f"Status: {ticket.status} | Priority: {ticket.priority} | Severity: {ticket.severity or '-'}",
    ]
    if ticket.application:
        lines.append(f"Application: {ticket.application}")
    if ticket.system_ip:
        lines.append(f"Host: {ticket.system_ip}")
    if ticket.log_path:
        lines.append(f"Log file: {ticket.log_path}")
    if ticket.log_line:
        lines.append(f"Log line: {ticket.log_line}")
    if ticket.description:
        lines.append(f"Description: {ticket.description}")
    if ticket.log is not None:
        lines.append(f"Source log [{ticket.log.level}] {ticket.log.source}: {ticket.log.message}")
    return "\n".join(lines)


def generate_reply(ticket: Ticket, history: str, query: str) -> str:
    messages = _PROMPT.format_messages(
        ticket=describe_ticket(ticket),
        history=history or "(no messages yet)",
        query=query,
    )
    text, provider = llm_router.complete(messages)
    logger.info("Assistant reply for ticket %s via %s (%d chars)", ticket.id, provider, len(text))
    return text


def answer_in_thread(db: Session, ticket_id: int, query: str) -> Optional[ChatMessage]:
    """Generate the assistant's reply to ``query`` and append it to the thread.

    On LLM failure a short apology is appended instead; the cause only goes
    to the log.
    """
    try:
        ticket = get_ticket(db, ticket_id)
        history = recent_history_text(db, ticket_id, limit=settings.ASSISTANT_HISTORY_MESSAGES)
    except ResolvixError:
        logger.exception("Assistant could not load ticket %s", ticket_id)
        return None

    try:
        reply = generate_reply(ticket, history, query) or UNAVAILABLE_REPLY
    except Exception:
        logger.exception("Assistant generation failed for ticket %s", ticket_id)
        reply = UNAVAILABLE_REPLY

    try:
        return post_message(db, ticket_id, None, reply, message_type="ai")
    except ResolvixError:
        logger.exception("Could not store assistant reply for ticket %s", ticket_id)
        return None


def run_assistant_task(bind, ticket_id: int, query: str) -> None:
    """Background-task entry point; opens and closes its own session."""
    db = Session(bind=bind, autoflush=False)
    try:
        answer_in_thread(db, ticket_id, query)
    finally:
        db.close()
