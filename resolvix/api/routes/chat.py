from typing import List, Literal, Optional

from fastapi import APIRouter, BackgroundTasks, Depends
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from resolvix.api.dependencies import get_db
from resolvix.api.security import get_current_user
from resolvix.models.profile import Profile
from resolvix.schemas.chat_schema import AssistantQuery, ChatMessageResponse, PostMessageRequest
from resolvix.services.assistant_service import run_assistant_task
from resolvix.services.change_feed import get_change_feed, sse_stream
from resolvix.services.chat_service import iter_messages, post_message
from resolvix.services.ticket_service import get_ticket

router = APIRouter()


@router.get("/{ticket_id}/messages", response_model=List[ChatMessageResponse])
def read_thread(
    ticket_id: int,
    type: Optional[Literal["user", "ai", "system"]] = None,
    db: Session = Depends(get_db),
    user: Profile = Depends(get_current_user),
):
    get_ticket(db, ticket_id)
    return list(iter_messages(db, ticket_id, message_type=type))


@router.post("/{ticket_id}/messages", response_model=ChatMessageResponse, status_code=201)
def send_message(
    ticket_id: int,
    request: PostMessageRequest,
    db: Session = Depends(get_db),
    user: Profile = Depends(get_current_user),
):
    return post_message(db, ticket_id, user.id, request.message, attachments=request.attachments)


@router.post("/{ticket_id}/assistant", response_model=ChatMessageResponse, status_code=202)
def ask_assistant(
    ticket_id: int,
    request: AssistantQuery,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    user: Profile = Depends(get_current_user),
):
    """Store the question now; the assistant's answer arrives on the thread later."""
    question = post_message(db, ticket_id, user.id, request.query)
    background_tasks.add_task(run_assistant_task, db.get_bind(), ticket_id, question.message)
    return question


@router.get("/{ticket_id}/messages/stream")
async def stream_thread(ticket_id: int, user: Profile = Depends(get_current_user)):
    sub = get_change_feed().subscribe("chat_messages", ("INSERT",), ticket_id=ticket_id)
    return StreamingResponse(
        sse_stream(sub),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
