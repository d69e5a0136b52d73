import asyncio
import logging
import time
from datetime import date

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from api import state
from api.backend import AssistantBackend
from api.dependencies import get_backend, get_conversation, get_today
from api.metrics import (
    COMMANDS_TOTAL,
    CONFIRMATIONS_TOTAL,
    PENDING_CONFIRMATIONS,
    record_conflicts,
    record_request,
)
from conversation.state import ConversationState

router = APIRouter()
logger = logging.getLogger(__name__)


class MessageIn(BaseModel):
    text: str = Field(..., min_length=1)


@router.post("/assistant/{conversation_id}/messages")
async def post_message(
    conversation_id: str,
    payload: MessageIn,
    conversation: ConversationState = Depends(get_conversation),
    backend: AssistantBackend = Depends(get_backend),
    today: date = Depends(get_today),
) -> dict:
    start = time.time()
    logger.info(f"Message for conversation {conversation_id}: {payload.text[:50]}")

    reply = await asyncio.to_thread(backend.handle_message, payload.text, conversation, today)

    if reply.intent.startswith("confirmation_"):
        CONFIRMATIONS_TOTAL.labels(decision=reply.intent.split("_", 1)[1]).inc()
    else:
        COMMANDS_TOTAL.labels(type=reply.intent).inc()
    if isinstance(reply.data, dict):
        record_conflicts(reply.data.get("conflicts"))
    PENDING_CONFIRMATIONS.set(state.pending_confirmations())
    record_request("/assistant/messages", "ok" if reply.success else "failed", start)

    return {"conversation_id": conversation_id, **reply.model_dump()}


@router.get("/assistant/{conversation_id}")
async def get_conversation_state(conversation_id: str) -> dict:
    conversation = state.conversations.get(conversation_id)
    if conversation is None:
        raise HTTPException(status_code=404, detail="Conversation not found")
    pending = conversation.flow.pending
    return {
        "conversation_id": conversation_id,
        "awaiting_confirmation": conversation.flow.awaiting,
        "pending": pending.model_dump() if pending else None,
        "connection_attempts": conversation.connection_attempts,
        "history": [m.model_dump() for m in conversation.history],
    }


@router.delete("/assistant/{conversation_id}")
async def clear_conversation(conversation_id: str) -> dict:
    with state.conversations_lock:
        removed = state.conversations.pop(conversation_id, None)
    PENDING_CONFIRMATIONS.set(state.pending_confirmations())
    return {"status": "cleared" if removed else "not_found"}
