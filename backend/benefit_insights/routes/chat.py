"""Chat endpoints.

- GET  /api/chat/{user_id} -> stored chat history
- POST /api/chat           -> rule-based reply, merged into the history
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from benefit_insights.dependencies import get_store
from benefit_insights.engine.chat import build_chat_reply, merge_chat_history, new_chat_entry
from benefit_insights.storage.store import UserStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["chat"])


class ChatRequest(BaseModel):
    user_id: str
    message: str


@router.get("/chat/{user_id}")
async def get_chat(user_id: str, store: UserStore = Depends(get_store)):
    return {"history": [entry.model_dump(mode="json") for entry in store.get_chat(user_id)]}


@router.post("/chat")
async def post_chat(body: ChatRequest, store: UserStore = Depends(get_store)):
    """Answer a chat message from the user's latest insight."""
    if not body.user_id.strip():
        raise HTTPException(status_code=400, detail="Missing user_id")
    message = body.message.strip()
    if not message:
        raise HTTPException(status_code=400, detail="Missing 'message'")

    insight = store.insights.get(body.user_id)
    reply = build_chat_reply(message, insight)

    history = merge_chat_history(
        store.get_chat(body.user_id),
        [new_chat_entry("User", message), new_chat_entry("Assistant", reply)],
    )
    store.chats.set(body.user_id, history)
    logger.debug("Chat reply for %s: %d entries stored", body.user_id, len(history))

    return {
        "reply": reply,
        "has_insights": insight is not None,
        "history": [entry.model_dump(mode="json") for entry in history],
    }
