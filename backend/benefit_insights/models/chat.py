"""Pydantic model for the persisted chat history."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel

ChatSpeaker = Literal["Assistant", "User"]
ChatStatus = Literal["pending", "final"]


class ChatEntry(BaseModel):
    """One turn in a running conversation.

    A ``pending`` entry stands in for a reply that has not arrived yet and is
    replaced by the ``final`` entry of the same turn.
    """

    speaker: ChatSpeaker
    message: str
    timestamp: str  # ISO-8601
    status: ChatStatus = "final"
