"""Chat controller shared by the CLI and any embedding application.

Holds the current insight and the running chat history for one user.
Screens that want to start a conversation with a prefilled question call
``open_chat(prompt)`` directly; ``send`` records the user turn, a pending
assistant turn, and then resolves it with the rule-based reply.
"""

from __future__ import annotations

import logging

from benefit_insights.engine.chat import (
    build_chat_reply,
    complete_pending,
    merge_chat_history,
    new_chat_entry,
)
from benefit_insights.models.chat import ChatEntry
from benefit_insights.models.insight import Insight

logger = logging.getLogger(__name__)

PENDING_MESSAGE = "..."


class ChatController:
    """Application state for one user's chat panel."""

    def __init__(self, insight: Insight | None = None, history: list[ChatEntry] | None = None) -> None:
        self.insight: Insight | None = insight
        self.history: list[ChatEntry] = list(history or [])
        self.is_open: bool = False
        self.draft: str = ""

    def open_chat(self, prompt: str | None = None) -> str:
        """Open the chat panel, optionally prefilled with *prompt*."""
        self.is_open = True
        if prompt:
            self.draft = prompt.strip()
        logger.debug("Chat opened (draft=%r)", self.draft)
        return self.draft

    def close(self) -> None:
        self.is_open = False
        self.draft = ""

    def refresh(self, insight: Insight | None) -> None:
        """Point the controller at a newly built insight."""
        self.insight = insight

    def suggested_prompts(self) -> list[str]:
        return list(self.insight.prompts) if self.insight else []

    def send(self, message: str | None = None) -> str:
        """Answer *message* (or the current draft) and record both turns."""
        text = (message if message is not None else self.draft).strip()
        if not text:
            raise ValueError("Cannot send an empty chat message")

        self.is_open = True
        self.draft = ""
        self.history = merge_chat_history(
            self.history,
            [
                new_chat_entry("User", text),
                new_chat_entry("Assistant", PENDING_MESSAGE, status="pending"),
            ],
        )
        reply = build_chat_reply(text, self.insight)
        self.history = complete_pending(self.history, reply)
        return reply

    def clear(self) -> None:
        self.history = []
        self.draft = ""
