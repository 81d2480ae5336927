"""Key-value stores for per-user profiles, insights and chat history.

Routes and the CLI receive a ``UserStore`` instead of reaching for global
state.  Two backends exist: an in-process dictionary (tests, ephemeral
servers) and JSON files under ``~/.benefit-insights/``.  Records are
validated through pydantic on the way in and out, so a stored value
round-trips with ``None`` answers intact.
"""

from __future__ import annotations

import json
import logging
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Generic, TypeVar

from pydantic import TypeAdapter, ValidationError

from benefit_insights.config import get_store_kind
from benefit_insights.models.chat import ChatEntry
from benefit_insights.models.insight import Insight
from benefit_insights.models.profile import Profile
from benefit_insights.storage.filesystem import (
    get_chats_dir,
    get_insights_dir,
    get_profiles_dir,
    get_record_path,
    list_user_ids,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class KeyValueStore(ABC, Generic[T]):
    """get/set/delete of one record type keyed by user id."""

    @abstractmethod
    def get(self, user_id: str) -> T | None: ...

    @abstractmethod
    def set(self, user_id: str, value: T) -> None: ...

    @abstractmethod
    def delete(self, user_id: str) -> bool: ...

    @abstractmethod
    def keys(self) -> list[str]: ...


class InMemoryStore(KeyValueStore[T]):
    """Dictionary-backed store; values are kept as JSON-compatible dicts."""

    def __init__(self, adapter: TypeAdapter[T]) -> None:
        self._adapter = adapter
        self._data: dict[str, object] = {}
        self._lock = threading.Lock()

    def get(self, user_id: str) -> T | None:
        with self._lock:
            raw = self._data.get(user_id)
        if raw is None:
            return None
        return self._adapter.validate_python(raw)

    def set(self, user_id: str, value: T) -> None:
        raw = self._adapter.dump_python(value, mode="json")
        with self._lock:
            self._data[user_id] = raw

    def delete(self, user_id: str) -> bool:
        with self._lock:
            return self._data.pop(user_id, None) is not None

    def keys(self) -> list[str]:
        with self._lock:
            return sorted(self._data)


class JsonFileStore(KeyValueStore[T]):
    """One pretty-printed JSON file per user inside *directory*."""

    def __init__(self, directory: Path, adapter: TypeAdapter[T]) -> None:
        self.directory = directory
        self._adapter = adapter

    def _path(self, user_id: str) -> Path:
        return get_record_path(self.directory, user_id)

    def get(self, user_id: str) -> T | None:
        path = self._path(user_id)
        if not path.exists():
            return None
        try:
            raw = path.read_text(encoding="utf-8")
            return self._adapter.validate_json(raw)
        except (OSError, ValidationError, ValueError) as exc:
            logger.warning("Failed to load %s: %s. Treating it as missing.", path, exc)
            return None

    def set(self, user_id: str, value: T) -> None:
        path = self._path(user_id)
        path.parent.mkdir(parents=True, exist_ok=True)
        payload = self._adapter.dump_python(value, mode="json")
        path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        logger.debug("Saved %s", path)

    def delete(self, user_id: str) -> bool:
        path = self._path(user_id)
        if not path.exists():
            return False
        path.unlink()
        return True

    def keys(self) -> list[str]:
        return list_user_ids(self.directory)


PROFILE_ADAPTER: TypeAdapter[Profile] = TypeAdapter(Profile)
INSIGHT_ADAPTER: TypeAdapter[Insight] = TypeAdapter(Insight)
CHAT_ADAPTER: TypeAdapter[list[ChatEntry]] = TypeAdapter(list[ChatEntry])


class UserStore:
    """Profiles, insights and chat history for every user."""

    def __init__(
        self,
        profiles: KeyValueStore[Profile],
        insights: KeyValueStore[Insight],
        chats: KeyValueStore[list[ChatEntry]],
        kind: str = "custom",
    ) -> None:
        self.profiles = profiles
        self.insights = insights
        self.chats = chats
        self.kind = kind

    @classmethod
    def in_memory(cls) -> UserStore:
        return cls(
            InMemoryStore(PROFILE_ADAPTER),
            InMemoryStore(INSIGHT_ADAPTER),
            InMemoryStore(CHAT_ADAPTER),
            kind="memory",
        )

    @classmethod
    def on_disk(cls) -> UserStore:
        return cls(
            JsonFileStore(get_profiles_dir(), PROFILE_ADAPTER),
            JsonFileStore(get_insights_dir(), INSIGHT_ADAPTER),
            JsonFileStore(get_chats_dir(), CHAT_ADAPTER),
            kind="file",
        )

    def get_chat(self, user_id: str) -> list[ChatEntry]:
        return self.chats.get(user_id) or []

    def reset(self, user_id: str) -> bool:
        """Remove everything stored for *user_id*; True if anything existed."""
        removed = [
            self.profiles.delete(user_id),
            self.insights.delete(user_id),
            self.chats.delete(user_id),
        ]
        return any(removed)


def create_user_store(kind: str | None = None) -> UserStore:
    """Build the store selected by *kind* or by configuration."""
    kind = kind or get_store_kind()
    if kind == "memory":
        return UserStore.in_memory()
    return UserStore.on_disk()
