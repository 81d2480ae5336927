"""FastAPI dependencies shared by the route modules.

The user store and the enrichment callable are resolved here so tests (and
embedding applications) can swap them with ``app.dependency_overrides``.
"""

from __future__ import annotations

import logging
import threading

from benefit_insights.engine.enrichment import Enricher
from benefit_insights.storage.store import UserStore, create_user_store

logger = logging.getLogger(__name__)

_store: UserStore | None = None
_store_lock = threading.Lock()


def get_store() -> UserStore:
    global _store
    with _store_lock:
        if _store is None:
            _store = create_user_store()
            logger.info("Using %s user store", _store.kind)
        return _store


def get_enricher() -> Enricher:
    from benefit_insights.agents.insight_agent import request_enrichment

    return request_enrichment
