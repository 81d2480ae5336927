"""Health check endpoint for benefit-insights.

Returns server status along with the store backend, the enrichment flag and
the number of stored profiles.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from benefit_insights.config import enrichment_enabled
from benefit_insights.dependencies import get_store
from benefit_insights.storage.store import UserStore

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/api/health")
async def health(store: UserStore = Depends(get_store)):
    """Health check endpoint."""
    try:
        profiles_count = len(store.profiles.keys())
    except OSError as exc:
        logger.warning("Failed to count stored profiles: %s", exc)
        profiles_count = 0

    return {
        "status": "ok",
        "store": store.kind,
        "enrichment_enabled": enrichment_enabled(),
        "profiles_count": profiles_count,
    }
