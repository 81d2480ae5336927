"""Insight generation endpoint.

Builds the deterministic insight for the stored profile and, when enabled,
asks the enrichment agent for persona/statement suggestions.  The remote call
is best-effort: on timeout or error the local insight is returned as is.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from benefit_insights.config import enrichment_enabled, get_enrichment_timeout, get_priority_limit
from benefit_insights.dependencies import get_enricher, get_store
from benefit_insights.engine.enrichment import Enricher, enrich_with_fallback
from benefit_insights.engine.insights import build_insights
from benefit_insights.storage.store import UserStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["insights"])


class InsightsRequest(BaseModel):
    user_id: str
    use_enrichment: bool | None = None  # None -> configured default


@router.post("/insights")
async def generate_insights(
    body: InsightsRequest,
    store: UserStore = Depends(get_store),
    enricher: Enricher = Depends(get_enricher),
):
    """Rebuild and store the insight for a user's profile."""
    if not body.user_id.strip():
        raise HTTPException(status_code=400, detail="Missing user_id")

    profile = store.profiles.get(body.user_id)
    if profile is None:
        raise HTTPException(status_code=404, detail=f"Profile not found for {body.user_id!r}")

    insight = build_insights(profile, priority_limit=get_priority_limit())

    use_enrichment = enrichment_enabled() if body.use_enrichment is None else body.use_enrichment
    enriched = False
    if use_enrichment:
        insight, enriched = await enrich_with_fallback(
            profile, insight, enricher, timeout=get_enrichment_timeout()
        )

    store.insights.set(body.user_id, insight)
    logger.info("Insights generated for %s (enriched=%s)", body.user_id, enriched)

    return {
        "insights": insight.model_dump(mode="json"),
        "enriched": enriched,
        "data_source": "enriched" if enriched else "local",
    }


@router.get("/insights/{user_id}")
async def get_insights(user_id: str, store: UserStore = Depends(get_store)):
    """Return the last generated insight for a user."""
    insight = store.insights.get(user_id)
    if insight is None:
        raise HTTPException(status_code=404, detail=f"No insights generated for {user_id!r}")
    return insight.model_dump(mode="json")
