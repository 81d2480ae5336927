"""Merge policy for optional AI enrichment of a locally built insight.

The remote model may only suggest ``persona``, ``statement`` and
``theme_key``.  Timeline, priorities, conversation and prompts always come
from the deterministic local build.  Any failure on the remote side leaves
the local insight untouched.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Mapping

from pydantic import ValidationError

from benefit_insights.engine.insights import resources_for, theme_for
from benefit_insights.models.insight import EnrichmentResult, Insight
from benefit_insights.models.profile import Profile

logger = logging.getLogger(__name__)

Enricher = Callable[[Profile, Insight], "EnrichmentResult | Mapping[str, Any] | None"]


def _coerce_result(remote: Any) -> EnrichmentResult | None:
    if remote is None:
        return None
    if isinstance(remote, EnrichmentResult):
        return remote
    if isinstance(remote, Mapping):
        allowed = {key: remote[key] for key in ("persona", "statement", "theme_key") if key in remote}
        try:
            return EnrichmentResult.model_validate(allowed)
        except ValidationError as exc:
            logger.warning("Ignoring malformed enrichment payload: %s", exc)
            return None
    logger.warning("Ignoring enrichment payload of type %s", type(remote).__name__)
    return None


def merge_enrichment(local: Insight, remote: Any) -> Insight:
    """Return a copy of *local* with any usable remote fields applied."""
    result = _coerce_result(remote)
    if result is None:
        return local

    update: dict[str, Any] = {}
    if result.persona and result.persona.strip():
        update["persona"] = result.persona.strip()
    if result.statement and result.statement.strip():
        update["statement"] = result.statement.strip()
    if result.theme_key and result.theme_key != local.theme_key:
        theme = theme_for(result.theme_key)
        update["theme_key"] = result.theme_key
        update["goal_theme"] = theme.label
        update["focus_goal"] = theme.focus
        update["resources"] = resources_for(result.theme_key)

    if not update:
        return local
    return local.model_copy(update=update, deep=True)


async def enrich_with_fallback(
    profile: Profile,
    local: Insight,
    enricher: Enricher,
    timeout: float,
) -> tuple[Insight, bool]:
    """Run *enricher* in a worker thread and merge its answer into *local*.

    Returns the insight to show and whether remote fields were applied.  A
    timeout or any enricher error falls back to the local insight.
    """
    try:
        remote = await asyncio.wait_for(asyncio.to_thread(enricher, profile, local), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning("Insight enrichment timed out after %.1fs; using local insight", timeout)
        return local, False
    except Exception:
        logger.exception("Insight enrichment failed; using local insight")
        return local, False

    merged = merge_enrichment(local, remote)
    return merged, merged is not local
