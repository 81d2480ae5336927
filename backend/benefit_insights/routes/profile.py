"""Profile management endpoints for benefit-insights.

Read, replace, or reset a user's questionnaire profile.  Every profile that
leaves these routes has its derived block freshly computed.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from benefit_insights.defaults import default_profile
from benefit_insights.dependencies import get_store
from benefit_insights.engine.normalizer import normalize
from benefit_insights.engine.quiz import hydrate_profile
from benefit_insights.models.profile import Profile
from benefit_insights.storage.store import UserStore

logger = logging.getLogger(__name__)

router = APIRouter()


def load_profile(store: UserStore, user_id: str) -> Profile:
    """Stored profile for *user_id*, or a fresh default one."""
    profile = store.profiles.get(user_id)
    if profile is None:
        return default_profile(user_id)
    return normalize(profile)


@router.get("/api/profile/{user_id}")
async def get_profile(user_id: str, store: UserStore = Depends(get_store)):
    """Get the stored profile, or an unanswered default profile."""
    return load_profile(store, user_id).model_dump(mode="json")


@router.put("/api/profile/{user_id}")
async def put_profile(user_id: str, profile: Profile, store: UserStore = Depends(get_store)):
    """Replace the stored profile.

    The payload is hydrated (follow-up answers that no longer apply are
    cleared) and normalized before it is saved.
    """
    hydrated = hydrate_profile(profile.model_copy(update={"user_id": user_id}))
    store.profiles.set(user_id, hydrated)
    logger.info("Profile saved for %s", user_id)
    return hydrated.model_dump(mode="json")


@router.delete("/api/profile/{user_id}")
async def reset_profile(user_id: str, store: UserStore = Depends(get_store)):
    """Reset a user: drop profile, insights and chat history."""
    removed = store.reset(user_id)
    logger.info("Reset data for %s (existed=%s)", user_id, removed)
    return {
        "reset": removed,
        "profile": default_profile(user_id).model_dump(mode="json"),
    }
