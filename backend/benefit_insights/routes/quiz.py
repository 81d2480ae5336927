"""Questionnaire endpoints.

- GET  /api/quiz/{user_id}/questions -> applicable questions and answers
- POST /api/quiz/{user_id}/answer    -> validate and apply one answer
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from benefit_insights.dependencies import get_store
from benefit_insights.engine.quiz import (
    clamp_step,
    current_answer,
    get_question,
    is_answer_valid,
    questions_for,
    update_form_value,
)
from benefit_insights.models.profile import Profile
from benefit_insights.routes.profile import load_profile
from benefit_insights.storage.store import UserStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["quiz"])


class AnswerRequest(BaseModel):
    question_id: str
    value: Any = None
    step: int | None = None  # position of the question in the current flow


def _flow(profile: Profile) -> list[dict[str, Any]]:
    return [
        {**question.to_public_dict(), "answer": current_answer(profile, question)}
        for question in questions_for(profile)
    ]


@router.get("/quiz/{user_id}/questions")
async def list_questions(user_id: str, store: UserStore = Depends(get_store)):
    """Questions that apply to the user's answers so far, in order."""
    profile = load_profile(store, user_id)
    return {"questions": _flow(profile)}


@router.post("/quiz/{user_id}/answer")
async def answer_question(user_id: str, body: AnswerRequest, store: UserStore = Depends(get_store)):
    """Apply one answer and return the updated flow.

    ``next_step`` is the position after the answered question, clamped to
    the (possibly shorter) new flow.
    """
    question = get_question(body.question_id)
    if question is None:
        raise HTTPException(status_code=404, detail=f"Unknown question: {body.question_id!r}")
    unknown_option = question.type == "select" and body.value not in question.option_values()
    if unknown_option or not is_answer_valid(question, body.value):
        raise HTTPException(
            status_code=422,
            detail=f"Invalid answer for {question.id!r} (expected {question.type})",
        )

    profile = load_profile(store, user_id)
    if not question.applies_to(profile):
        raise HTTPException(
            status_code=422,
            detail=f"Question {question.id!r} is not part of the current flow",
        )

    profile = update_form_value(profile, question.id, body.value)
    store.profiles.set(user_id, profile)

    flow = questions_for(profile)
    ids = [q.id for q in flow]
    position = body.step if body.step is not None else ids.index(question.id) if question.id in ids else 0
    next_step = clamp_step(position + 1, flow)

    return {
        "profile": profile.model_dump(mode="json"),
        "questions": _flow(profile),
        "next_step": next_step,
        "complete": position + 1 >= len(flow),
    }
