"""Plan summary report endpoint.

- POST /api/report -> text report for the stored profile, insight and plan
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from benefit_insights.dependencies import get_store
from benefit_insights.engine.report import build_report
from benefit_insights.storage.store import UserStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["report"])


class ReportRequest(BaseModel):
    user_id: str
    plan_id: str | None = None  # None -> the insight's selected plan


@router.post("/report")
async def generate_report(body: ReportRequest, store: UserStore = Depends(get_store)):
    if not body.user_id.strip():
        raise HTTPException(status_code=400, detail="Missing user_id")

    profile = store.profiles.get(body.user_id)
    insight = store.insights.get(body.user_id)
    if profile is None or insight is None:
        raise HTTPException(status_code=404, detail=f"Profile not ready for {body.user_id!r}")

    plan = insight.selected_plan(body.plan_id)
    if plan is None:
        raise HTTPException(status_code=404, detail=f"Unknown plan: {body.plan_id!r}")

    logger.info("Report generated for %s (plan=%s)", body.user_id, plan.plan_id)
    return {"plan_id": plan.plan_id, "report": build_report(profile, insight, plan)}
