"""Pydantic models for derived insights.

An ``Insight`` is produced wholesale by
``benefit_insights.engine.insights.build_insights`` for one profile snapshot
and is never patched in place.  ``EnrichmentResult`` is the partial payload
the optional AI enrichment agent may return.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel

ThemeKey = Literal["retirement", "protection", "home", "savings", "foundation"]
Speaker = Literal["User", "Assistant"]

THEME_KEYS: tuple[str, ...] = ("retirement", "protection", "home", "savings", "foundation")


class Resource(BaseModel):
    """A link to supporting material."""

    title: str
    description: str
    url: str


class Priority(BaseModel):
    """One prioritized benefit recommendation."""

    title: str
    description: str
    category: str = "general"  # goal, protection, retirement
    resources: list[Resource] = []


class TimelineEntry(BaseModel):
    period: str  # This Week, Next 30 Days, This Year
    title: str
    description: str


class Tip(BaseModel):
    title: str
    description: str
    icon: str = "calendar"


class ConversationTurn(BaseModel):
    speaker: Speaker
    message: str


PlanVariant = Literal["conservative", "balanced", "bold"]


class Plan(BaseModel):
    """One benefits plan variant with a cost estimate and risk match."""

    plan_id: str
    plan_name: str
    variant: PlanVariant
    short_description: str
    reasoning: str
    monthly_cost_estimate: str  # e.g. "$165/mo"
    risk_match_score: int  # 0..100
    highlights: list[str] = []
    resources: list[Resource] = []


class RecommendedPlan(BaseModel):
    """A priority restated as a recommendation card."""

    id: str
    name: str
    reason: str
    resources: list[Resource] = []


class Insight(BaseModel):
    """Persona, priorities, timeline and conversation preview for a profile."""

    owner_name: str = ""
    persona: str
    statement: str
    priorities: list[Priority] = []
    theme_key: ThemeKey = "foundation"
    goal_theme: str = ""  # display label for theme_key
    focus_goal: str = ""
    resources: list[Resource] = []
    timeline: list[TimelineEntry] = []
    tips: list[Tip] = []
    conversation: list[ConversationTurn] = []
    prompts: list[str] = []
    plans: list[Plan] = []
    recommended_plans: list[RecommendedPlan] = []
    selected_plan_id: str | None = None

    def selected_plan(self, plan_id: str | None = None) -> Plan | None:
        """The plan with *plan_id*, or the selected one when no id is given."""
        wanted = plan_id or self.selected_plan_id
        for plan in self.plans:
            if plan.plan_id == wanted:
                return plan
        if not plan_id and self.plans:
            return self.plans[0]
        return None


class EnrichmentResult(BaseModel):
    """Fields a remote model is allowed to suggest for an insight."""

    persona: str | None = None
    statement: str | None = None
    theme_key: ThemeKey | None = None
