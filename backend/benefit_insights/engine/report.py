"""Plain-text plan summary report for a built insight."""

from __future__ import annotations

from benefit_insights.models.insight import Insight, Plan
from benefit_insights.models.profile import Profile

REPORT_TITLE = "Benefits Insights Report"


def build_report(profile: Profile, insight: Insight, plan: Plan) -> str:
    """Summarize the focus area, top priority, chosen plan and timeline."""
    top_priority = insight.priorities[0].title if insight.priorities else "Review guidance"
    lines = [
        REPORT_TITLE,
        f"User: {profile.full_name.strip() or insight.owner_name or 'Guest'}",
        f"Persona: {insight.persona}",
        f"Focus area: {insight.focus_goal}",
        f"Top priority: {top_priority}",
        f"Plan: {plan.plan_name} ({plan.monthly_cost_estimate}, risk match {plan.risk_match_score}/100)",
        f"Reasoning: {plan.reasoning}",
        "Timeline:",
    ]
    lines.extend(f"- {entry.period}: {entry.title}" for entry in insight.timeline)
    return "\n".join(lines) + "\n"
