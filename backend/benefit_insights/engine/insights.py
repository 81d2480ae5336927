"""Rules engine that turns a profile into an ``Insight``.

Classification uses ordered rule tables: each table is walked top to bottom
and the first matching predicate wins, so overlapping rules (a family
household with high risk comfort, say) resolve by position in the table.

``build_insights`` is pure and total: every profile, including a freshly
defaulted one, yields a complete insight with exactly three timeline entries,
a non-empty resource list and three plan variants.
"""

from __future__ import annotations

from typing import Callable, NamedTuple

from benefit_insights.config import DEFAULT_PRIORITY_LIMIT
from benefit_insights.engine.normalizer import normalize
from benefit_insights.models.insight import (
    ConversationTurn,
    Insight,
    Plan,
    Priority,
    RecommendedPlan,
    Resource,
    TimelineEntry,
    Tip,
)
from benefit_insights.models.profile import Profile

Rule = tuple[Callable[[Profile], bool], str]


class Theme(NamedTuple):
    label: str
    focus: str


BENEFITS_HUB_URL = "https://www.lincolnfinancial.com/public/individuals/workplace-benefits/resources"
LIFE_EVENTS_URL = "https://www.lincolnfinancial.com/public/individuals/plan-for-life-events"
PREPAREDNESS_URL = "https://www.lincolnfinancial.com/public/individuals/emergency-preparedness"

TIMELINE_PERIODS: tuple[str, str, str] = ("This Week", "Next 30 Days", "This Year")
DEFAULT_PERSONA = "Financial Foundations Navigator"
DEFAULT_THEME = "foundation"


# -- persona ------------------------------------------------------------------

def _is_family(p: Profile) -> bool:
    return p.coverage_preference == "self-plus-family"


def _is_partnered(p: Profile) -> bool:
    return p.coverage_preference == "self-plus-partner"


PERSONA_RULES: tuple[Rule, ...] = (
    (lambda p: _is_family(p) and p.risk_comfort >= 4, "Family Growth Architect"),
    (_is_family, "Household Guardian"),
    (lambda p: _is_partnered(p) and p.risk_comfort <= 2, "Stability Strategist"),
    (_is_partnered, "Career Momentum Planner"),
    (lambda p: p.risk_comfort >= 4, "Solo Builder"),
)


def classify_persona(profile: Profile) -> str:
    for predicate, persona in PERSONA_RULES:
        if predicate(profile):
            return persona
    return DEFAULT_PERSONA


# -- theme --------------------------------------------------------------------

THEMES: dict[str, Theme] = {
    "retirement": Theme("Retirement confidence", "Grow retirement confidence"),
    "protection": Theme("Household protection", "Protect your household"),
    "home": Theme("Home ownership", "Build a down payment runway"),
    "savings": Theme("Savings discipline", "Elevate savings discipline"),
    "foundation": Theme("Financial foundation", "Build a safety-first plan"),
}


def _has_goal(*goals: str) -> Callable[[Profile], bool]:
    return lambda p: any(goal in p.financial_goals for goal in goals)


THEME_RULES: tuple[Rule, ...] = (
    (_has_goal("family-protection"), "protection"),
    (_has_goal("buy-home"), "home"),
    (_has_goal("retirement"), "retirement"),
    (_has_goal("emergency-fund", "pay-down-debt"), "savings"),
)


def classify_theme(profile: Profile) -> str:
    for predicate, theme_key in THEME_RULES:
        if predicate(profile):
            return theme_key
    return DEFAULT_THEME


def theme_for(theme_key: str) -> Theme:
    return THEMES.get(theme_key, THEMES[DEFAULT_THEME])


# -- resources ----------------------------------------------------------------

BENEFITS_HUB = Resource(
    title="Benefits enrollment center",
    description="Review your workplace benefits and submit elections in one place.",
    url=BENEFITS_HUB_URL,
)
COVERAGE_CHECKLIST = Resource(
    title="Life & disability checklist",
    description="Walk through the steps to size coverage and verify beneficiaries.",
    url=PREPAREDNESS_URL,
)
SAVINGS_AUTOMATION = Resource(
    title="Savings automation setup",
    description="Turn on payroll deductions and direct deposits for your savings goals.",
    url=LIFE_EVENTS_URL,
)
RETIREMENT_PLAYBOOK = Resource(
    title="Retirement contribution playbook",
    description="Compare contribution scenarios that fit your risk comfort.",
    url=LIFE_EVENTS_URL,
)
HOME_BUYING_GUIDE = Resource(
    title="Home buying roadmap",
    description="Plan a down payment, mortgage protection and closing-cost savings.",
    url=LIFE_EVENTS_URL,
)
EMERGENCY_GUIDE = Resource(
    title="Emergency preparedness guide",
    description="Build a cash cushion and keep key documents ready.",
    url=PREPAREDNESS_URL,
)

THEME_RESOURCES: dict[str, list[Resource]] = {
    "retirement": [RETIREMENT_PLAYBOOK, BENEFITS_HUB],
    "protection": [COVERAGE_CHECKLIST, BENEFITS_HUB],
    "home": [HOME_BUYING_GUIDE, SAVINGS_AUTOMATION],
    "savings": [SAVINGS_AUTOMATION, EMERGENCY_GUIDE],
    "foundation": [BENEFITS_HUB, EMERGENCY_GUIDE, COVERAGE_CHECKLIST],
}


def _copies(*resources: Resource) -> list[Resource]:
    return [resource.model_copy() for resource in resources]


def resources_for(theme_key: str) -> list[Resource]:
    return _copies(*(THEME_RESOURCES.get(theme_key) or THEME_RESOURCES[DEFAULT_THEME]))


# -- priorities ---------------------------------------------------------------

def _needs_savings_boost(p: Profile) -> bool:
    return p.savings_rate < 10


def _covers_others(p: Profile) -> bool:
    return p.coverage_preference != "self" or p.dependents > 0


def _contributes(p: Profile) -> bool:
    return p.contributes_to_retirement is True


def _goal_priority(profile: Profile, theme: Theme) -> Priority:
    if _needs_savings_boost(profile):
        return Priority(
            title="Stabilize your safety net",
            description=(
                f"You save about {profile.savings_rate}% today. Increase automatic transfers "
                "toward an emergency fund until you reach three months of expenses."
            ),
            category="goal",
            resources=_copies(SAVINGS_AUTOMATION, EMERGENCY_GUIDE),
        )
    return Priority(
        title=f"Put \"{theme.focus}\" on autopilot",
        description=(
            f"Your {profile.savings_rate}% savings rate is a strong base. Direct the surplus "
            "toward your top goal and review progress each quarter."
        ),
        category="goal",
        resources=_copies(SAVINGS_AUTOMATION),
    )


def _protection_priority(profile: Profile) -> Priority:
    if _covers_others(profile):
        return Priority(
            title="Strengthen family protection",
            description=(
                "Review life and disability benefits so they replace household income "
                "and cover long-term goals for the people who count on you."
            ),
            category="protection",
            resources=_copies(COVERAGE_CHECKLIST, BENEFITS_HUB),
        )
    return Priority(
        title="Optimize core coverage",
        description=(
            "Fine-tune health and supplemental plans so they match your usage "
            "and budget expectations."
        ),
        category="protection",
        resources=_copies(BENEFITS_HUB),
    )


def _retirement_priority(profile: Profile) -> Priority:
    if _contributes(profile):
        return Priority(
            title="Maximize retirement momentum",
            description=(
                f"You contribute {profile.retirement_contribution_rate}% today. Confirm it captures "
                "the full employer match and revisit beneficiaries annually."
            ),
            category="retirement",
            resources=_copies(RETIREMENT_PLAYBOOK),
        )
    return Priority(
        title="Jump-start retirement savings",
        description=(
            "Enroll in the company plan with an initial contribution and schedule "
            "a mid-year review to reassess increases."
        ),
        category="retirement",
        resources=_copies(RETIREMENT_PLAYBOOK),
    )


def build_priorities(profile: Profile, theme: Theme, limit: int = DEFAULT_PRIORITY_LIMIT) -> list[Priority]:
    """Goal, protection and retirement slots, deduplicated by title and capped."""
    candidates = [
        _goal_priority(profile, theme),
        _protection_priority(profile),
        _retirement_priority(profile),
    ]
    seen: set[str] = set()
    priorities: list[Priority] = []
    for priority in candidates:
        key = priority.title.strip().lower()
        if key in seen:
            continue
        seen.add(key)
        priorities.append(priority)
    return priorities[: max(0, limit)]


# -- plans --------------------------------------------------------------------

PLAN_BASE_NAME = "Benefits Guidance"
PLAN_VARIANTS: tuple[str, str, str] = ("conservative", "balanced", "bold")

_VARIANT_LABELS = {"conservative": "Shield", "balanced": "Balance", "bold": "Accelerate"}
_VARIANT_COST_OFFSET = {"conservative": 0, "balanced": 30, "bold": 60}
_VARIANT_RISK_OFFSET = {"conservative": -12, "balanced": 0, "bold": 10}

_VARIANT_CANVAS = {
    "conservative": "Lock in foundational protections and emergency support.",
    "balanced": "Balance savings automation with flexible coverage upgrades.",
    "bold": "Channel extra savings into growth pathways with guardrails.",
}
_VARIANT_REASONING = {
    "conservative": "This path minimizes surprises and keeps your loved ones covered first.",
    "balanced": "Grounded saving habits and coverage reviews keep you agile across milestones.",
    "bold": (
        "You're comfortable with calculated risk, so this path prioritizes investment "
        "growth while reinforcing safety nets."
    ),
}


def _clamp_risk(value: int) -> int:
    return max(1, min(5, value))


def monthly_cost_estimate(profile: Profile, variant: str) -> int:
    """Rough monthly premium in dollars for *variant*."""
    base = max(80, 110 + max(0, profile.dependents) * 45)
    lift = 25 if profile.coverage_preference != "self" else 0
    return base + lift + _VARIANT_COST_OFFSET[variant]


def risk_match_score(profile: Profile, variant: str) -> int:
    score = _clamp_risk(profile.risk_comfort) * 18 + profile.derived.activity_risk_modifier
    if _needs_savings_boost(profile):
        score -= 6
    return max(0, min(100, score + _VARIANT_RISK_OFFSET[variant]))


def _plan_highlights(profile: Profile) -> list[str]:
    if profile.coverage_preference == "self-plus-family":
        coverage = "Household protection audit"
    elif profile.coverage_preference == "self-plus-partner":
        coverage = "Partner coverage coordination"
    else:
        coverage = "Solo coverage refresh"

    if profile.activity_level == "active" or profile.physically_active is True:
        wellness = "Wellness perks matched to your routine"
    else:
        wellness = "Lifestyle-friendly wellness tips"

    if _needs_savings_boost(profile):
        cost = "Strategies to trim monthly premiums"
    elif profile.primary_care_frequency == "frequently" or profile.prescription_frequency == "regularly":
        cost = "Reduce surprise bills with lower deductibles"
    else:
        cost = "Balanced recommendations for cost and care"
    return [coverage, wellness, cost]


def _quick_actions(profile: Profile) -> Resource:
    if profile.health_coverage == "none":
        description = "Enroll in core medical and disability options this week."
    elif profile.health_coverage == "partner":
        description = "Coordinate with your partner to avoid duplicate coverage."
    else:
        description = "Verify beneficiaries and adjust contributions before open enrollment."
    return Resource(title="Quick actions", description=description, url=PREPAREDNESS_URL)


def describe_plan_variant(profile: Profile, variant: str, plan_id: str) -> Plan:
    if profile.coverage_preference == "self":
        conservative = "Keep essentials steady with enhanced protection for your income."
    else:
        conservative = "Keep essentials steady with enhanced protection for your household."
    descriptions = {
        "conservative": conservative,
        "balanced": "Blend savings, protection and growth to stay adaptable through upcoming milestones.",
        "bold": "Accelerate long-term wealth while reinforcing the guardrails you rely on.",
    }
    return Plan(
        plan_id=plan_id,
        plan_name=f"{PLAN_BASE_NAME} ({_VARIANT_LABELS[variant]})",
        variant=variant,
        short_description=descriptions[variant],
        reasoning=_VARIANT_REASONING[variant],
        monthly_cost_estimate=f"${monthly_cost_estimate(profile, variant)}/mo",
        risk_match_score=risk_match_score(profile, variant),
        highlights=_plan_highlights(profile),
        resources=[
            BENEFITS_HUB.model_copy(),
            Resource(title="Personalized plan canvas", description=_VARIANT_CANVAS[variant], url=LIFE_EVENTS_URL),
            _quick_actions(profile),
        ],
    )


def build_plans(profile: Profile) -> list[Plan]:
    """Conservative, balanced and bold variants, in that order."""
    owner = profile.user_id or "guest"
    return [
        describe_plan_variant(profile, variant, f"plan-{owner}-{index}")
        for index, variant in enumerate(PLAN_VARIANTS, 1)
    ]


def build_recommended_plans(priorities: list[Priority]) -> list[RecommendedPlan]:
    return [
        RecommendedPlan(
            id=f"priority-{priority.category}",
            name=priority.title,
            reason=priority.description,
            resources=[resource.model_copy() for resource in priority.resources],
        )
        for priority in priorities
    ]


# -- timeline -----------------------------------------------------------------

def describe_coverage(profile: Profile) -> str:
    if profile.coverage_preference == "self-plus-family":
        count = max(0, profile.dependents)
        if count:
            return f"family coverage for you and {count} dependent{'' if count == 1 else 's'}"
        return "family coverage"
    if profile.coverage_preference == "self-plus-partner":
        return "you + partner coverage"
    return "individual coverage"


def stated_goal(profile: Profile, theme: Theme) -> str:
    return profile.milestone_focus.strip() or theme.focus.lower()


def build_timeline(profile: Profile, theme: Theme) -> list[TimelineEntry]:
    goal = stated_goal(profile, theme)
    this_week, next_30_days, this_year = TIMELINE_PERIODS
    return [
        TimelineEntry(
            period=this_week,
            title="Confirm core coverage",
            description=(
                f"Validate your {describe_coverage(profile)} elections and update dependents "
                "in your HR portal if anything has changed."
            ),
        ),
        TimelineEntry(
            period=next_30_days,
            title="Align savings goals",
            description=(
                f"Keep your {profile.savings_rate}% savings rate on track and point new "
                f"contributions toward {goal}."
            ),
        ),
        TimelineEntry(
            period=this_year,
            title="Review your long-term plan",
            description=(
                f"Revisit beneficiaries, retirement contributions and progress toward {goal} "
                "before open enrollment."
            ),
        ),
    ]


# -- conversation & prompts ---------------------------------------------------

def build_conversation(profile: Profile, theme: Theme, priorities: list[Priority]) -> list[ConversationTurn]:
    name = profile.display_name or "there"
    turns: list[ConversationTurn] = []

    milestone = profile.milestone_focus.strip()
    if milestone:
        turns.append(ConversationTurn(speaker="User", message=f"My next milestone is {milestone}."))
        turns.append(
            ConversationTurn(
                speaker="Assistant",
                message=f"Got it, {name}. We'll build your {theme.label.lower()} plan around {milestone}.",
            )
        )

    turns.append(ConversationTurn(speaker="User", message="What should I tackle first?"))
    if priorities:
        first = priorities[0].title.lower()
        answer = f"Start with {first} this week."
        if len(priorities) > 1:
            answer += f" After that, we'll line up {priorities[1].title.lower()} so nothing slips through the cracks."
    else:
        answer = f"We'll keep building around {theme.focus.lower()} every step of the way."
    turns.append(ConversationTurn(speaker="Assistant", message=answer))
    return turns


def build_prompts(profile: Profile) -> list[str]:
    prompts = [
        "How do I capture my full employer match?"
        if _contributes(profile)
        else "How do I start contributing to my 401(k)?",
        "Which life and disability coverage fits my household?"
        if _covers_others(profile)
        else "Do I need more disability coverage?",
    ]
    if _needs_savings_boost(profile):
        prompts.append("How can I automate my savings?")
    return prompts


TIPS: tuple[Tip, ...] = (
    Tip(
        title="Automate contribution checkpoints",
        description="Set quarterly reminders to review savings and debt paydown alongside benefit enrollment windows.",
        icon="calendar",
    ),
    Tip(
        title="Document coverage confirmations",
        description="Store plan summaries, beneficiary confirmations and policy contacts in a single secure workspace.",
        icon="shield",
    ),
    Tip(
        title="Grow financial literacy moments",
        description="Bookmark learning modules on income protection, retirement investing and care planning.",
        icon="book",
    ),
)


def build_statement(profile: Profile, theme: Theme) -> str:
    return (
        f"We aligned your benefits around {describe_coverage(profile)}, keeping pace with "
        f"your risk comfort of {profile.risk_comfort}/5 while you {theme.focus.lower()}."
    )


def build_insights(profile: Profile, *, priority_limit: int = DEFAULT_PRIORITY_LIMIT) -> Insight:
    """Derive the full insight for *profile*."""
    data = normalize(profile)
    theme_key = classify_theme(data)
    theme = theme_for(theme_key)
    priorities = build_priorities(data, theme, priority_limit)
    plans = build_plans(data)

    return Insight(
        owner_name=data.display_name,
        persona=classify_persona(data),
        statement=build_statement(data, theme),
        priorities=priorities,
        theme_key=theme_key,
        goal_theme=theme.label,
        focus_goal=theme.focus,
        resources=resources_for(theme_key),
        timeline=build_timeline(data, theme),
        tips=[tip.model_copy() for tip in TIPS],
        conversation=build_conversation(data, theme, priorities),
        prompts=build_prompts(data),
        plans=plans,
        recommended_plans=build_recommended_plans(priorities),
        selected_plan_id=plans[1].plan_id,
    )
