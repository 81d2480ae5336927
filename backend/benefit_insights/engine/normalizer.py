"""Derived risk metrics for a profile.

``normalize`` is called after every answer and before every insight build so
the ``derived`` block never goes stale.  All scoring is monotone: more
dependents, more health conditions or a lower risk comfort can only raise the
risk score and the coverage-complexity bucket.
"""

from __future__ import annotations

from benefit_insights.models.profile import Derived, Profile

MAX_RISK_SCORE = 100
MAX_ACTIVITY_MODIFIER = 10

INCOME_WEIGHTS: dict[str, int] = {
    "under-50k": 6,
    "50-80k": 4,
    "80-120k": 2,
    "120-160k": 0,
    "160k-plus": 0,
}

COVERAGE_WEIGHTS: dict[str, int] = {
    "self": 0,
    "self-plus-partner": 3,
    "self-plus-family": 6,
}

ACTIVITY_BASE: dict[str, int] = {
    "relaxed": 0,
    "balanced": 2,
    "active": 4,
}


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def health_condition_count(profile: Profile) -> int:
    """Number of reported chronic conditions (at least 1 if the flag is set)."""
    listed = len(set(profile.chronic_conditions))
    return max(listed, 1 if profile.has_health_conditions else 0)


def activity_risk_modifier(profile: Profile) -> int:
    modifier = ACTIVITY_BASE.get(profile.activity_level, 0)
    if profile.physically_active is True:
        modifier += 2 * len(set(profile.activity_list))
    return min(MAX_ACTIVITY_MODIFIER, modifier)


def risk_factor_score(profile: Profile, activity_modifier: int | None = None) -> int:
    if activity_modifier is None:
        activity_modifier = activity_risk_modifier(profile)

    risk_comfort = _clamp(profile.risk_comfort, 1, 5)
    dependents = max(0, profile.dependents)

    score = (5 - risk_comfort) * 8
    score += activity_modifier
    score += 12 if profile.tobacco_use else 0
    score += 10 if profile.disability else 0
    score += 6 * min(health_condition_count(profile), 5)
    score += 3 * min(dependents, 6)
    score += INCOME_WEIGHTS.get(profile.income_range, 0)
    score += COVERAGE_WEIGHTS.get(profile.coverage_preference, 0)
    return _clamp(score, 0, MAX_RISK_SCORE)


def coverage_complexity(profile: Profile) -> str:
    dependents = max(0, profile.dependents)
    points = 2 if dependents > 2 else 1 if dependents > 0 else 0
    points += 1 if profile.coverage_preference != "self" else 0
    points += min(health_condition_count(profile), 2)
    if profile.primary_care_frequency == "frequently" or profile.prescription_frequency == "regularly":
        points += 1

    if points >= 3:
        return "high"
    if points == 2:
        return "medium"
    return "low"


def compute_derived(profile: Profile) -> Derived:
    modifier = activity_risk_modifier(profile)
    return Derived(
        risk_factor_score=risk_factor_score(profile, modifier),
        activity_risk_modifier=modifier,
        coverage_complexity=coverage_complexity(profile),
    )


def normalize(profile: Profile) -> Profile:
    """Return a copy of *profile* with its ``derived`` block recomputed."""
    return profile.model_copy(update={"derived": compute_derived(profile)}, deep=True)
