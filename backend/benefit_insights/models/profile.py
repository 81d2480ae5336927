"""Pydantic models for the questionnaire profile.

A ``Profile`` holds every answer the user gives during the benefits
questionnaire.  The nested ``Derived`` block is computed by
``benefit_insights.engine.normalizer`` whenever a profile is validated and
must never be edited by hand.
Optional booleans are tri-state: ``True``/``False`` once answered, ``None``
while unanswered.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field, model_validator

MaritalStatus = Literal["single", "married", "partnered", "divorced", "widowed", "other"]
ResidencyStatus = Literal["Citizen", "Permanent Resident", "Work Visa", "Student Visa", "Other"]
EducationLevel = Literal["high-school", "associate", "bachelor", "master", "doctorate", "other"]
CoveragePreference = Literal["self", "self-plus-partner", "self-plus-family"]
IncomeRange = Literal["under-50k", "50-80k", "80-120k", "120-160k", "160k-plus"]
HealthCoverage = Literal["employer", "partner", "marketplace", "none"]
HomeOwnership = Literal["rent", "own", "with-family", "other"]
ActivityLevel = Literal["relaxed", "balanced", "active"]
CareFrequency = Literal["rarely", "annually", "frequently"]
PrescriptionFrequency = Literal["none", "occasionally", "regularly"]
CoverageComplexity = Literal["low", "medium", "high"]

PARTNERED_STATUSES: tuple[str, ...] = ("married", "partnered")
DEGREE_LEVELS: tuple[str, ...] = ("bachelor", "master", "doctorate")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class Derived(BaseModel):
    """Risk fields computed from the rest of the profile."""

    risk_factor_score: int = 0
    activity_risk_modifier: int = 0
    coverage_complexity: CoverageComplexity = "low"


class Profile(BaseModel):
    """Complete questionnaire answer set for one user."""

    user_id: str | None = None

    # identity
    full_name: str = ""
    preferred_name: str = ""

    # demographic
    age: int | None = None
    marital_status: MaritalStatus = "single"
    dependents: int = 0
    citizenship: str = ""
    residency_status: ResidencyStatus = "Citizen"

    # employment
    employment_start_date: str = ""  # YYYY-MM-DD
    education_level: EducationLevel = "high-school"
    education_major: str = ""
    work_country: str = "United States"
    work_state: str = ""

    # coverage
    coverage_preference: CoveragePreference = "self"
    income_range: IncomeRange = "50-80k"
    health_coverage: HealthCoverage = "employer"
    spouse_has_separate_insurance: bool | None = None
    home_ownership: HomeOwnership = "rent"

    # financial behavior
    financial_goals: list[str] = []
    milestone_focus: str = ""
    savings_rate: int = 10  # percent of income
    wants_savings_support: bool | None = None
    risk_comfort: int = 3  # 1 (very low) .. 5 (very high)
    invests_in_markets: bool | None = None
    contributes_to_retirement: bool | None = None
    retirement_contribution_rate: int = 0

    # health / activity
    activity_level: ActivityLevel = "balanced"
    physically_active: bool | None = None
    activity_list: list[str] = []
    tobacco_use: bool | None = None
    disability: bool | None = None
    has_health_conditions: bool | None = None
    chronic_conditions: list[str] = []
    primary_care_frequency: CareFrequency = "annually"
    prescription_frequency: PrescriptionFrequency = "occasionally"

    # consent / meta
    is_guest: bool = False
    consent_to_follow_up: bool = False
    created_at: str = Field(default_factory=_now_iso)

    derived: Derived = Derived()

    @model_validator(mode="after")
    def _recompute_derived(self) -> Profile:
        from benefit_insights.engine.normalizer import compute_derived

        self.derived = compute_derived(self)
        return self

    @property
    def display_name(self) -> str:
        return self.preferred_name.strip() or self.full_name.strip()
