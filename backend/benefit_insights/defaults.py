"""Default and sample questionnaire profiles."""

from __future__ import annotations

from benefit_insights.engine.normalizer import normalize
from benefit_insights.models.profile import Profile


def default_profile(user_id: str | None = None, *, is_guest: bool = False) -> Profile:
    """A fresh, unanswered profile stamped with the current time."""
    return normalize(Profile(user_id=user_id, is_guest=is_guest))


def sample_completed_profile() -> Profile:
    """A fully answered profile used for demos and tests."""
    return normalize(
        Profile(
            user_id="sample-user",
            full_name="Jordan Rivera",
            preferred_name="Jordan",
            age=32,
            marital_status="partnered",
            dependents=1,
            citizenship="U.S. Citizen",
            residency_status="Citizen",
            employment_start_date="2021-05-01",
            education_level="master",
            education_major="Finance",
            work_country="United States",
            work_state="Pennsylvania",
            coverage_preference="self-plus-family",
            income_range="120-160k",
            health_coverage="partner",
            spouse_has_separate_insurance=True,
            home_ownership="own",
            financial_goals=["retirement", "education"],
            milestone_focus="a college fund for our daughter",
            savings_rate=18,
            risk_comfort=4,
            invests_in_markets=True,
            contributes_to_retirement=True,
            retirement_contribution_rate=8,
            activity_level="active",
            physically_active=True,
            activity_list=["hiking", "gym"],
            tobacco_use=False,
            disability=False,
            has_health_conditions=False,
            consent_to_follow_up=True,
        )
    )
