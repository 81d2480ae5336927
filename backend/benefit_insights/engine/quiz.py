"""Questionnaire flow: the ordered question list and single-answer updates.

The master list in ``QUESTIONS`` never changes order.  ``questions_for``
only drops the conditional questions whose predicate is false for the answers
given so far.  ``update_form_value`` writes one answer, clears follow-up
answers that no longer apply, and returns a freshly normalized profile.
"""

from __future__ import annotations

import logging
import math
from datetime import date
from typing import Any

from benefit_insights.engine.normalizer import normalize
from benefit_insights.models.profile import DEGREE_LEVELS, PARTNERED_STATUSES, Profile
from benefit_insights.models.quiz import QuizOption, QuizQuestion

logger = logging.getLogger(__name__)


def _options(*pairs: tuple[str, str] | tuple[str, str, str]) -> list[QuizOption]:
    return [
        QuizOption(label=pair[0], value=pair[1], helper=pair[2] if len(pair) > 2 else None)
        for pair in pairs
    ]


MARITAL_OPTIONS = _options(
    ("Single", "single"),
    ("Married", "married"),
    ("Domestic partner", "partnered"),
    ("Divorced", "divorced"),
    ("Widowed", "widowed"),
    ("Other", "other"),
)

RESIDENCY_OPTIONS = _options(
    ("Citizen", "Citizen"),
    ("Permanent resident", "Permanent Resident"),
    ("Work visa", "Work Visa"),
    ("Student visa", "Student Visa"),
    ("Other", "Other"),
)

CITIZENSHIP_OPTIONS = _options(
    ("U.S. Citizen", "U.S. Citizen"),
    ("Dual citizen", "Dual citizen"),
    ("Permanent resident", "Permanent resident"),
    ("Work visa", "Work visa"),
    ("Other", "Other"),
)

EDUCATION_OPTIONS = _options(
    ("High school", "high-school"),
    ("Associate", "associate"),
    ("Bachelor's", "bachelor"),
    ("Master's", "master"),
    ("Doctorate", "doctorate"),
    ("Other", "other"),
)

COVERAGE_OPTIONS = _options(
    ("Just me", "self", "Solo coverage focused on you"),
    ("Me + partner", "self-plus-partner", "Pair coverage with shared benefits"),
    ("Me + dependents", "self-plus-family", "Family-first protections"),
)

HOME_OPTIONS = _options(
    ("Rent", "rent"),
    ("Own", "own"),
    ("Live with family", "with-family"),
    ("Other", "other"),
)

INCOME_OPTIONS = _options(
    ("Under $50k", "under-50k"),
    ("$50k - $80k", "50-80k"),
    ("$80k - $120k", "80-120k"),
    ("$120k - $160k", "120-160k"),
    ("$160k+", "160k-plus"),
)

HEALTH_OPTIONS = _options(
    ("Employer plan", "employer"),
    ("Partner's plan", "partner"),
    ("Marketplace plan", "marketplace"),
    ("No current coverage", "none"),
)

CONDITION_OPTIONS = _options(
    ("Asthma", "asthma"),
    ("Diabetes", "diabetes"),
    ("Heart condition", "heart"),
    ("High blood pressure", "hypertension"),
    ("Mental health", "mental-health"),
    ("Other", "other"),
)

CARE_OPTIONS = _options(
    ("Rarely", "rarely"),
    ("About once a year", "annually"),
    ("Several times a year", "frequently"),
)

PRESCRIPTION_OPTIONS = _options(
    ("None", "none"),
    ("Occasionally", "occasionally"),
    ("Regularly", "regularly"),
)

GOAL_OPTIONS = _options(
    ("Retire comfortably", "retirement"),
    ("Buy a home", "buy-home"),
    ("Protect my family", "family-protection"),
    ("Build an emergency fund", "emergency-fund"),
    ("Pay down debt", "pay-down-debt"),
    ("Fund education", "education"),
    ("Travel more", "travel"),
)

ACTIVITY_LEVEL_OPTIONS = _options(
    ("Relaxed", "relaxed", "Light activity"),
    ("Balanced", "balanced", "Mix of movement and rest"),
    ("Active lifestyle", "active", "Frequent workouts or sports"),
)

ACTIVITY_OPTIONS = _options(
    ("Running", "running"),
    ("Hiking", "hiking"),
    ("Gym", "gym"),
    ("Team sports", "sports"),
    ("Cycling", "cycling"),
    ("Yoga", "yoga"),
)


QUESTIONS: tuple[QuizQuestion, ...] = (
    QuizQuestion(
        id="full_name",
        title="What's your full name?",
        prompt="We use it to personalize your plan.",
        type="text",
        placeholder="First and last name",
    ),
    QuizQuestion(
        id="preferred_name",
        title="What should we call you?",
        prompt="A first name or nickname is perfect.",
        type="text",
        placeholder="Preferred name",
    ),
    QuizQuestion(
        id="age",
        title="How old are you?",
        prompt="Age lines up eligibility windows for your benefits.",
        type="number",
        min=18,
        max=75,
        placeholder="Enter your age",
    ),
    QuizQuestion(
        id="marital_status",
        title="What is your marital status?",
        prompt="We coordinate partner questions based on your answer.",
        type="select",
        options=MARITAL_OPTIONS,
        follow_up="spouse_has_separate_insurance",
    ),
    QuizQuestion(
        id="residency_status",
        title="What's your residency status?",
        prompt="Ensures compliance and enrollment reminders are accurate.",
        type="select",
        options=RESIDENCY_OPTIONS,
    ),
    QuizQuestion(
        id="citizenship",
        title="What best describes your citizenship?",
        prompt="We only use this to tailor plan paperwork guidance.",
        type="select",
        options=CITIZENSHIP_OPTIONS,
    ),
    QuizQuestion(
        id="employment_start_date",
        title="When did you start with your employer?",
        prompt="Some benefits unlock after a waiting period.",
        type="date",
        placeholder="YYYY-MM-DD",
    ),
    QuizQuestion(
        id="education_level",
        title="What's your highest education level?",
        prompt="Education can unlock student loan and learning benefits.",
        type="select",
        options=EDUCATION_OPTIONS,
        follow_up="education_major",
    ),
    QuizQuestion(
        id="education_major",
        title="What did you study?",
        prompt="Helps us point you to relevant learning benefits.",
        type="text",
        placeholder="Major or field",
        condition=lambda p: p.education_level in DEGREE_LEVELS,
    ),
    QuizQuestion(
        id="work_state",
        title="Which state do you work in?",
        prompt="State rules change some leave and disability benefits.",
        type="text",
        placeholder="State",
    ),
    QuizQuestion(
        id="coverage_preference",
        title="Who do you want coverage for?",
        prompt="Choose the household you want your benefits to support.",
        type="select",
        options=COVERAGE_OPTIONS,
        follow_up="dependents",
    ),
    QuizQuestion(
        id="dependents",
        title="How many dependents rely on you?",
        prompt="Include children or other people you plan to cover.",
        type="number",
        min=0,
        max=10,
        condition=lambda p: p.coverage_preference == "self-plus-family",
    ),
    QuizQuestion(
        id="spouse_has_separate_insurance",
        title="Does your partner have their own insurance?",
        prompt="Helps coordinate if you share coverage.",
        type="boolean",
        condition=lambda p: p.marital_status in PARTNERED_STATUSES,
    ),
    QuizQuestion(
        id="home_ownership",
        title="What's your housing situation?",
        prompt="We'll tailor protections around where you live.",
        type="select",
        options=HOME_OPTIONS,
    ),
    QuizQuestion(
        id="income_range",
        title="What's your household income?",
        prompt="This keeps savings and protections realistic.",
        type="select",
        options=INCOME_OPTIONS,
    ),
    QuizQuestion(
        id="health_coverage",
        title="Where does your health coverage come from?",
        prompt="We'll flag any gaps based on your answer.",
        type="select",
        options=HEALTH_OPTIONS,
    ),
    QuizQuestion(
        id="tobacco_use",
        title="Does anyone you cover use tobacco?",
        prompt="Helps us surface the right life and disability coverage reminders.",
        type="boolean",
        condition=lambda p: p.coverage_preference != "self",
    ),
    QuizQuestion(
        id="disability",
        title="Do you live with a disability?",
        prompt="We'll highlight accommodations and income protection.",
        type="boolean",
    ),
    QuizQuestion(
        id="has_health_conditions",
        title="Do you manage any ongoing health conditions?",
        prompt="Chronic care changes which plans fit best.",
        type="boolean",
        follow_up="chronic_conditions",
    ),
    QuizQuestion(
        id="chronic_conditions",
        title="Which conditions do you manage?",
        prompt="Choose all that apply.",
        type="multi-select",
        options=CONDITION_OPTIONS,
        condition=lambda p: p.has_health_conditions is True,
    ),
    QuizQuestion(
        id="primary_care_frequency",
        title="How often do you see a doctor?",
        prompt="Expected usage shapes deductible choices.",
        type="select",
        options=CARE_OPTIONS,
    ),
    QuizQuestion(
        id="prescription_frequency",
        title="How often do you fill prescriptions?",
        prompt="Pharmacy coverage varies a lot between plans.",
        type="select",
        options=PRESCRIPTION_OPTIONS,
    ),
    QuizQuestion(
        id="financial_goals",
        title="What are your financial goals?",
        prompt="Pick everything you're working toward.",
        type="multi-select",
        options=GOAL_OPTIONS,
    ),
    QuizQuestion(
        id="milestone_focus",
        title="What milestone is next for you?",
        prompt="A wedding, a new baby, a first home... anything on your mind.",
        type="text",
        placeholder="Your next milestone",
    ),
    QuizQuestion(
        id="savings_rate",
        title="How much do you save each month?",
        prompt="Estimate the percent of income you set aside.",
        type="slider",
        min=0,
        max=50,
        step=1,
        follow_up="wants_savings_support",
    ),
    QuizQuestion(
        id="wants_savings_support",
        title="Want help improving savings?",
        prompt="We'll send automation tips if you'd like reminders.",
        type="boolean",
        condition=lambda p: p.savings_rate < 10,
    ),
    QuizQuestion(
        id="risk_comfort",
        title="How comfortable are you with risk?",
        prompt="Slide from very low (1) to very high (5).",
        type="slider",
        min=1,
        max=5,
        step=1,
        follow_up="invests_in_markets",
    ),
    QuizQuestion(
        id="invests_in_markets",
        title="Do you invest in crypto or stocks?",
        prompt="We tailor education and guardrails based on this.",
        type="boolean",
        condition=lambda p: p.risk_comfort >= 4,
    ),
    QuizQuestion(
        id="contributes_to_retirement",
        title="Are you contributing to a retirement plan?",
        prompt="A 401(k), 403(b) or similar workplace plan.",
        type="boolean",
        follow_up="retirement_contribution_rate",
    ),
    QuizQuestion(
        id="retirement_contribution_rate",
        title="What percent of pay do you contribute?",
        prompt="We'll check it against your employer match.",
        type="slider",
        min=0,
        max=25,
        step=1,
        condition=lambda p: p.contributes_to_retirement is True,
    ),
    QuizQuestion(
        id="activity_level",
        title="How active is your lifestyle?",
        prompt="Pick the option that feels most like you.",
        type="select",
        options=ACTIVITY_LEVEL_OPTIONS,
    ),
    QuizQuestion(
        id="physically_active",
        title="Do you exercise regularly?",
        prompt="Wellness perks often reimburse the activities you already do.",
        type="boolean",
        follow_up="activity_list",
    ),
    QuizQuestion(
        id="activity_list",
        title="What keeps you moving?",
        prompt="Choose all the activities you enjoy.",
        type="multi-select",
        options=ACTIVITY_OPTIONS,
        condition=lambda p: p.physically_active is True,
    ),
    QuizQuestion(
        id="consent_to_follow_up",
        title="Can we follow up with reminders?",
        prompt="We'll only reach out about your benefits plan.",
        type="boolean",
    ),
)

_QUESTIONS_BY_ID: dict[str, QuizQuestion] = {question.id: question for question in QUESTIONS}

# Fields that may be left unanswered (None) rather than holding a default.
_NULLABLE_NUMBERS = frozenset({"age"})


def get_question(question_id: str) -> QuizQuestion | None:
    return _QUESTIONS_BY_ID.get(question_id)


def questions_for(profile: Profile) -> list[QuizQuestion]:
    """Return the questions that apply to *profile*, in master order."""
    return [question for question in QUESTIONS if question.applies_to(profile)]


def clamp_step(index: int, questions: list[QuizQuestion]) -> int:
    """Clamp a flow position so it always points at an existing question."""
    if not questions:
        return 0
    return max(0, min(index, len(questions) - 1))


def current_answer(profile: Profile, question: QuizQuestion) -> Any:
    return getattr(profile, question.id, None)


def is_answer_valid(question: QuizQuestion, value: Any) -> bool:
    """Whether *value* is a complete answer for *question*.

    The flow only advances past a question once this returns ``True``.
    """
    kind = question.type
    if kind == "text":
        return isinstance(value, str) and bool(value.strip())
    if kind in ("number", "slider"):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return False
        return math.isfinite(value)
    if kind == "date":
        if isinstance(value, date):
            return True
        return isinstance(value, str) and bool(value.strip())
    if kind == "select":
        return value is not None and value != ""
    if kind == "boolean":
        return value is True or value is False
    if kind == "multi-select":
        return isinstance(value, (list, tuple)) and len(value) > 0
    return False


# -- coercion -----------------------------------------------------------------

_UNCHANGED = object()


def _coerce_number(question: QuizQuestion, value: Any) -> Any:
    if isinstance(value, bool):
        return _UNCHANGED
    if value is None or (isinstance(value, str) and not value.strip()):
        return None if question.id in _NULLABLE_NUMBERS else _UNCHANGED
    try:
        number = float(value)
    except (TypeError, ValueError):
        return _UNCHANGED
    if not math.isfinite(number):
        return _UNCHANGED
    if question.min is not None:
        number = max(question.min, number)
    if question.max is not None:
        number = min(question.max, number)
    return int(round(number))


def _coerce_multi(question: QuizQuestion, value: Any) -> list[str]:
    if not isinstance(value, (list, tuple)):
        return []
    allowed = set(question.option_values())
    seen: list[str] = []
    for item in value:
        item = str(item)
        if item in allowed and item not in seen:
            seen.append(item)
    return seen


def _coerce(question: QuizQuestion, value: Any) -> Any:
    kind = question.type
    if kind == "text":
        return "" if value is None else str(value).strip()
    if kind in ("number", "slider"):
        return _coerce_number(question, value)
    if kind == "date":
        if isinstance(value, date):
            return value.isoformat()
        return "" if value is None else str(value).strip()
    if kind == "select":
        return value if value in question.option_values() else _UNCHANGED
    if kind == "boolean":
        return value if isinstance(value, bool) else None
    if kind == "multi-select":
        return _coerce_multi(question, value)
    return _UNCHANGED


# -- follow-up clearing -------------------------------------------------------

def _clear_stale_answers(values: dict[str, Any]) -> dict[str, Any]:
    """Reset answers whose triggering question no longer applies."""
    if values["physically_active"] is not True:
        values["activity_list"] = []
    if values["has_health_conditions"] is not True:
        values["chronic_conditions"] = []
    if values["coverage_preference"] != "self-plus-family":
        values["dependents"] = 0
    if values["coverage_preference"] == "self":
        values["tobacco_use"] = None
    if values["marital_status"] not in PARTNERED_STATUSES:
        values["spouse_has_separate_insurance"] = None
    if values["savings_rate"] >= 10:
        values["wants_savings_support"] = None
    if values["risk_comfort"] < 4:
        values["invests_in_markets"] = None
    if values["contributes_to_retirement"] is not True:
        values["retirement_contribution_rate"] = 0
    if values["education_level"] not in DEGREE_LEVELS:
        values["education_major"] = ""
    return values


def update_form_value(profile: Profile, question_id: str, value: Any) -> Profile:
    """Apply one answer and return a new, normalized profile.

    Unknown question ids and unusable values leave the profile untouched.
    """
    question = get_question(question_id)
    if question is None:
        logger.debug("Ignoring answer for unknown question %r", question_id)
        return profile

    coerced = _coerce(question, value)
    if coerced is _UNCHANGED:
        logger.debug("Ignoring unusable value %r for question %r", value, question_id)
        return profile

    values = profile.model_dump()
    values[question_id] = coerced
    values = _clear_stale_answers(values)
    return normalize(Profile.model_validate(values))


def hydrate_profile(template: Profile) -> Profile:
    """Prepare a stored or template profile for the questionnaire."""
    values = template.model_dump()
    if not values["preferred_name"].strip():
        parts = values["full_name"].split()
        values["preferred_name"] = parts[0] if parts else ""
    for field in ("activity_list", "chronic_conditions", "financial_goals"):
        values[field] = list(dict.fromkeys(values[field]))
    values["risk_comfort"] = max(1, min(5, values["risk_comfort"]))
    values["dependents"] = max(0, values["dependents"])
    values = _clear_stale_answers(values)
    return normalize(Profile.model_validate(values))
