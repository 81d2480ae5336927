"""Pure insight-derivation engine.

Apart from the async enrichment helper, every function here is synchronous
and side-effect free: profiles and insights go in, new values come out.
Normalization, the questionnaire flow, the insight rules, chat replies and
the enrichment merge policy live in their own modules.
"""

from .chat import build_chat_reply, complete_pending, merge_chat_history, new_chat_entry
from .enrichment import enrich_with_fallback, merge_enrichment
from .insights import build_insights, classify_persona, classify_theme
from .normalizer import compute_derived, normalize
from .quiz import (
    QUESTIONS,
    clamp_step,
    hydrate_profile,
    is_answer_valid,
    questions_for,
    update_form_value,
)
from .report import build_report

__all__ = [
    "QUESTIONS",
    "build_chat_reply",
    "build_insights",
    "build_report",
    "clamp_step",
    "classify_persona",
    "classify_theme",
    "complete_pending",
    "compute_derived",
    "enrich_with_fallback",
    "hydrate_profile",
    "is_answer_valid",
    "merge_chat_history",
    "merge_enrichment",
    "new_chat_entry",
    "normalize",
    "questions_for",
    "update_form_value",
]
