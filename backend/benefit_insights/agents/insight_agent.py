"""Strands agent that rewrites the persona and statement of an insight.

This is the optional enrichment collaborator.  It only ever returns an
``EnrichmentResult``; callers merge it through
``benefit_insights.engine.enrichment`` which keeps timeline, priorities and
conversation from the local build.
"""

from __future__ import annotations

import json
import logging

from strands import Agent

from benefit_insights.config import get_model
from benefit_insights.models.insight import EnrichmentResult, Insight
from benefit_insights.models.profile import Profile

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """\
You are a workplace benefits guide. You receive a user's questionnaire
profile and a draft insight computed by a rules engine. Improve the wording
of the persona label and the one-paragraph statement so they feel personal
and encouraging.

## Rules

- Keep the persona to at most five words.
- Keep the statement under 60 words, second person, plain language.
- Only change theme_key when the profile clearly points to a different
  theme. Allowed values: retirement, protection, home, savings, foundation.
- Never give tax, legal or investment advice and never invent numbers that
  are not in the profile.
- Leave a field empty (null) if you have nothing better than the draft.
"""

# Fields the model never needs to see.
_PRIVATE_FIELDS = {"user_id", "full_name", "created_at", "derived"}


def create_agent() -> Agent:
    """Create the enrichment Strands agent (no tools)."""
    return Agent(
        model=get_model(),
        system_prompt=SYSTEM_PROMPT,
        tools=[],
    )


def build_prompt(profile: Profile, draft: Insight) -> str:
    answers = profile.model_dump(mode="json", exclude=_PRIVATE_FIELDS)
    summary = {
        "persona": draft.persona,
        "statement": draft.statement,
        "theme_key": draft.theme_key,
        "priorities": [priority.title for priority in draft.priorities],
    }
    return (
        "Questionnaire answers:\n"
        f"{json.dumps(answers, indent=2)}\n\n"
        "Draft insight:\n"
        f"{json.dumps(summary, indent=2)}\n\n"
        "Return an improved persona, statement and (optionally) theme_key."
    )


def request_enrichment(profile: Profile, draft: Insight) -> EnrichmentResult:
    """Ask the model for persona/statement/theme suggestions.

    Blocking; run it through ``enrich_with_fallback`` so a slow or failing
    provider never holds up the local result.
    """
    agent = create_agent()
    result = agent.structured_output(EnrichmentResult, build_prompt(profile, draft))
    logger.info("Received enrichment (theme_key=%s)", result.theme_key)
    return result
