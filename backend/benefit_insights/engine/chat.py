"""Rule-based chat replies and chat history merging.

``build_chat_reply`` answers free text from an already built insight without
calling any model.  ``CHAT_RULES`` is checked in order and the first pattern
found in the lower-cased message wins; reordering the table changes which
reply a mixed question gets.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Callable, Iterable

from benefit_insights.models.chat import ChatEntry
from benefit_insights.models.insight import Insight

NO_INSIGHT_REPLY = (
    "I'll have personalized answers once you complete the questionnaire. "
    "Come back after you finish it and we'll pick up from there."
)
GENERIC_REPLY = (
    "Ask about your timeline, your retirement contributions, helpful resources "
    "or your main goal and I'll guide you."
)


def _timeline_reply(insight: Insight) -> str:
    if not insight.timeline:
        return "We'll add a new milestone once you refresh your plan."
    first = insight.timeline[0]
    reply = f"Kick things off with “{first.title}” {first.period.lower()}."
    if len(insight.timeline) > 1:
        second = insight.timeline[1]
        reply += f" Then {second.title.lower()} over the {second.period.lower()}."
    return reply


def _retirement_reply(insight: Insight) -> str:
    priority = next((p for p in insight.priorities if p.category == "retirement"), None)
    if priority is None:
        return "Retirement isn't in your top priorities yet. Ask me to revisit it after you refresh your plan."
    return f"{priority.title}: {priority.description}"


def _resources_reply(insight: Insight) -> str:
    if not insight.resources:
        return "I'll add more resources after your next plan refresh."
    resource = insight.resources[0]
    return f"Open “{resource.title}” ({resource.url}) for a quick walkthrough. {resource.description}"


def _goal_reply(insight: Insight) -> str:
    reply = f"Your focus is {insight.goal_theme.lower() or 'your financial foundation'}"
    if insight.priorities:
        reply += f". Start with {insight.priorities[0].title.lower()}"
    return reply + "."


def _greeting_reply(insight: Insight) -> str:
    name = insight.owner_name or "there"
    return f"Hi {name}! Ask me about your timeline, retirement or the resources in your plan."


def _thanks_reply(insight: Insight) -> str:
    return "You're welcome! Ping me anytime you want to check off the next priority."


def _cost_reply(insight: Insight) -> str:
    plan = insight.selected_plan()
    if plan is None:
        return "I'll have a cost estimate once you refresh your plan."
    return (
        f"The current estimate for {plan.plan_name} is {plan.monthly_cost_estimate}. "
        "Adjusting coverage within your priorities will update that number."
    )


def _plans_reply(insight: Insight) -> str:
    if not insight.plans:
        return "I'll line up plan options after your next plan refresh."
    options = "; ".join(f"{plan.plan_name} at {plan.monthly_cost_estimate}" for plan in insight.plans)
    return f"You have {len(insight.plans)} plan options: {options}."


CHAT_RULES: tuple[tuple[str, re.Pattern[str], Callable[[Insight], str]], ...] = (
    ("timeline", re.compile(r"timeline|schedule|deadline|\bwhen\b|this week"), _timeline_reply),
    ("retirement", re.compile(r"retire|401\(?k\)?|403\(?b\)?|employer match|pension"), _retirement_reply),
    ("resources", re.compile(r"resource|link|guide|article"), _resources_reply),
    ("goal", re.compile(r"goal|focus|priorit"), _goal_reply),
    ("greeting", re.compile(r"\b(hi|hello|hey)\b|good (morning|afternoon|evening)"), _greeting_reply),
    ("gratitude", re.compile(r"thank|\bthx\b|appreciate"), _thanks_reply),
    ("cost", re.compile(r"\bcosts?\b|price|premium|per month"), _cost_reply),
    ("plans", re.compile(r"\bplans\b|plan options|compare"), _plans_reply),
)


def match_rule(message: str) -> str | None:
    """Name of the first rule matching *message*, if any."""
    normalized = message.lower()
    for name, pattern, _reply in CHAT_RULES:
        if pattern.search(normalized):
            return name
    return None


def build_chat_reply(message: str, insight: Insight | None) -> str:
    if insight is None:
        return NO_INSIGHT_REPLY

    normalized = message.lower()
    for _name, pattern, reply in CHAT_RULES:
        if pattern.search(normalized):
            return reply(insight)

    if insight.prompts:
        return f"Try asking “{insight.prompts[0]}” next. It unlocks a deeper breakdown of your plan."
    return GENERIC_REPLY


# -- history ------------------------------------------------------------------

def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_chat_entry(speaker: str, message: str, status: str = "final") -> ChatEntry:
    return ChatEntry(speaker=speaker, message=message, timestamp=_now_iso(), status=status)


def merge_chat_history(existing: Iterable[ChatEntry], additions: Iterable[ChatEntry]) -> list[ChatEntry]:
    """Append *additions* to *existing*, skipping repeated (speaker, message) pairs.

    Timestamps are not part of the key, so the same text from the same
    speaker is only kept the first time it appears.
    """
    merged = list(existing)
    seen = {(entry.speaker, entry.message) for entry in merged}
    for entry in additions:
        key = (entry.speaker, entry.message)
        if key in seen:
            continue
        seen.add(key)
        merged.append(entry)
    return merged


def complete_pending(history: Iterable[ChatEntry], message: str) -> list[ChatEntry]:
    """Replace the latest pending assistant entry with its final reply.

    If the same reply is already in the history the pending entry is dropped
    instead, matching the (speaker, message) rule of ``merge_chat_history``.
    With nothing pending the reply is merged in as a new final entry.
    """
    entries = list(history)
    duplicate = any(
        entry.speaker == "Assistant" and entry.status == "final" and entry.message == message
        for entry in entries
    )
    for index in range(len(entries) - 1, -1, -1):
        entry = entries[index]
        if entry.speaker == "Assistant" and entry.status == "pending":
            if duplicate:
                del entries[index]
            else:
                entries[index] = entry.model_copy(
                    update={"message": message, "status": "final", "timestamp": _now_iso()}
                )
            return entries
    return merge_chat_history(entries, [new_chat_entry("Assistant", message)])
