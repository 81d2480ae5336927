"""Tests for rule-based chat replies and history merging."""

import pytest

from benefit_insights.engine.chat import (
    CHAT_RULES,
    GENERIC_REPLY,
    NO_INSIGHT_REPLY,
    build_chat_reply,
    complete_pending,
    match_rule,
    merge_chat_history,
    new_chat_entry,
)
from benefit_insights.engine.insights import build_insights
from benefit_insights.models.chat import ChatEntry


@pytest.fixture
def insight(sample_profile):
    return build_insights(sample_profile)


def _entry(speaker, message, timestamp="2026-01-01T00:00:00+00:00", status="final"):
    return ChatEntry(speaker=speaker, message=message, timestamp=timestamp, status=status)


# ============================================================================
# Replies
# ============================================================================


class TestBuildChatReply:
    @pytest.mark.parametrize("message", ["hello", "what about my timeline?", "", "401k"])
    def test_without_insight(self, message):
        assert build_chat_reply(message, None) == NO_INSIGHT_REPLY

    def test_timeline(self, insight):
        reply = build_chat_reply("review my timeline for retirement", insight)
        assert insight.timeline[0].title in reply

    def test_timeline_wins_over_retirement(self, insight):
        assert match_rule("What is my 401k timeline?") == "timeline"
        assert insight.timeline[0].title in build_chat_reply("What is my 401k timeline?", insight)

    def test_retirement(self, insight):
        reply = build_chat_reply("Should I bump my 401(k)?", insight)
        assert reply.startswith("Maximize retirement momentum:")

    def test_retirement_without_priority(self, insight):
        trimmed = insight.model_copy(update={"priorities": insight.priorities[:1]})
        assert "isn't in your top priorities" in build_chat_reply("retirement?", trimmed)

    def test_resources(self, insight):
        reply = build_chat_reply("Any good articles?", insight)
        assert insight.resources[0].title in reply
        assert insight.resources[0].url in reply

    def test_goal(self, insight):
        reply = build_chat_reply("What is my main goal?", insight)
        assert reply.startswith("Your focus is retirement confidence.")

    def test_greeting_uses_owner_name(self, insight):
        assert build_chat_reply("Hey there", insight).startswith("Hi Jordan!")

    def test_greeting_without_name(self, blank_profile):
        assert build_chat_reply("hello", build_insights(blank_profile)).startswith("Hi there!")

    def test_gratitude(self, insight):
        assert build_chat_reply("Thanks so much", insight).startswith("You're welcome!")

    def test_cost_uses_selected_plan(self, insight):
        reply = build_chat_reply("How much will this cost?", insight)
        assert reply.startswith("The current estimate for Benefits Guidance (Balance) is $210/mo.")

    def test_cost_without_plans(self, insight):
        bare = insight.model_copy(update={"plans": []})
        assert build_chat_reply("price?", bare) == "I'll have a cost estimate once you refresh your plan."

    def test_plans_lists_every_option(self, insight):
        reply = build_chat_reply("Can you compare my options?", insight)
        assert reply.startswith("You have 3 plan options:")
        for plan in insight.plans:
            assert f"{plan.plan_name} at {plan.monthly_cost_estimate}" in reply

    def test_plans_without_options(self, insight):
        bare = insight.model_copy(update={"plans": []})
        assert build_chat_reply("show my plans", bare) == "I'll line up plan options after your next plan refresh."

    def test_falls_back_to_first_prompt(self, insight):
        reply = build_chat_reply("Can you help me?", insight)
        assert f"“{insight.prompts[0]}”" in reply

    def test_generic_reply_without_prompts(self, insight):
        bare = insight.model_copy(update={"prompts": []})
        assert build_chat_reply("Can you help me?", bare) == GENERIC_REPLY

    def test_case_insensitive(self, insight):
        assert build_chat_reply("TIMELINE", insight) == build_chat_reply("timeline", insight)


class TestMatchRule:
    def test_rule_order(self):
        assert [name for name, _pattern, _reply in CHAT_RULES] == [
            "timeline",
            "retirement",
            "resources",
            "goal",
            "greeting",
            "gratitude",
            "cost",
            "plans",
        ]

    @pytest.mark.parametrize(
        "message, expected",
        [
            ("When should I enroll?", "timeline"),
            ("employer match question", "retirement"),
            ("send me a link", "resources"),
            ("what should I prioritize", "goal"),
            ("good morning", "greeting"),
            ("thx", "gratitude"),
            ("what does this cost", "cost"),
            ("premium per month?", "cost"),
            ("compare my plans", "plans"),
            ("thanks, what are the plan options", "gratitude"),
            ("which plan is cheaper", None),
            ("this is confusing", None),
        ],
    )
    def test_matches(self, message, expected):
        assert match_rule(message) == expected


# ============================================================================
# History
# ============================================================================


class TestMergeChatHistory:
    def test_skips_repeated_speaker_and_message(self):
        existing = [_entry("Assistant", "Hi")]
        additions = [_entry("Assistant", "Hi", timestamp="2026-02-02T00:00:00+00:00"), _entry("User", "Thanks")]

        merged = merge_chat_history(existing, additions)

        assert len(merged) == 2
        assert merged[0].timestamp == "2026-01-01T00:00:00+00:00"
        assert (merged[1].speaker, merged[1].message) == ("User", "Thanks")

    def test_same_text_from_other_speaker_is_kept(self):
        merged = merge_chat_history([_entry("Assistant", "Hi")], [_entry("User", "Hi")])
        assert len(merged) == 2

    def test_duplicates_within_additions(self):
        merged = merge_chat_history([], [_entry("User", "a"), _entry("User", "a"), _entry("User", "b")])
        assert [entry.message for entry in merged] == ["a", "b"]

    def test_inputs_not_modified(self):
        existing = [_entry("Assistant", "Hi")]
        merge_chat_history(existing, [_entry("User", "Thanks")])
        assert len(existing) == 1

    def test_new_entry_defaults(self):
        entry = new_chat_entry("User", "Hello")
        assert entry.status == "final"
        assert entry.timestamp


class TestCompletePending:
    def test_replaces_latest_pending(self):
        history = [_entry("User", "Hi"), _entry("Assistant", "...", status="pending")]
        completed = complete_pending(history, "Hello!")
        assert len(completed) == 2
        assert completed[-1].message == "Hello!"
        assert completed[-1].status == "final"
        assert history[-1].status == "pending"

    def test_drops_pending_when_reply_already_present(self):
        history = [
            _entry("Assistant", "Hello!"),
            _entry("User", "Hi again"),
            _entry("Assistant", "...", status="pending"),
        ]
        completed = complete_pending(history, "Hello!")
        assert [entry.message for entry in completed] == ["Hello!", "Hi again"]

    def test_appends_when_nothing_pending(self):
        completed = complete_pending([_entry("User", "Hi")], "Hello!")
        assert [(entry.speaker, entry.message) for entry in completed] == [("User", "Hi"), ("Assistant", "Hello!")]
