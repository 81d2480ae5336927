"""Tests for the CLI commands."""

import pytest
from typer.testing import CliRunner

from benefit_insights.cli import app
from benefit_insights.storage.filesystem import ensure_directories
from benefit_insights.storage.store import UserStore

runner = CliRunner()


@pytest.fixture
def disk_store(sample_profile):
    ensure_directories()
    store = UserStore.on_disk()
    store.profiles.set("jordan", sample_profile)
    return store


class TestQuizCommand:
    def test_back_and_follow_up(self, disk_store):
        # back at age (number) and at marital_status (select), then switch off physical activity
        answers = ["", "", "back", "", "", "back", "", ""] + [""] * 25 + ["no", ""]
        result = runner.invoke(app, ["quiz", "--user", "jordan"], input="\n".join(answers) + "\n")

        assert result.exit_code == 0, result.output
        assert "Questionnaire complete" in result.output
        profile = disk_store.profiles.get("jordan")
        assert profile.preferred_name == "Jordan"
        assert profile.marital_status == "partnered"
        assert profile.physically_active is False
        assert profile.activity_list == []
        assert disk_store.insights.get("jordan") is not None

    def test_select_by_number(self, disk_store):
        answers = ["", "", "", "1"] + [""] * 25 + ["", ""]
        runner.invoke(app, ["quiz", "--user", "jordan"], input="\n".join(answers) + "\n")
        profile = disk_store.profiles.get("jordan")
        assert profile.marital_status == "single"
        assert profile.spouse_has_separate_insurance is None


class TestInsightsCommand:
    def test_without_profile(self):
        result = runner.invoke(app, ["insights", "--user", "nobody"])
        assert result.exit_code == 1
        assert "No saved profile" in result.output

    def test_builds_and_stores(self, disk_store):
        result = runner.invoke(app, ["insights", "--user", "jordan"])
        assert result.exit_code == 0
        assert "Family Growth Architect" in result.output
        assert disk_store.insights.get("jordan").persona == "Family Growth Architect"


class TestChatCommand:
    def test_records_history(self, disk_store):
        runner.invoke(app, ["insights", "--user", "jordan"])
        result = runner.invoke(app, ["chat", "--user", "jordan"], input="What is my timeline?\n\n")
        assert result.exit_code == 0
        history = disk_store.get_chat("jordan")
        assert [entry.speaker for entry in history] == ["User", "Assistant"]
        assert "Confirm core coverage" in history[1].message


class TestResetCommand:
    def test_reset(self, disk_store):
        result = runner.invoke(app, ["reset", "--user", "jordan", "--yes"])
        assert result.exit_code == 0
        assert "Data cleared" in result.output
        assert disk_store.profiles.get("jordan") is None

    def test_nothing_to_clear(self):
        result = runner.invoke(app, ["reset", "--user", "ghost", "--yes"])
        assert "Nothing to clear" in result.output


class TestReportCommand:
    def test_without_insights(self, disk_store):
        result = runner.invoke(app, ["report", "--user", "jordan"])
        assert result.exit_code == 1
        assert "No saved insights" in result.output

    def test_prints_selected_plan(self, disk_store):
        runner.invoke(app, ["insights", "--user", "jordan"])
        result = runner.invoke(app, ["report", "--user", "jordan"])
        assert result.exit_code == 0
        assert "Benefits Guidance (Balance)" in result.output

    def test_writes_file(self, disk_store, tmp_path):
        runner.invoke(app, ["insights", "--user", "jordan"])
        target = tmp_path / "report.txt"
        result = runner.invoke(
            app, ["report", "--user", "jordan", "--plan", "plan-sample-user-1", "--output", str(target)]
        )
        assert result.exit_code == 0
        assert "Report written to" in result.output
        assert "Benefits Guidance (Shield)" in target.read_text(encoding="utf-8")

    def test_unknown_plan(self, disk_store):
        runner.invoke(app, ["insights", "--user", "jordan"])
        result = runner.invoke(app, ["report", "--user", "jordan", "--plan", "plan-nope"])
        assert result.exit_code == 1
        assert "Unknown plan" in result.output
