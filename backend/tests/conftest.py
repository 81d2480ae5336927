"""Pytest configuration and fixtures."""

import pytest

from benefit_insights import dependencies
from benefit_insights.defaults import default_profile, sample_completed_profile
from benefit_insights.models.profile import Profile
from benefit_insights.storage.store import UserStore


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Point the data directory at a temp dir and disable enrichment."""
    monkeypatch.setenv("BENEFIT_INSIGHTS_HOME", str(tmp_path / "home"))
    monkeypatch.setenv("BENEFIT_INSIGHTS_ENRICHMENT", "off")
    monkeypatch.setenv("BENEFIT_INSIGHTS_STORE", "memory")
    monkeypatch.delenv("BENEFIT_INSIGHTS_PRIORITY_LIMIT", raising=False)
    monkeypatch.setattr(dependencies, "_store", None)
    return tmp_path / "home"


@pytest.fixture
def blank_profile() -> Profile:
    return default_profile("blank-user")


@pytest.fixture
def sample_profile() -> Profile:
    return sample_completed_profile()


@pytest.fixture
def memory_store() -> UserStore:
    return UserStore.in_memory()
