"""Tests for the profile, insight and chat stores."""

import pytest

from benefit_insights.engine.chat import new_chat_entry
from benefit_insights.engine.insights import build_insights
from benefit_insights.models.profile import Profile
from benefit_insights.storage.filesystem import ensure_directories, get_profiles_dir, safe_filename
from benefit_insights.storage.store import UserStore, create_user_store


@pytest.fixture(params=["memory", "file"])
def store(request):
    if request.param == "memory":
        return UserStore.in_memory()
    ensure_directories()
    return UserStore.on_disk()


class TestUserStore:
    def test_missing_records(self, store):
        assert store.profiles.get("nobody") is None
        assert store.insights.get("nobody") is None
        assert store.get_chat("nobody") == []

    def test_profile_round_trip_keeps_unanswered(self, store):
        profile = Profile(user_id="u1", physically_active=None, tobacco_use=False, age=None)
        store.profiles.set("u1", profile)
        loaded = store.profiles.get("u1")
        assert loaded == profile
        assert loaded.physically_active is None
        assert loaded.tobacco_use is False

    def test_insight_and_chat(self, store, sample_profile):
        insight = build_insights(sample_profile)
        store.insights.set("u1", insight)
        store.chats.set("u1", [new_chat_entry("User", "Hi")])
        assert store.insights.get("u1") == insight
        assert [entry.message for entry in store.get_chat("u1")] == ["Hi"]

    def test_keys_and_reset(self, store, sample_profile):
        store.profiles.set("b", sample_profile)
        store.profiles.set("a", sample_profile)
        store.insights.set("a", build_insights(sample_profile))
        assert store.profiles.keys() == ["a", "b"]

        assert store.reset("a") is True
        assert store.profiles.get("a") is None
        assert store.insights.get("a") is None
        assert store.reset("a") is False


class TestJsonFileStore:
    def test_corrupted_file_reads_as_missing(self):
        ensure_directories()
        store = UserStore.on_disk()
        (get_profiles_dir() / "broken.json").write_text("{not json", encoding="utf-8")
        assert store.profiles.get("broken") is None

    def test_user_id_cannot_escape_directory(self, isolated_home):
        store = UserStore.on_disk()
        store.profiles.set("../../etc/passwd", Profile())
        assert list(isolated_home.rglob("*.json"))[0].parent == get_profiles_dir()

    @pytest.mark.parametrize(
        "user_id, expected",
        [
            ("alice", "alice"),
            ("a/b", "a%2Fb"),
            ("../x", "%2E.%2Fx"),
            (".x", "%2Ex"),
            ("jo@x.com", "jo%40x.com"),
            ("  ", "%20%20"),
        ],
    )
    def test_safe_filename(self, user_id, expected):
        assert safe_filename(user_id) == expected

    def test_empty_user_id_rejected(self):
        with pytest.raises(ValueError):
            safe_filename("")

    @pytest.mark.parametrize(
        "first, second",
        [("jo@x.com", "jo_x.com"), (".x", "x"), ("a/b", "a_b"), ("Ada Lovelace", "Ada_Lovelace")],
    )
    def test_similar_ids_keep_separate_records(self, first, second):
        store = UserStore.on_disk()
        store.profiles.set(first, Profile(full_name="First"))
        store.profiles.set(second, Profile(full_name="Second"))

        assert store.profiles.get(first).full_name == "First"
        assert store.profiles.get(second).full_name == "Second"
        assert store.profiles.keys() == sorted([first, second])


class TestCreateUserStore:
    def test_configured_kind(self, monkeypatch):
        assert create_user_store().kind == "memory"
        monkeypatch.setenv("BENEFIT_INSIGHTS_STORE", "file")
        assert create_user_store().kind == "file"

    def test_explicit_kind(self):
        assert create_user_store("file").kind == "file"
