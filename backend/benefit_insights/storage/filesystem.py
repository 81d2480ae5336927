"""Filesystem helpers for the ~/.benefit-insights/ directory tree.

Provides path resolution and directory creation used by the JSON file store
and the CLI.
"""

from __future__ import annotations

from pathlib import Path
from urllib.parse import quote, unquote

from benefit_insights.config import (
    DIR_CHATS,
    DIR_INSIGHTS,
    DIR_PROFILES,
    ENV_FILENAME,
    get_base_dir,
)


def ensure_directories() -> None:
    """Create the full ~/.benefit-insights/ directory tree if it does not exist."""
    for directory in (get_profiles_dir(), get_insights_dir(), get_chats_dir()):
        directory.mkdir(parents=True, exist_ok=True)


def get_profiles_dir() -> Path:
    """Return the path to ~/.benefit-insights/profiles/."""
    return get_base_dir() / DIR_PROFILES


def get_insights_dir() -> Path:
    """Return the path to ~/.benefit-insights/insights/."""
    return get_base_dir() / DIR_INSIGHTS


def get_chats_dir() -> Path:
    """Return the path to ~/.benefit-insights/chats/."""
    return get_base_dir() / DIR_CHATS


def get_env_path() -> Path:
    """Return the path to ~/.benefit-insights/.env."""
    return get_base_dir() / ENV_FILENAME


def safe_filename(user_id: str) -> str:
    """Map a user id to a file stem that cannot escape its directory.

    The encoding is reversible (see ``user_id_from_filename``) so distinct ids
    never share a file.  A leading dot is escaped to keep records visible.
    """
    if not user_id:
        raise ValueError("User id must not be empty")
    encoded = quote(user_id, safe="")
    if encoded.startswith("."):
        encoded = "%2E" + encoded[1:]
    return encoded


def user_id_from_filename(stem: str) -> str:
    return unquote(stem)


def get_record_path(directory: Path, user_id: str) -> Path:
    """Return the JSON file holding *user_id*'s record inside *directory*."""
    return directory / f"{safe_filename(user_id)}.json"


def list_user_ids(directory: Path) -> list[str]:
    """Return the sorted user ids of all JSON records in *directory*."""
    if not directory.exists():
        return []
    return sorted(
        user_id_from_filename(p.stem) for p in directory.iterdir()
        if p.is_file() and p.suffix == ".json" and not p.name.startswith(".")
    )
