"""Configuration management for benefit-insights.

Loads environment variables from ~/.benefit-insights/.env and provides
getters for the port, store backend, insight tuning knobs, and the model
provider used by the optional enrichment agent.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_PORT: int = 8395
DEFAULT_PROVIDER: str = "anthropic"
DEFAULT_ANTHROPIC_MODEL: str = "claude-haiku-4-5"
DEFAULT_PRIORITY_LIMIT: int = 3
DEFAULT_ENRICHMENT_TIMEOUT: float = 20.0
DEFAULT_STORE: str = "file"
DEFAULT_USER_ID: str = "default"

DIR_PROFILES: str = "profiles"
DIR_INSIGHTS: str = "insights"
DIR_CHATS: str = "chats"

ENV_FILENAME: str = ".env"

STORE_KINDS = ("file", "memory")
PROVIDERS = ("anthropic", "openai", "bedrock")


def get_base_dir() -> Path:
    override = os.getenv("BENEFIT_INSIGHTS_HOME")
    if override:
        return Path(override).expanduser()
    return Path("~/.benefit-insights").expanduser()


def _get_int(name: str, default: int) -> int:
    _ensure_env_loaded()
    raw = os.getenv(name)
    if raw is not None:
        try:
            return int(raw)
        except ValueError:
            pass
    return default


def get_port() -> int:
    return _get_int("BENEFIT_INSIGHTS_PORT", DEFAULT_PORT)


def get_priority_limit() -> int:
    """Maximum number of priorities an insight carries (never below 1)."""
    return max(1, _get_int("BENEFIT_INSIGHTS_PRIORITY_LIMIT", DEFAULT_PRIORITY_LIMIT))


def get_enrichment_timeout() -> float:
    _ensure_env_loaded()
    raw = os.getenv("BENEFIT_INSIGHTS_ENRICHMENT_TIMEOUT")
    if raw is not None:
        try:
            value = float(raw)
            if value > 0:
                return value
        except ValueError:
            pass
    return DEFAULT_ENRICHMENT_TIMEOUT


def enrichment_enabled() -> bool:
    _ensure_env_loaded()
    raw = os.getenv("BENEFIT_INSIGHTS_ENRICHMENT", "off").lower().strip()
    return raw in ("1", "on", "true", "yes")


def get_store_kind() -> str:
    _ensure_env_loaded()
    kind = os.getenv("BENEFIT_INSIGHTS_STORE", DEFAULT_STORE).lower().strip()
    return kind if kind in STORE_KINDS else DEFAULT_STORE


_env_loaded: bool = False


def _ensure_env_loaded() -> None:
    global _env_loaded
    if _env_loaded:
        return
    env_path = get_base_dir() / ENV_FILENAME
    if env_path.exists():
        load_dotenv(dotenv_path=env_path)
    _env_loaded = True


def reload_env() -> None:
    global _env_loaded
    _env_loaded = False
    _ensure_env_loaded()


def get_model():
    """Return a Strands model instance based on the configured provider."""
    _ensure_env_loaded()
    provider = os.getenv("BENEFIT_INSIGHTS_MODEL_PROVIDER", DEFAULT_PROVIDER).lower().strip()

    if provider == "anthropic":
        from strands.models.anthropic import AnthropicModel
        model_id = os.getenv("BENEFIT_INSIGHTS_ANTHROPIC_MODEL", DEFAULT_ANTHROPIC_MODEL).strip()
        return AnthropicModel(model_id=model_id, max_tokens=1024)

    if provider == "openai":
        from strands.models.openai import OpenAIModel
        return OpenAIModel(model_id="gpt-4o-mini")

    if provider == "bedrock":
        from strands.models.bedrock import BedrockModel
        return BedrockModel(model_id="anthropic.claude-sonnet-4-20250514-v1:0")

    raise ValueError(
        f"Unknown model provider: {provider!r}. "
        "Supported providers: anthropic, openai, bedrock."
    )
