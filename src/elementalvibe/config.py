"""Runtime configuration loaded from environment variables (.env supported)."""

import logging
import math
import os
from dataclasses import dataclass

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-sonnet-4-6"
DEFAULT_MAX_TOKENS = 1024
DEFAULT_MIN_DURATION = 4.0  # seconds; the results screen uses 8.0
DEFAULT_MAX_RETRIES = 3
DEFAULT_BACKOFF_BASE = 1.0  # seconds; delays are base * 2**n


@dataclass(frozen=True)
class Settings:
    """Narrative service and orchestration settings."""

    api_key: str | None
    model: str = DEFAULT_MODEL
    max_tokens: int = DEFAULT_MAX_TOKENS
    min_duration: float = DEFAULT_MIN_DURATION
    max_retries: int = DEFAULT_MAX_RETRIES
    backoff_base: float = DEFAULT_BACKOFF_BASE


def _env_number(name: str, default, cast):
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = cast(raw)
    except ValueError:
        logger.warning("Ignoring malformed %s=%r, using %r", name, raw, default)
        return default
    if not math.isfinite(value):
        logger.warning("Ignoring non-finite %s=%r, using %r", name, raw, default)
        return default
    if value < 0:
        logger.warning("Ignoring negative %s=%r, using %r", name, raw, default)
        return default
    return value


def load_settings(dotenv: bool = True) -> Settings:
    """Build Settings from the environment.

    Args:
        dotenv: Load a .env file first (existing variables win).

    Returns:
        Settings with defaults for anything unset or malformed.
    """
    if dotenv:
        load_dotenv()
    return Settings(
        api_key=os.environ.get("ANTHROPIC_API_KEY") or None,
        model=os.environ.get("ELEMENTAL_MODEL") or DEFAULT_MODEL,
        max_tokens=_env_number("ELEMENTAL_MAX_TOKENS", DEFAULT_MAX_TOKENS, int),
        min_duration=_env_number("ELEMENTAL_MIN_DURATION", DEFAULT_MIN_DURATION, float),
        max_retries=_env_number("ELEMENTAL_MAX_RETRIES", DEFAULT_MAX_RETRIES, int),
        backoff_base=_env_number("ELEMENTAL_BACKOFF_BASE", DEFAULT_BACKOFF_BASE, float),
    )
