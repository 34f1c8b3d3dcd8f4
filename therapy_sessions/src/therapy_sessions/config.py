"""
Configuration

Settings are read from the environment, with a .env file loaded first
when one is present.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from therapy_sessions.errors import ConfigurationError
from therapy_sessions.session_record import DEFAULT_DEVICE_TAG

DEFAULT_MAX_GOALS = 4  # The wrist UI shows at most four goals per session


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}")


def _get_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class SessionsConfig:
    """Runtime settings for the session tracker."""
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    device_tag: str = DEFAULT_DEVICE_TAG
    max_session_goals: int = DEFAULT_MAX_GOALS
    log_level: int = logging.INFO
    log_colors: bool = True

    @property
    def supabase_enabled(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "SessionsConfig":
        """
        Build settings from environment variables.

        Args:
            env_file: Optional path to a .env file (the default lookup is used otherwise)

        Raises:
            ConfigurationError: If a numeric or level setting is malformed
        """
        if env_file:
            load_dotenv(env_file)
        else:
            load_dotenv()

        level_name = os.getenv("SESSIONS_LOG_LEVEL", "INFO").upper()
        log_level = logging.getLevelName(level_name)
        if not isinstance(log_level, int):
            raise ConfigurationError(f"SESSIONS_LOG_LEVEL is not a logging level: {level_name!r}")

        max_goals = _get_int("SESSIONS_MAX_GOALS", DEFAULT_MAX_GOALS)
        if max_goals < 1:
            raise ConfigurationError("SESSIONS_MAX_GOALS must be at least 1")

        return cls(
            supabase_url=os.getenv("SUPABASE_URL") or None,
            supabase_key=os.getenv("SUPABASE_SERVICE_KEY") or None,
            device_tag=os.getenv("SESSIONS_DEVICE_TAG") or DEFAULT_DEVICE_TAG,
            max_session_goals=max_goals,
            log_level=log_level,
            log_colors=_get_bool("SESSIONS_LOG_COLORS", True),
        )
