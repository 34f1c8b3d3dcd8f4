"""
Unit Tests for configuration, logging setup and controller wiring
"""

import logging
import pytest
import sys
import os
from unittest.mock import MagicMock

# Add project root to path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), "../.."))
sys.path.insert(0, os.path.join(project_root, "therapy_sessions", "src"))

from therapy_sessions.config import SessionsConfig
from therapy_sessions.errors import ConfigurationError
from therapy_sessions.factory import build_session_controller
from therapy_sessions.feedback import EventEmitter, SessionEvent
from therapy_sessions.logger import ColoredFormatter, get_logger
from therapy_sessions import supabase_client


ENV_VARS = [
    "SUPABASE_URL",
    "SUPABASE_SERVICE_KEY",
    "SESSIONS_DEVICE_TAG",
    "SESSIONS_MAX_GOALS",
    "SESSIONS_LOG_LEVEL",
    "SESSIONS_LOG_COLORS",
]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # Keep a stray .env in the working directory out of the picture
    monkeypatch.chdir(tmp_path)
    supabase_client.reset_supabase_client()
    yield monkeypatch
    supabase_client.reset_supabase_client()


class TestSessionsConfig:
    """Test environment parsing."""

    def test_defaults(self, clean_env):
        config = SessionsConfig.from_env()

        assert config.device_tag == "Watch"
        assert config.max_session_goals == 4
        assert config.log_level == logging.INFO
        assert config.supabase_enabled is False

    def test_overrides(self, clean_env):
        clean_env.setenv("SUPABASE_URL", "https://example.supabase.co")
        clean_env.setenv("SUPABASE_SERVICE_KEY", "secret")
        clean_env.setenv("SESSIONS_DEVICE_TAG", "iPhone")
        clean_env.setenv("SESSIONS_MAX_GOALS", "6")
        clean_env.setenv("SESSIONS_LOG_LEVEL", "debug")
        clean_env.setenv("SESSIONS_LOG_COLORS", "false")

        config = SessionsConfig.from_env()

        assert config.supabase_enabled is True
        assert config.device_tag == "iPhone"
        assert config.max_session_goals == 6
        assert config.log_level == logging.DEBUG
        assert config.log_colors is False

    def test_env_file(self, clean_env, tmp_path):
        env_file = tmp_path / "sessions.env"
        env_file.write_text("SESSIONS_DEVICE_TAG=iPad\n")

        assert SessionsConfig.from_env(str(env_file)).device_tag == "iPad"

    @pytest.mark.parametrize("name,value", [
        ("SESSIONS_MAX_GOALS", "four"),
        ("SESSIONS_MAX_GOALS", "0"),
        ("SESSIONS_LOG_LEVEL", "LOUD"),
    ])
    def test_invalid_values(self, clean_env, name, value):
        clean_env.setenv(name, value)

        with pytest.raises(ConfigurationError):
            SessionsConfig.from_env()

    def test_supabase_client_requires_credentials(self, clean_env):
        with pytest.raises(ConfigurationError):
            supabase_client.get_supabase_client(SessionsConfig())


class TestFactory:
    """Test controller wiring."""

    def test_in_memory_controller(self, clean_env):
        controller = build_session_controller(
            config=SessionsConfig(device_tag="iPhone", max_session_goals=2),
            configure_logging=False,
        )

        assert controller.session_store.use_supabase is False
        assert controller.goal_directory.use_supabase is False
        assert controller.device_tag == "iPhone"
        assert controller.max_session_goals == 2

    def test_injected_supabase_client_is_shared(self, clean_env):
        client = MagicMock()

        controller = build_session_controller(
            config=SessionsConfig(),
            supabase_client=client,
            configure_logging=False,
        )

        assert controller.session_store.supabase is client
        assert controller.goal_directory.supabase is client


class TestLoggingAndEvents:
    """Test the logging helpers and the event emitter."""

    def test_formatter_uses_component_icon(self):
        record = logging.LogRecord(
            "therapy_sessions.session_store", logging.INFO, __file__, 1, "saved", None, None
        )

        formatted = ColoredFormatter(use_colors=False).format(record)

        assert "💾" in formatted
        assert "saved" in formatted

    def test_structured_logger_includes_data(self, caplog):
        log = get_logger("therapy_sessions.test")

        with caplog.at_level(logging.INFO, logger="therapy_sessions.test"):
            log.info("Session ended", data={"trials": 3})

        assert "trials: 3" in caplog.text

    def test_emitter_subscribe_and_unsubscribe(self):
        emitter = EventEmitter()
        received = []
        unsubscribe = emitter.subscribe(lambda event, payload: received.append((event, payload)))

        emitter.emit(SessionEvent.SESSION_STARTED, {"session_id": "s1"})
        unsubscribe()
        emitter.emit(SessionEvent.SESSION_ENDED)

        assert received == [(SessionEvent.SESSION_STARTED, {"session_id": "s1"})]
        assert emitter.listener_count == 0
