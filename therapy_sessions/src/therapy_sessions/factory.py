"""
Wiring for the session controller and its collaborators.
"""

import logging
from typing import Optional

from therapy_sessions.config import SessionsConfig
from therapy_sessions.goal_directory import GoalDirectory
from therapy_sessions.logger import setup_logging
from therapy_sessions.session_controller import SaveFailedCallback, SessionController
from therapy_sessions.session_store import SessionStore
from therapy_sessions.supabase_client import get_supabase_client

logger = logging.getLogger(__name__)


def build_session_controller(
    config: Optional[SessionsConfig] = None,
    supabase_client=None,
    on_save_failed: Optional[SaveFailedCallback] = None,
    configure_logging: bool = True,
) -> SessionController:
    """
    Build a ready-to-use SessionController.

    Uses Supabase when a client is passed in or the config has
    credentials; otherwise both collaborators run in memory.

    Args:
        config: Settings (read from the environment if None)
        supabase_client: Pre-built Supabase client (optional)
        on_save_failed: Forwarded to the controller
        configure_logging: Install the colored console handler
    """
    config = config or SessionsConfig.from_env()

    if configure_logging:
        setup_logging(level=config.log_level, use_colors=config.log_colors)

    if supabase_client is None and config.supabase_enabled:
        supabase_client = get_supabase_client(config)

    logger.info(
        f"🔧 [Factory] Building session controller "
        f"(storage={'supabase' if supabase_client is not None else 'memory'}, device={config.device_tag})"
    )

    return SessionController(
        session_store=SessionStore(supabase_client=supabase_client),
        goal_directory=GoalDirectory(supabase_client=supabase_client),
        device_tag=config.device_tag,
        max_session_goals=config.max_session_goals,
        on_save_failed=on_save_failed,
    )
