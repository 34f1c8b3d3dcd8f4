"""
Supabase client for session storage and the goal directory
"""
from typing import Optional

from supabase import create_client, Client

from therapy_sessions.config import SessionsConfig
from therapy_sessions.errors import ConfigurationError

_supabase_client: Optional[Client] = None


def get_supabase_client(config: Optional[SessionsConfig] = None) -> Client:
    """Get or create Supabase client singleton"""
    global _supabase_client

    if _supabase_client is None:
        config = config or SessionsConfig.from_env()

        if not config.supabase_enabled:
            raise ConfigurationError("SUPABASE_URL and SUPABASE_SERVICE_KEY must be set in environment")

        _supabase_client = create_client(config.supabase_url, config.supabase_key)

    return _supabase_client


def reset_supabase_client():
    """Drop the cached client so the next call reconnects."""
    global _supabase_client
    _supabase_client = None
