"""
Session Store

Persists finished session records using Supabase.
Falls back to in-memory storage when no client is configured.
"""

import asyncio
import logging
from dataclasses import replace
from datetime import datetime
from typing import Optional, Dict, List

from therapy_sessions.errors import SessionPersistenceError
from therapy_sessions.session_record import SessionRecord

logger = logging.getLogger(__name__)


class SessionStore:
    """
    Stores SessionRecord objects.

    Writes one row to the `sessions` table and one row per trial to the
    `goal_logs` table. Without a Supabase client, records are kept in a
    dict keyed by session id.
    """

    SESSIONS_TABLE = 'sessions'
    GOAL_LOGS_TABLE = 'goal_logs'

    def __init__(self, supabase_client=None):
        """
        Initialize SessionStore.

        Args:
            supabase_client: Supabase client instance (optional)
        """
        self.supabase = supabase_client
        self.use_supabase = supabase_client is not None
        self._in_memory_sessions: Dict[str, SessionRecord] = {}

        if not self.use_supabase:
            logger.warning("⚠️ [SessionStore] Supabase not available, using in-memory storage")

    async def persist(self, record: SessionRecord) -> SessionRecord:
        """
        Save a finished session.

        Stamps end_time (unless already set) and last_modified before
        writing.

        Args:
            record: The session snapshot to save

        Returns:
            The record as stored

        Raises:
            SessionPersistenceError: If the database write fails
        """
        now = datetime.now()
        stored = replace(record, end_time=record.end_time or now, last_modified=now)

        if not self.use_supabase:
            self._in_memory_sessions[stored.id] = stored
            logger.info(f"💾 [SessionStore] Saved session {stored.id} in memory ({stored.total_trials} trials)")
            return stored

        try:
            await asyncio.to_thread(self._write_record, stored)
        except Exception as e:
            logger.error(f"❌ [SessionStore] Error saving session {stored.id}: {e}")
            raise SessionPersistenceError(stored.id, e) from e

        logger.info(f"💾 [SessionStore] Saved session {stored.id} ({stored.total_trials} trials)")
        return stored

    def _write_record(self, stored: SessionRecord):
        """
        Blocking Supabase writes for persist(), run off the event loop.

        The session row is removed again if its goal logs cannot be
        written, so a failed save leaves nothing behind.
        """
        self.supabase.table(self.SESSIONS_TABLE).insert(stored.to_dict()).execute()

        if not stored.goal_logs:
            return

        try:
            rows = [log.to_dict() for log in stored.goal_logs]
            self.supabase.table(self.GOAL_LOGS_TABLE).insert(rows).execute()
        except Exception:
            try:
                self.supabase.table(self.SESSIONS_TABLE).delete().eq('id', stored.id).execute()
            except Exception as cleanup_error:
                logger.error(
                    f"❌ [SessionStore] Could not remove partial session {stored.id}: {cleanup_error}"
                )
            raise

    async def get_session(self, session_id: str) -> Optional[SessionRecord]:
        """
        Load a session record with its goal logs.

        Args:
            session_id: Session identifier

        Returns:
            SessionRecord or None if not found
        """
        if not self.use_supabase:
            return self._in_memory_sessions.get(session_id)

        try:
            result = self.supabase.table(self.SESSIONS_TABLE) \
                .select('*') \
                .eq('id', session_id) \
                .execute()

            if not result.data:
                return None

            logs_result = self.supabase.table(self.GOAL_LOGS_TABLE) \
                .select('*') \
                .eq('session_id', session_id) \
                .order('timestamp', desc=False) \
                .execute()

            return SessionRecord.from_dict(result.data[0], logs_result.data or [])
        except Exception as e:
            logger.error(f"❌ [SessionStore] Error loading session {session_id}: {e}")
            raise SessionPersistenceError(session_id, e) from e

    async def list_sessions(self, client_id: str) -> List[SessionRecord]:
        """
        List a client's sessions, newest first. Goal logs are not loaded.

        Args:
            client_id: Client identifier

        Returns:
            List of SessionRecord headers
        """
        if not self.use_supabase:
            records = [r for r in self._in_memory_sessions.values() if r.client_id == client_id]
            return sorted(records, key=lambda r: r.start_time, reverse=True)

        try:
            result = self.supabase.table(self.SESSIONS_TABLE) \
                .select('*') \
                .eq('client_id', client_id) \
                .order('start_time', desc=True) \
                .execute()

            return [SessionRecord.from_dict(row) for row in (result.data or [])]
        except Exception as e:
            logger.error(f"❌ [SessionStore] Error listing sessions for client {client_id}: {e}")
            raise SessionPersistenceError(client_id, e) from e
