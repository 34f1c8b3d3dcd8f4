"""
Goal Directory

Supplies the clients and goal templates a session is started with.
Reads from Supabase, or from lists handed in at construction when no
client is configured.
"""

import logging
from datetime import date, datetime
from typing import Optional, List, Dict, Any, Iterable

from therapy_sessions.errors import GoalDirectoryError
from therapy_sessions.models import AssistanceLevel, Client, Goal

logger = logging.getLogger(__name__)


def _parse_datetime(value: Optional[str]) -> datetime:
    return datetime.fromisoformat(value) if value else datetime.now()


def client_from_row(row: Dict[str, Any]) -> Client:
    dob = row.get("date_of_birth")
    return Client(
        id=row["id"],
        name=row["name"],
        date_of_birth=date.fromisoformat(dob[:10]) if dob else None,
        notes=row.get("notes"),
        created_date=_parse_datetime(row.get("created_date")),
        last_modified=_parse_datetime(row.get("last_modified")),
    )


def goal_from_row(row: Dict[str, Any]) -> Goal:
    return Goal(
        id=row["id"],
        title=row["title"],
        description=row.get("description"),
        category=row.get("category") or "",
        default_assistance_level=AssistanceLevel(
            row.get("default_assistance_level") or AssistanceLevel.INDEPENDENT.value
        ),
        client_id=row["client_id"],
        is_active=row.get("is_active", True),
        created_date=_parse_datetime(row.get("created_date")),
    )


class GoalDirectory:
    """
    Read-only access to clients and their goal templates.

    Clients are returned sorted by name, goals by creation date.
    """

    CLIENTS_TABLE = 'clients'
    GOALS_TABLE = 'goal_templates'

    def __init__(
        self,
        supabase_client=None,
        clients: Optional[Iterable[Client]] = None,
        goals: Optional[Iterable[Goal]] = None
    ):
        """
        Initialize GoalDirectory.

        Args:
            supabase_client: Supabase client instance (optional)
            clients: Clients served when no Supabase client is given
            goals: Goals served when no Supabase client is given
        """
        self.supabase = supabase_client
        self.use_supabase = supabase_client is not None
        self._clients: List[Client] = list(clients or [])
        self._goals: List[Goal] = list(goals or [])

    async def get_all_clients(self) -> List[Client]:
        """
        Get every client.

        Raises:
            GoalDirectoryError: If the clients table cannot be read
        """
        if not self.use_supabase:
            return sorted(self._clients, key=lambda c: c.name)

        try:
            result = self.supabase.table(self.CLIENTS_TABLE) \
                .select('*') \
                .order('name', desc=False) \
                .execute()
            return [client_from_row(row) for row in (result.data or [])]
        except Exception as e:
            logger.error(f"❌ [GoalDirectory] Error loading clients: {e}")
            raise GoalDirectoryError(f"Failed to load clients: {e}", e) from e

    async def get_goals(
        self,
        client_id: Optional[str] = None,
        active_only: bool = True
    ) -> List[Goal]:
        """
        Get goal templates.

        Args:
            client_id: Only goals owned by this client (all clients if None)
            active_only: Skip deactivated templates

        Raises:
            GoalDirectoryError: If the goal templates table cannot be read
        """
        if not self.use_supabase:
            goals = [
                g for g in self._goals
                if (client_id is None or g.client_id == client_id)
                and (g.is_active or not active_only)
            ]
            return sorted(goals, key=lambda g: g.created_date)

        try:
            query = self.supabase.table(self.GOALS_TABLE).select('*')
            if client_id:
                query = query.eq('client_id', client_id)
            if active_only:
                query = query.eq('is_active', True)
            result = query.order('created_date', desc=False).execute()
            return [goal_from_row(row) for row in (result.data or [])]
        except Exception as e:
            logger.error(f"❌ [GoalDirectory] Error loading goals: {e}")
            raise GoalDirectoryError(f"Failed to load goals: {e}", e) from e
