"""Read access to the user directory."""

from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from src.auth.models import User


if TYPE_CHECKING:
    from cassandra.cluster import Session


logger = structlog.get_logger(__name__)


class UserDirectory:
    """Looks up learner names and emails."""

    def __init__(self, session: "Session", keyspace: str):
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        self.get_user_stmt = self.session.prepare(
            f"""
            SELECT id, email, name, role, is_active, created_at
            FROM {self.keyspace}.users WHERE id = ?
            """
        )

    async def get_user(self, user_id: UUID) -> User | None:
        result = await self.session.aexecute(self.get_user_stmt, [user_id])
        row = result.one()
        return User.from_row(row) if row else None

    async def get_users(self, user_ids: set[UUID]) -> dict[UUID, User]:
        """Fetch several users, skipping ids that do not exist."""
        users: dict[UUID, User] = {}
        for user_id in user_ids:
            user = await self.get_user(user_id)
            if user is not None:
                users[user_id] = user
        return users
