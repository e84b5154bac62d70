"""Points ledger service."""

from typing import TYPE_CHECKING
from uuid import UUID, uuid4

import structlog

from src.core.errors import UnauthenticatedError
from src.notifications.models import NotificationType
from src.utils import utc_now

from .models import GLOBAL_BOARD, PointEntry
from .schemas import LeaderboardEntry, LeaderboardResponse


if TYPE_CHECKING:
    from cassandra.cluster import Session

    from src.auth.schemas import Identity
    from src.auth.service import UserDirectory
    from src.notifications.service import NotificationService


logger = structlog.get_logger(__name__)

# Extra leaderboard rows read to cover superseded and inactive entries
LEADERBOARD_SCAN_FACTOR = 3


class PointsService:
    """Appends point awards, keeps each learner's balance and ranks learners."""

    def __init__(
        self,
        session: "Session",
        keyspace: str,
        notifications: "NotificationService",
        users: "UserDirectory",
        portal_base_url: str = "/portal",
    ):
        self.session = session
        self.keyspace = keyspace
        self.notifications = notifications
        self.users = users
        self.portal_base_url = portal_base_url.rstrip("/")
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        self._insert_history = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.point_history
            (user_id, created_at, entry_id, amount, reason)
            VALUES (?, ?, ?, ?, ?)
        """)

        self._increment_points = self.session.prepare(f"""
            UPDATE {self.keyspace}.user_points
            SET points = points + ?
            WHERE user_id = ?
        """)

        self._get_points = self.session.prepare(f"""
            SELECT points FROM {self.keyspace}.user_points WHERE user_id = ?
        """)

        self._get_history = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.point_history WHERE user_id = ? LIMIT ?
        """)

        # Leaderboard
        self._insert_rank = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.points_leaderboard (board, points, user_id)
            VALUES (?, ?, ?)
        """)

        self._delete_rank = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.points_leaderboard
            WHERE board = ? AND points = ? AND user_id = ?
        """)

        self._get_ranking = self.session.prepare(f"""
            SELECT user_id, points FROM {self.keyspace}.points_leaderboard
            WHERE board = ? LIMIT ?
        """)

    async def award_points(self, user_id: UUID, amount: int, reason: str) -> PointEntry | None:
        """Credit ``amount`` points and tell the learner about it.

        Amounts of zero or less are ignored.

        Returns:
            The history entry, or None when nothing was awarded
        """
        if amount <= 0:
            logger.debug("points_award_skipped", user_id=str(user_id), amount=amount)
            return None

        entry = PointEntry(
            entry_id=uuid4(),
            user_id=user_id,
            amount=amount,
            reason=reason,
            created_at=utc_now(),
        )
        await self.session.aexecute(
            self._insert_history,
            [entry.user_id, entry.created_at, entry.entry_id, entry.amount, entry.reason],
        )
        await self.session.aexecute(self._increment_points, [amount, user_id])
        total = await self.get_balance(user_id)
        await self._update_rank(user_id, total, total - amount)

        logger.info(
            "points_awarded",
            user_id=str(user_id),
            amount=amount,
            reason=reason,
            total=total,
        )

        await self.notifications.create_notification(
            user_id=user_id,
            notification_type=NotificationType.ACHIEVEMENT,
            title="Poin Ditambahkan! 🌟",
            message=(
                f"Selamat! Anda mendapatkan {amount} poin dari: {reason}. "
                f"Total poin Anda sekarang: {total}."
            ),
            action_url=f"{self.portal_base_url}/dashboard",
        )
        return entry

    async def _update_rank(self, user_id: UUID, total: int, previous: int) -> None:
        # New row first: a failed delete only leaves a lower, superseded row
        await self.session.aexecute(self._insert_rank, [GLOBAL_BOARD, total, user_id])
        if previous > 0:
            await self.session.aexecute(
                self._delete_rank, [GLOBAL_BOARD, previous, user_id]
            )

    async def get_balance(self, user_id: UUID) -> int:
        result = await self.session.aexecute(self._get_points, [user_id])
        row = result.one()
        return row.points if row and row.points else 0

    async def get_history(self, user_id: UUID, limit: int = 50) -> list[PointEntry]:
        result = await self.session.aexecute(self._get_history, [user_id, limit])
        return [PointEntry.from_row(row) for row in result]

    async def get_leaderboard(
        self, caller: "Identity | None", limit: int = 50
    ) -> LeaderboardResponse:
        """Top active learners by points, with the caller's own rank.

        ``my_rank`` is None when the caller is not among the top ``limit``.
        """
        if caller is None:
            raise UnauthenticatedError

        result = await self.session.aexecute(
            self._get_ranking, [GLOBAL_BOARD, limit * LEADERBOARD_SCAN_FACTOR]
        )
        # Balances only grow, so the first row seen per user is the current one
        ranked: dict[UUID, int] = {}
        for row in result:
            ranked.setdefault(row.user_id, row.points)

        users = await self.users.get_users(set(ranked))
        entries: list[LeaderboardEntry] = []
        for user_id, points in ranked.items():
            user = users.get(user_id)
            if user is None or not user.is_active:
                continue
            entries.append(
                LeaderboardEntry(
                    rank=len(entries) + 1,
                    user_id=user_id,
                    name=user.name,
                    points=points,
                )
            )
            if len(entries) == limit:
                break

        my_rank = next(
            (e.rank for e in entries if e.user_id == caller.user_id), None
        )
        return LeaderboardResponse(
            entries=entries,
            my_rank=my_rank,
            my_points=await self.get_balance(caller.user_id),
        )
