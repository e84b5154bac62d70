"""Points ledger tables.

``point_history`` is append-only; the balance lives in a counter table so
concurrent awards never lose increments.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any
from uuid import UUID

from src.utils import ensure_utc_aware


POINT_HISTORY_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.point_history (
    user_id UUID,
    created_at TIMESTAMP,
    entry_id UUID,
    amount INT,
    reason TEXT,
    PRIMARY KEY ((user_id), created_at, entry_id)
) WITH CLUSTERING ORDER BY (created_at DESC, entry_id ASC)
"""

USER_POINTS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.user_points (
    user_id UUID PRIMARY KEY,
    points COUNTER
)
"""

# Counters cannot be ordered, so balances are mirrored here by award_points.
# A user may briefly have more than one row; the highest one is current.
POINTS_LEADERBOARD_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.points_leaderboard (
    board TEXT,
    points INT,
    user_id UUID,
    PRIMARY KEY ((board), points, user_id)
) WITH CLUSTERING ORDER BY (points DESC, user_id ASC)
"""

GLOBAL_BOARD = "global"

REWARDS_TABLES_CQL = [
    POINT_HISTORY_TABLE_CQL,
    USER_POINTS_TABLE_CQL,
    POINTS_LEADERBOARD_TABLE_CQL,
]


@dataclass
class PointEntry:
    entry_id: UUID
    user_id: UUID
    amount: int
    reason: str
    created_at: datetime

    @classmethod
    def from_row(cls, row: Any) -> "PointEntry":
        return cls(
            entry_id=row.entry_id,
            user_id=row.user_id,
            amount=row.amount,
            reason=row.reason,
            created_at=ensure_utc_aware(row.created_at),
        )
