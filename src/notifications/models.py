"""Database models for learner notifications.

Notification types:
- INFO: Enrollment confirmations, unlocked courses
- ACHIEVEMENT: Points earned, completed paths
- REMINDER: Deadlines and nudges
- SYSTEM: Announcements
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from src.utils import ensure_utc_aware, utc_now


NOTIFICATION_MESSAGE_MAX_LENGTH = 500


class NotificationType(str, Enum):
    """Types of notifications."""

    INFO = "INFO"
    ACHIEVEMENT = "ACHIEVEMENT"
    REMINDER = "REMINDER"
    SYSTEM = "SYSTEM"


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

NOTIFICATION_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.notifications (
    user_id UUID,
    created_at TIMESTAMP,
    notification_id UUID,
    type TEXT,
    title TEXT,
    message TEXT,
    action_url TEXT,
    is_read BOOLEAN,
    read_at TIMESTAMP,
    PRIMARY KEY ((user_id), created_at, notification_id)
) WITH CLUSTERING ORDER BY (created_at DESC, notification_id ASC)
"""

UNREAD_COUNT_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.notification_unread_counts (
    user_id UUID PRIMARY KEY,
    count COUNTER
)
"""

NOTIFICATIONS_TABLES_CQL = [
    NOTIFICATION_TABLE_CQL,
    UNREAD_COUNT_TABLE_CQL,
]


@dataclass
class Notification:
    notification_id: UUID
    user_id: UUID
    type: NotificationType
    title: str
    message: str
    action_url: str | None
    is_read: bool
    read_at: datetime | None
    created_at: datetime

    @classmethod
    def create(
        cls,
        user_id: UUID,
        notification_type: NotificationType,
        title: str,
        message: str,
        action_url: str | None = None,
    ) -> "Notification":
        """Build a new unread notification."""
        return cls(
            notification_id=uuid4(),
            user_id=user_id,
            type=notification_type,
            title=title,
            message=message[:NOTIFICATION_MESSAGE_MAX_LENGTH],
            action_url=action_url,
            is_read=False,
            read_at=None,
            created_at=utc_now(),
        )

    @classmethod
    def from_row(cls, row: Any) -> "Notification":
        """Create Notification from Cassandra row."""
        return cls(
            notification_id=row.notification_id,
            user_id=row.user_id,
            type=NotificationType(row.type),
            title=row.title,
            message=row.message,
            action_url=row.action_url,
            is_read=row.is_read or False,
            read_at=ensure_utc_aware(row.read_at),
            created_at=ensure_utc_aware(row.created_at),
        )

    def to_message(self) -> dict[str, Any]:
        """Payload pushed to the learner's pub/sub channel."""
        return {
            "type": "notification",
            "data": {
                "id": str(self.notification_id),
                "type": self.type.value,
                "title": self.title,
                "message": self.message,
                "action_url": self.action_url,
                "created_at": self.created_at.isoformat(),
            },
        }
