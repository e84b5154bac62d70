# ruff: noqa: S608 - All CQL queries use keyspace from config, not user input
"""Notification service layer.

Business logic for:
- Creating notifications and pushing them over Redis pub/sub
- Listing a learner's notifications with cursor pagination
- Marking notifications as read and tracking unread counts
"""

from typing import TYPE_CHECKING
from uuid import UUID

import orjson
import structlog
from redis.exceptions import RedisError

from src.core.errors import ValidationFailedError
from src.core.redis import notification_channel
from src.utils import utc_now

from .models import Notification, NotificationType
from .schemas import (
    NotificationListResponse,
    NotificationResponse,
    decode_cursor,
    encode_cursor,
)


if TYPE_CHECKING:
    from cassandra.cluster import Session
    from redis.asyncio import Redis


logger = structlog.get_logger(__name__)

# Upper bound of rows scanned when marking read
MARK_READ_SCAN_LIMIT = 1000


class NotificationService:
    """Service for notification management."""

    def __init__(self, session: "Session", keyspace: str, redis: "Redis | None" = None):
        """Initialize with Cassandra session and optional Redis."""
        self.session = session
        self.keyspace = keyspace
        self.redis = redis
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient queries."""
        self._insert_notification = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.notifications
            (user_id, created_at, notification_id, type, title, message,
             action_url, is_read, read_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        """)

        self._get_notifications = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.notifications
            WHERE user_id = ?
            LIMIT ?
        """)

        self._get_notifications_cursor = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.notifications
            WHERE user_id = ? AND created_at < ?
            LIMIT ?
        """)

        self._mark_read = self.session.prepare(f"""
            UPDATE {self.keyspace}.notifications
            SET is_read = true, read_at = ?
            WHERE user_id = ? AND created_at = ? AND notification_id = ?
        """)

        self._incr_unread = self.session.prepare(f"""
            UPDATE {self.keyspace}.notification_unread_counts
            SET count = count + 1
            WHERE user_id = ?
        """)

        self._decr_unread = self.session.prepare(f"""
            UPDATE {self.keyspace}.notification_unread_counts
            SET count = count - ?
            WHERE user_id = ?
        """)

        self._get_unread_count = self.session.prepare(f"""
            SELECT count FROM {self.keyspace}.notification_unread_counts
            WHERE user_id = ?
        """)

    # ==========================================================================
    # Notification Creation
    # ==========================================================================

    async def create_notification(
        self,
        user_id: UUID,
        notification_type: NotificationType,
        title: str,
        message: str,
        action_url: str | None = None,
    ) -> Notification:
        """Persist a notification and push it to the learner's channel."""
        notification = Notification.create(
            user_id=user_id,
            notification_type=notification_type,
            title=title,
            message=message,
            action_url=action_url,
        )
        await self.session.aexecute(
            self._insert_notification,
            [
                notification.user_id,
                notification.created_at,
                notification.notification_id,
                notification.type.value,
                notification.title,
                notification.message,
                notification.action_url,
                notification.is_read,
                notification.read_at,
            ],
        )
        await self.session.aexecute(self._incr_unread, [notification.user_id])

        logger.info(
            "notification_created",
            user_id=str(user_id),
            notification_type=notification_type.value,
            notification_id=str(notification.notification_id),
        )

        await self._publish_notification(notification)
        return notification

    async def _publish_notification(self, notification: Notification) -> None:
        """Publish notification to Redis Pub/Sub for real-time delivery."""
        if not self.redis:
            return

        try:
            await self.redis.publish(
                notification_channel(str(notification.user_id)),
                orjson.dumps(notification.to_message()),
            )
        except RedisError as e:
            # Stored already; clients will see it on the next list
            logger.warning(
                "notification_publish_failed",
                notification_id=str(notification.notification_id),
                error=str(e),
            )

    # ==========================================================================
    # Listing
    # ==========================================================================

    async def get_notifications(
        self,
        user_id: UUID,
        limit: int = 20,
        cursor: str | None = None,
        unread_only: bool = False,
    ) -> NotificationListResponse:
        """Get notifications for a user, newest first."""
        if cursor:
            try:
                created_before = decode_cursor(cursor)
            except ValueError as e:
                raise ValidationFailedError(
                    "Cursor tidak valid", field_errors={"cursor": [str(e)]}
                ) from e
            rows = await self.session.aexecute(
                self._get_notifications_cursor,
                [user_id, created_before, limit + 1],
            )
        else:
            rows = await self.session.aexecute(
                self._get_notifications,
                [user_id, limit + 1],
            )

        notifications = [
            Notification.from_row(row)
            for row in rows
            if not (unread_only and row.is_read)
        ]

        has_more = len(notifications) > limit
        notifications = notifications[:limit]

        next_cursor = None
        if has_more and notifications:
            next_cursor = encode_cursor(notifications[-1].created_at)

        return NotificationListResponse(
            items=[NotificationResponse.from_notification(n) for n in notifications],
            unread_count=await self.get_unread_count(user_id),
            has_more=has_more,
            next_cursor=next_cursor,
        )

    async def get_unread_count(self, user_id: UUID) -> int:
        """Get unread notification count for user."""
        result = await self.session.aexecute(self._get_unread_count, [user_id])
        row = result.one()
        return max(row.count, 0) if row and row.count else 0

    # ==========================================================================
    # Mark as Read
    # ==========================================================================

    async def mark_as_read(
        self,
        user_id: UUID,
        notification_ids: list[UUID] | None = None,
    ) -> int:
        """Mark the given notifications (or all when None) as read.

        Returns count of notifications marked as read.
        """
        wanted = set(notification_ids) if notification_ids is not None else None
        now = utc_now()
        marked = 0

        rows = await self.session.aexecute(
            self._get_notifications,
            [user_id, MARK_READ_SCAN_LIMIT],
        )
        for row in rows:
            if row.is_read:
                continue
            if wanted is not None and row.notification_id not in wanted:
                continue
            await self.session.aexecute(
                self._mark_read,
                [now, user_id, row.created_at, row.notification_id],
            )
            marked += 1

        if marked > 0:
            await self.session.aexecute(self._decr_unread, [marked, user_id])
            logger.info("notifications_marked_read", user_id=str(user_id), count=marked)

        return marked

    async def mark_all_as_read(self, user_id: UUID) -> int:
        return await self.mark_as_read(user_id, None)
