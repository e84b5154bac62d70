"""Side effects triggered by learning milestones.

Points, notifications and emails are best-effort: a failure is logged as
``side_effect_failed`` and never propagates into the operation that
triggered it.
"""

from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from src.email.schemas import EmailMessage
from src.notifications.models import NotificationType


if TYPE_CHECKING:
    from src.email.service import EmailSender
    from src.notifications.service import NotificationService
    from src.rewards.service import PointsService


logger = structlog.get_logger(__name__)


class RewardHooks:
    """Failure-isolated wrappers around points, notifications and email."""

    def __init__(
        self,
        points: "PointsService",
        notifications: "NotificationService",
        email: "EmailSender",
        portal_base_url: str = "/portal",
    ):
        self.points = points
        self.notifications = notifications
        self.email = email
        self.portal_base_url = portal_base_url.rstrip("/")

    def portal_url(self, path: str) -> str:
        return f"{self.portal_base_url}/{path.lstrip('/')}"

    async def award_points(self, user_id: UUID, amount: int, reason: str) -> None:
        try:
            await self.points.award_points(user_id, amount, reason)
        except Exception as e:
            logger.exception(
                "side_effect_failed",
                hook="award_points",
                user_id=str(user_id),
                amount=amount,
                error=str(e),
            )

    async def notify(
        self,
        user_id: UUID,
        notification_type: NotificationType,
        title: str,
        message: str,
        action_url: str | None = None,
    ) -> None:
        try:
            await self.notifications.create_notification(
                user_id=user_id,
                notification_type=notification_type,
                title=title,
                message=message,
                action_url=action_url,
            )
        except Exception as e:
            logger.exception(
                "side_effect_failed",
                hook="notify",
                user_id=str(user_id),
                notification_type=notification_type.value,
                error=str(e),
            )

    async def send_email(
        self,
        to: str | None,
        subject: str,
        body: str,
        html: str | None = None,
        to_name: str | None = None,
    ) -> None:
        """Send an email; recipients without an address are skipped."""
        if not to:
            logger.debug("email_skipped_no_recipient", subject=subject[:50])
            return
        try:
            result = await self.email.send(
                EmailMessage(
                    to=to,
                    to_name=to_name,
                    subject=subject,
                    body_text=body,
                    body_html=html,
                )
            )
        except Exception as e:
            logger.exception(
                "side_effect_failed",
                hook="send_email",
                subject=subject[:50],
                error=str(e),
            )
            return
        if not result.success:
            logger.warning("side_effect_failed", hook="send_email", error=result.error)
