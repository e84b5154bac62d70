"""Tests for failure-isolated side effects."""

from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from src.email.schemas import SendEmailResponse
from src.notifications.models import NotificationType
from src.rewards.hooks import RewardHooks


@pytest.fixture
def points() -> MagicMock:
    service = MagicMock()
    service.award_points = AsyncMock()
    return service


@pytest.fixture
def notifications() -> MagicMock:
    service = MagicMock()
    service.create_notification = AsyncMock()
    return service


@pytest.fixture
def email() -> MagicMock:
    sender = MagicMock()
    sender.send = AsyncMock(return_value=SendEmailResponse(success=True))
    return sender


@pytest.fixture
def reward_hooks(points, notifications, email) -> RewardHooks:
    return RewardHooks(
        points=points,
        notifications=notifications,
        email=email,
        portal_base_url="https://learn.example.com/portal/",
    )


class TestRewardHooks:
    """Tests for RewardHooks."""

    def test_portal_url(self, reward_hooks: RewardHooks) -> None:
        assert (
            reward_hooks.portal_url("/certificates")
            == "https://learn.example.com/portal/certificates"
        )

    @pytest.mark.asyncio
    async def test_award_points_delegates(
        self, reward_hooks: RewardHooks, points: MagicMock
    ) -> None:
        user_id = uuid4()

        await reward_hooks.award_points(user_id, 50, "Lulus kuis")

        points.award_points.assert_awaited_once_with(user_id, 50, "Lulus kuis")

    @pytest.mark.asyncio
    async def test_award_points_failure_is_swallowed(
        self, reward_hooks: RewardHooks, points: MagicMock
    ) -> None:
        points.award_points.side_effect = RuntimeError("counter write timed out")

        await reward_hooks.award_points(uuid4(), 50, "Lulus kuis")

    @pytest.mark.asyncio
    async def test_notify_failure_is_swallowed(
        self, reward_hooks: RewardHooks, notifications: MagicMock
    ) -> None:
        notifications.create_notification.side_effect = ConnectionError("down")

        await reward_hooks.notify(
            uuid4(), NotificationType.ACHIEVEMENT, "Kursus Selesai", "Selamat!"
        )

        notifications.create_notification.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_send_email(self, reward_hooks: RewardHooks, email: MagicMock) -> None:
        await reward_hooks.send_email(
            "budi@example.com", "Subjek", "Isi", "<p>Isi</p>", "Budi"
        )

        message = email.send.await_args.args[0]
        assert message.to == "budi@example.com"
        assert message.to_name == "Budi"
        assert message.body_html == "<p>Isi</p>"

    @pytest.mark.asyncio
    async def test_send_email_without_recipient_is_skipped(
        self, reward_hooks: RewardHooks, email: MagicMock
    ) -> None:
        await reward_hooks.send_email(None, "Subjek", "Isi")
        await reward_hooks.send_email("", "Subjek", "Isi")

        email.send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_send_email_failures_are_swallowed(
        self, reward_hooks: RewardHooks, email: MagicMock
    ) -> None:
        email.send.side_effect = OSError("network unreachable")
        await reward_hooks.send_email("budi@example.com", "Subjek", "Isi")

        email.send.side_effect = None
        email.send.return_value = SendEmailResponse(success=False, error="quota")
        await reward_hooks.send_email("budi@example.com", "Subjek", "Isi")

        assert email.send.await_count == 2
