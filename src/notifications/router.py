"""Notification API routes.

Endpoints for:
- GET /v1/notifications - List notifications
- GET /v1/notifications/unread-count - Get unread count
- POST /v1/notifications/mark-read - Mark specific as read
- POST /v1/notifications/mark-all-read - Mark all as read
"""

from fastapi import APIRouter, Query

from src.auth.dependencies import CallerDep
from src.auth.schemas import Identity
from src.core.errors import UnauthenticatedError
from src.core.results import ActionResult
from src.notifications.dependencies import NotificationServiceDep
from src.notifications.schemas import (
    MarkReadRequest,
    MarkReadResponse,
    NotificationListResponse,
    UnreadCountResponse,
)


router = APIRouter(
    prefix="/v1/notifications",
    tags=["notifications"],
)


def _require_caller(caller: Identity | None) -> Identity:
    if caller is None:
        raise UnauthenticatedError
    return caller


@router.get(
    "",
    response_model=ActionResult[NotificationListResponse],
    summary="List notifications",
)
async def list_notifications(
    caller: CallerDep,
    service: NotificationServiceDep,
    limit: int = Query(default=20, ge=1, le=100, description="Items per page"),
    cursor: str | None = Query(default=None, description="Pagination cursor"),
    unread_only: bool = Query(default=False, description="Only show unread"),
) -> ActionResult[NotificationListResponse]:
    """List the caller's notifications, newest first."""
    user = _require_caller(caller)
    notifications = await service.get_notifications(
        user_id=user.user_id,
        limit=limit,
        cursor=cursor,
        unread_only=unread_only,
    )
    return ActionResult.ok(notifications)


@router.get(
    "/unread-count",
    response_model=ActionResult[UnreadCountResponse],
    summary="Get unread notification count",
)
async def get_unread_count(
    caller: CallerDep,
    service: NotificationServiceDep,
) -> ActionResult[UnreadCountResponse]:
    user = _require_caller(caller)
    count = await service.get_unread_count(user_id=user.user_id)
    return ActionResult.ok(UnreadCountResponse(count=count))


@router.post(
    "/mark-read",
    response_model=ActionResult[MarkReadResponse],
    summary="Mark notifications as read",
)
async def mark_notifications_read(
    body: MarkReadRequest,
    caller: CallerDep,
    service: NotificationServiceDep,
) -> ActionResult[MarkReadResponse]:
    user = _require_caller(caller)
    marked_count = await service.mark_as_read(
        user_id=user.user_id,
        notification_ids=body.notification_ids,
    )
    unread_count = await service.get_unread_count(user_id=user.user_id)
    return ActionResult.ok(
        MarkReadResponse(marked_count=marked_count, unread_count=unread_count)
    )


@router.post(
    "/mark-all-read",
    response_model=ActionResult[MarkReadResponse],
    summary="Mark all notifications as read",
)
async def mark_all_read(
    caller: CallerDep,
    service: NotificationServiceDep,
) -> ActionResult[MarkReadResponse]:
    user = _require_caller(caller)
    marked_count = await service.mark_all_as_read(user_id=user.user_id)
    unread_count = await service.get_unread_count(user_id=user.user_id)
    return ActionResult.ok(
        MarkReadResponse(marked_count=marked_count, unread_count=unread_count)
    )
