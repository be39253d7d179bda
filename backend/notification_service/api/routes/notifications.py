"""
Notification API Routes

Provides REST endpoints for:
- POST /api/v1/notifications/send - Create and deliver a notification
- GET /api/v1/notifications/user/{user_id} - List a user's notifications
- PATCH /api/v1/notifications/{id}/read - Mark as read
- PATCH /api/v1/notifications/user/{user_id}/read-all - Mark all as read
- DELETE /api/v1/notifications/{id} - Delete a notification
- POST /api/v1/notifications/push-subscription - Store browser push subscription
- GET /api/v1/notifications/preferences - Get resolved preferences
- PATCH /api/v1/notifications/preferences - Update preferences
"""

from typing import NoReturn
from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from notification_service.api.dependencies import get_current_user_id, get_notification_service
from notification_service.models.notification import (
    MessageResponse,
    NotificationListData,
    NotificationListResponse,
    NotificationResponse,
    Pagination,
    PreferencesResponse,
    PreferencesUpdate,
    PushSubscriptionRequest,
    SendNotificationRequest,
    SendNotificationResponse,
    UserSettingsResponse,
)
from notification_service.notifications.exceptions import (
    NotificationNotFoundError,
    NotificationServiceError,
    NotificationValidationError,
)
from notification_service.notifications.service import NotificationService

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/v1/notifications", tags=["notifications"])


def _raise_http(error: NotificationServiceError) -> NoReturn:
    """Map a service exception to an HTTPException."""
    if isinstance(error, NotificationValidationError):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error.message)
    if isinstance(error, NotificationNotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error.message)
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=error.message)


def _require_same_user(path_user_id: str, current_user_id: str) -> None:
    if path_user_id != current_user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Cannot access notifications of another user",
        )


@router.post("/send", response_model=SendNotificationResponse)
async def send_notification(
    request: SendNotificationRequest,
    current_user_id: str = Depends(get_current_user_id),
    service: NotificationService = Depends(get_notification_service),
):
    """
    Create a notification for a user and deliver it on the requested channels.

    Channels default to push. Channels the user disabled or has no address for
    are skipped and absent from ``delivery_results``, as are unknown channel names.
    """
    try:
        result = await service.send_notification(
            user_id=request.user_id,
            notification_type=request.type,
            title=request.title,
            message=request.message,
            data=request.data,
            channels=request.channels,
        )
    except NotificationServiceError as e:
        logger.warning(
            "Send notification rejected",
            requested_by=current_user_id,
            error=e.message,
            details=e.details,
        )
        _raise_http(e)

    return SendNotificationResponse(data=result)


@router.get("/user/{user_id}", response_model=NotificationListResponse)
async def get_user_notifications(
    user_id: str = Path(..., description="Owning user ID"),
    page: int = Query(1, ge=1, description="1-based page number"),
    limit: int = Query(20, ge=1, le=100, description="Page size"),
    unread_only: bool = Query(False, description="Only return unread notifications"),
    current_user_id: str = Depends(get_current_user_id),
    service: NotificationService = Depends(get_notification_service),
):
    """Get a page of the user's notifications ordered by most recent first."""
    _require_same_user(user_id, current_user_id)

    try:
        result = await service.list_notifications(
            user_id, page=page, limit=limit, unread_only=unread_only
        )
    except NotificationServiceError as e:
        _raise_http(e)

    return NotificationListResponse(
        data=NotificationListData(
            notifications=result.items,
            pagination=Pagination(page=result.page, limit=result.limit, has_more=result.has_more),
        )
    )


@router.patch("/user/{user_id}/read-all", response_model=MessageResponse)
async def mark_all_notifications_read(
    user_id: str = Path(..., description="Owning user ID"),
    current_user_id: str = Depends(get_current_user_id),
    service: NotificationService = Depends(get_notification_service),
):
    """Mark every unread notification of the user as read."""
    _require_same_user(user_id, current_user_id)

    await service.mark_all_read(user_id)

    return MessageResponse(message="All notifications marked as read")


@router.post("/push-subscription", response_model=MessageResponse)
async def update_push_subscription(
    request: PushSubscriptionRequest,
    current_user_id: str = Depends(get_current_user_id),
    service: NotificationService = Depends(get_notification_service),
):
    """Store the browser push subscription of the current user and enable push."""
    try:
        await service.update_push_subscription(current_user_id, request.subscription)
    except NotificationServiceError as e:
        _raise_http(e)

    return MessageResponse(message="Push subscription updated")


@router.get("/preferences", response_model=PreferencesResponse)
async def get_preferences(
    current_user_id: str = Depends(get_current_user_id),
    service: NotificationService = Depends(get_notification_service),
):
    """Get the current user's resolved channel preferences (defaults applied)."""
    preferences = await service.get_preferences(current_user_id)
    return PreferencesResponse(data=preferences)


@router.patch("/preferences", response_model=UserSettingsResponse)
async def update_preferences(
    update: PreferencesUpdate,
    current_user_id: str = Depends(get_current_user_id),
    service: NotificationService = Depends(get_notification_service),
):
    """
    Update the current user's channel preferences.

    Only fields present in the request body are changed.
    """
    settings = await service.update_preferences(current_user_id, update)
    return UserSettingsResponse(data=settings)


@router.patch("/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: UUID = Path(..., description="Notification ID"),
    current_user_id: str = Depends(get_current_user_id),
    service: NotificationService = Depends(get_notification_service),
):
    """
    Mark a notification as read.

    Only the owning user can mark their notifications as read.
    """
    try:
        notification = await service.mark_read(notification_id, current_user_id)
    except NotificationServiceError as e:
        _raise_http(e)

    return NotificationResponse(data=notification)


@router.delete("/{notification_id}", response_model=MessageResponse)
async def delete_notification(
    notification_id: UUID = Path(..., description="Notification ID"),
    current_user_id: str = Depends(get_current_user_id),
    service: NotificationService = Depends(get_notification_service),
):
    """Delete a notification owned by the current user."""
    try:
        await service.delete_notification(notification_id, current_user_id)
    except NotificationServiceError as e:
        _raise_http(e)

    return MessageResponse(message="Notification deleted")
