"""
Notification endpoints
Clients poll these; read state is the only thing a recipient can change
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query

from efiling.api.deps import RequestContext, require_participant
from efiling.schemas.notification import NotificationListResponse, NotificationResponse
from efiling.services.notification_service import NotificationService

router = APIRouter()


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    unread_only: bool = Query(False),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    ctx: RequestContext = Depends(require_participant),
):
    return await NotificationService(ctx.db).list_for_user(
        ctx.efiling_user_id, unread_only=unread_only, limit=limit, offset=offset
    )


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: UUID,
    ctx: RequestContext = Depends(require_participant),
):
    return await NotificationService(ctx.db).mark_read(str(notification_id), ctx.efiling_user_id)
