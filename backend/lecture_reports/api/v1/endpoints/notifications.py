from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from lecture_reports.core.database import get_db
from lecture_reports.models.user import User
from lecture_reports.modules.auth.dependencies import get_current_user
from lecture_reports.schemas.user import NotificationResponse
from lecture_reports.services.notification_service import NotificationService
from lecture_reports.utils.responses import success_response

router = APIRouter()


@router.get("")
async def list_notifications(
    unread_only: bool = False,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    notifications = await NotificationService(db).list_for_user(current_user.id, unread_only=unread_only)
    return success_response([NotificationResponse.model_validate(n).model_dump() for n in notifications])


@router.patch("/read-all")
async def mark_all_notifications_read(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    updated = await NotificationService(db).mark_all_read(current_user.id)
    await db.commit()
    return success_response({"updated": updated}, "Notifications marked as read")


@router.patch("/{notification_id}/read")
async def mark_notification_read(
    notification_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    notification = await NotificationService(db).mark_read(current_user.id, notification_id)
    payload = NotificationResponse.model_validate(notification).model_dump()
    await db.commit()
    return success_response(payload, "Notification marked as read")
