"""
Notification Service
In-app notifications for report submissions and reviewer feedback
"""

from typing import List
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from lecture_reports.core.exceptions import NotificationNotFoundError
from lecture_reports.models.notification import Notification
from lecture_reports.models.user import User, UserRole


class NotificationService:
    """Create, list and acknowledge notifications"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def notify(self, user_id: int, title: str, message: str, type: str = "info") -> Notification:
        notification = Notification(user_id=user_id, title=title, message=message, type=type)
        self.db.add(notification)
        await self.db.flush()
        return notification

    async def notify_role(self, role: UserRole, title: str, message: str, type: str = "info") -> int:
        """Notify every active user holding `role`; returns how many were notified"""
        result = await self.db.execute(
            select(User.id).where(User.role == role.value, User.is_active == True)  # noqa: E712
        )
        user_ids = result.scalars().all()
        for user_id in user_ids:
            self.db.add(Notification(user_id=user_id, title=title, message=message, type=type))
        if user_ids:
            await self.db.flush()
        return len(user_ids)

    async def list_for_user(self, user_id: int, unread_only: bool = False, limit: int = 50) -> List[Notification]:
        query = select(Notification).where(Notification.user_id == user_id)
        if unread_only:
            query = query.where(Notification.is_read == False)  # noqa: E712
        query = query.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def mark_read(self, user_id: int, notification_id: int) -> Notification:
        result = await self.db.execute(
            select(Notification).where(
                Notification.id == notification_id,
                Notification.user_id == user_id
            )
        )
        notification = result.scalar_one_or_none()
        if not notification:
            raise NotificationNotFoundError(notification_id)
        notification.is_read = True
        await self.db.flush()
        return notification

    async def mark_all_read(self, user_id: int) -> int:
        result = await self.db.execute(
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read == False)  # noqa: E712
            .values(is_read=True)
        )
        return result.rowcount or 0
