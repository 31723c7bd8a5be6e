from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from syncora.exceptions import ResourceNotFoundError
from syncora.models.notification import Notification

NOTIFICATIONS_LIMIT = 50


class NotificationService:
    """Service for in-app notifications."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_notifications(self, user_id: str) -> list[Notification]:
        result = await self.db.execute(
            select(Notification)
            .where(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc())
            .limit(NOTIFICATIONS_LIMIT)
        )
        return list(result.scalars().all())

    async def create_notification(
        self,
        user_id: str,
        type: str,
        title: str,
        message: str,
        extra_data: dict | None = None,
    ) -> Notification:
        notification = Notification(
            user_id=user_id,
            type=type,
            title=title,
            message=message,
            extra_data=extra_data,
        )
        self.db.add(notification)
        await self.db.commit()
        await self.db.refresh(notification)
        return notification

    async def mark_read(self, user_id: str, notification_id: str) -> None:
        result = await self.db.execute(select(Notification).where(Notification.id == notification_id))
        notification = result.scalars().first()
        if notification is None or notification.user_id != user_id:
            raise ResourceNotFoundError("Notification", notification_id)
        notification.is_read = True
        await self.db.commit()
