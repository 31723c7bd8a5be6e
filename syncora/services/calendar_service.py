from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from syncora.models.calendar_event import CalendarEvent

EVENTS_LIMIT = 50


class CalendarService:
    """Service for stored calendar events."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_events(self, user_id: str) -> list[CalendarEvent]:
        """Ordered by start time."""
        result = await self.db.execute(
            select(CalendarEvent)
            .where(CalendarEvent.user_id == user_id)
            .order_by(CalendarEvent.start_time)
            .limit(EVENTS_LIMIT)
        )
        return list(result.scalars().all())

    async def create_event(
        self,
        user_id: str,
        title: str,
        start_time: datetime,
        end_time: datetime,
        description: str | None = None,
        location: str | None = None,
        meeting_link: str | None = None,
        attendees: list[str] | None = None,
        google_event_id: str | None = None,
    ) -> CalendarEvent:
        event = CalendarEvent(
            user_id=user_id,
            google_event_id=google_event_id,
            title=title,
            description=description,
            start_time=start_time,
            end_time=end_time,
            location=location,
            meeting_link=meeting_link,
            attendees=attendees,
        )
        self.db.add(event)
        await self.db.commit()
        await self.db.refresh(event)
        return event
