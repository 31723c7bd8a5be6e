from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from syncora.services.calendar_service import CalendarService
from syncora.services.gemini_service import GeminiService
from syncora.services.inbox_service import InboxService
from syncora.services.task_service import TaskService


class AssistantService:
    """Dashboard chat: answers questions with a summary of the user's data as context."""

    def __init__(self, db: AsyncSession, gemini: GeminiService):
        self.db = db
        self.gemini = gemini

    async def build_context(self, user_id: str) -> dict:
        emails = await InboxService(self.db).list_emails(user_id)
        events = await CalendarService(self.db).list_events(user_id)
        tasks = await TaskService(self.db).list_tasks(user_id)
        now = datetime.utcnow()

        return {
            "emailCount": len(emails),
            "highPriorityEmails": sum(1 for email in emails if email.priority == "high"),
            "upcomingMeetings": sum(1 for event in events if event.start_time > now),
            "pendingTasks": sum(1 for task in tasks if not task.is_completed),
        }

    async def chat(self, user_id: str, message: str) -> str:
        context = await self.build_context(user_id)
        return await self.gemini.chat(message, context)
