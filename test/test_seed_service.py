"""
Tests for demo data seeding.
"""

import httpx
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from syncora.models.user import User
from syncora.services.gemini_service import GeminiService
from syncora.services.inbox_service import InboxService
from syncora.services.notification_service import NotificationService
from syncora.services.seed_service import seed_demo_data
from syncora.services.task_service import TaskService


class TestSeedDemoData:
    async def test_seeds_emails_tasks_and_notification(self, test_db: AsyncSession, test_user: User, gemini):
        assert await seed_demo_data(test_db, test_user.id, gemini) is True

        emails = await InboxService(test_db).list_emails(test_user.id)
        tasks = await TaskService(test_db).list_tasks(test_user.id)
        notifications = await NotificationService(test_db).list_notifications(test_user.id)

        assert len(emails) == 3
        assert emails[0].subject.startswith("Urgent")
        assert len(tasks) == 3
        assert {task.priority for task in tasks} == {"high", "medium", "low"}
        assert notifications[0].title == "Welcome to Syncora!"

    async def test_priorities_come_from_ai(self, test_db: AsyncSession, test_user: User):
        gemini = GeminiService(
            api_key="k",
            base_url="https://ai.test",
            transport=httpx.MockTransport(
                lambda request: httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": "medium"}]}}]})
            ),
        )

        await seed_demo_data(test_db, test_user.id, gemini)

        emails = await InboxService(test_db).list_emails(test_user.id)
        assert {email.priority for email in emails} == {"medium"}

    async def test_failure_is_reported_not_raised(self, test_db: AsyncSession, test_user: User, gemini, monkeypatch):
        async def broken_create_email(self, **kwargs):
            raise OperationalError("INSERT", {}, Exception("disk full"))

        monkeypatch.setattr(InboxService, "create_email", broken_create_email)

        assert await seed_demo_data(test_db, test_user.id, gemini) is False
