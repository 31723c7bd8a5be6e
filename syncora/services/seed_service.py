"""
Demo Data Seeding

New accounts start with a few sample emails, tasks and a welcome
notification so the dashboard is not empty. Seeding is best effort: a
failure is logged and never fails the signup or login that triggered it.
"""

import logging
from datetime import datetime, timedelta

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from syncora.exceptions import SyncoraError
from syncora.services.gemini_service import GeminiService
from syncora.services.inbox_service import InboxService
from syncora.services.notification_service import NotificationService
from syncora.services.task_service import TaskService

logger = logging.getLogger(__name__)

DEMO_EMAILS = [
    {
        "message_id": "demo-1",
        "thread_id": "thread-1",
        "sender": "boss@company.com",
        "subject": "Urgent: Q4 Budget Review Meeting Tomorrow",
        "snippet": "Hi, we need to discuss the Q4 budget allocations. Please review the attached documents before our meeting tomorrow at 2 PM.",
        "body": (
            "Hi,\n\nWe need to discuss the Q4 budget allocations urgently. Please review the attached "
            "documents before our meeting tomorrow at 2 PM in Conference Room A.\n\n"
            "Key points to review:\n- Department budgets\n- Capital expenditures\n- Revenue projections\n\n"
            "Thanks,\nSarah"
        ),
        "hours_ago": 1,
    },
    {
        "message_id": "demo-2",
        "thread_id": "thread-2",
        "sender": "team@project.com",
        "subject": "Weekly Team Sync - Project Updates",
        "snippet": "Join us for our weekly sync on Friday at 10 AM. Agenda includes sprint review and planning.",
        "body": (
            "Hi team,\n\nJoin us for our weekly sync on Friday at 10 AM via Zoom.\n\n"
            "Agenda:\n1. Sprint review\n2. Blockers discussion\n3. Next sprint planning\n\nSee you there!"
        ),
        "hours_ago": 3,
    },
    {
        "message_id": "demo-3",
        "thread_id": "thread-3",
        "sender": "newsletter@techblog.com",
        "subject": "This Week in Tech: AI Advances",
        "snippet": "Discover the latest developments in artificial intelligence and machine learning.",
        "body": "Welcome to this week's tech newsletter. Here are the top stories...",
        "hours_ago": 5,
    },
]

DEMO_TASKS = [
    {
        "title": "Review Q4 budget documents",
        "description": "Review attached documents before tomorrow's meeting",
        "priority": "high",
        "due_in_hours": 24,
    },
    {
        "title": "Prepare sprint review presentation",
        "description": "Create slides for Friday's team sync",
        "priority": "medium",
        "due_in_hours": 72,
    },
    {
        "title": "Update project documentation",
        "description": None,
        "priority": "low",
        "due_in_hours": None,
    },
]


async def seed_demo_data(db: AsyncSession, user_id: str, gemini: GeminiService | None = None) -> bool:
    """
    Create demo emails, tasks and a welcome notification for a new user.

    Returns True when everything was written.
    """
    gemini = gemini or GeminiService()
    inbox = InboxService(db)
    tasks = TaskService(db)
    notifications = NotificationService(db)
    now = datetime.utcnow()

    try:
        for item in DEMO_EMAILS:
            priority = await gemini.analyze_email_priority(item["subject"], item["snippet"])
            await inbox.create_email(
                user_id=user_id,
                message_id=f"{item['message_id']}-{user_id}",
                thread_id=item["thread_id"],
                sender=item["sender"],
                subject=item["subject"],
                snippet=item["snippet"],
                body=item["body"],
                priority=priority,
                received_at=now - timedelta(hours=item["hours_ago"]),
            )

        for item in DEMO_TASKS:
            due_date = now + timedelta(hours=item["due_in_hours"]) if item["due_in_hours"] else None
            await tasks.create_task(
                user_id=user_id,
                title=item["title"],
                description=item["description"],
                priority=item["priority"],
                due_date=due_date,
            )

        await notifications.create_notification(
            user_id=user_id,
            type="email",
            title="Welcome to Syncora!",
            message="Your AI-powered productivity dashboard is ready. Check out your prioritized emails and tasks.",
        )
    except (SQLAlchemyError, SyncoraError) as e:
        await db.rollback()
        logger.error(f"Error seeding demo data for user {user_id}: {e}")
        return False

    logger.info(f"Demo data seeded for user {user_id}")
    return True
