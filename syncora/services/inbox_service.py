"""
Inbox Service

Stored emails for the dashboard plus AI summarization of a single email.
"""

import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from syncora.exceptions import ResourceNotFoundError
from syncora.models.email import Email
from syncora.services.gemini_service import GeminiService

logger = logging.getLogger(__name__)

# Maximum emails returned by list_emails
INBOX_LIMIT = 50


class InboxService:
    """Service for a user's stored emails."""

    def __init__(self, db: AsyncSession, gemini: GeminiService | None = None):
        self.db = db
        self.gemini = gemini

    async def list_emails(self, user_id: str) -> list[Email]:
        """Newest first."""
        result = await self.db.execute(
            select(Email).where(Email.user_id == user_id).order_by(Email.received_at.desc()).limit(INBOX_LIMIT)
        )
        return list(result.scalars().all())

    async def get_email(self, user_id: str, email_id: str) -> Email:
        result = await self.db.execute(select(Email).where(Email.id == email_id))
        email = result.scalars().first()
        # Another user's email is reported exactly like a missing one
        if email is None or email.user_id != user_id:
            raise ResourceNotFoundError("Email", email_id)
        return email

    async def create_email(
        self,
        user_id: str,
        message_id: str,
        sender: str,
        subject: str,
        received_at: datetime,
        thread_id: str | None = None,
        snippet: str | None = None,
        body: str | None = None,
        priority: str = "low",
    ) -> Email:
        email = Email(
            user_id=user_id,
            message_id=message_id,
            thread_id=thread_id,
            sender=sender,
            subject=subject,
            snippet=snippet,
            body=body,
            priority=priority,
            received_at=received_at,
        )
        self.db.add(email)
        await self.db.commit()
        await self.db.refresh(email)
        return email

    async def summarize(self, user_id: str, email_id: str) -> dict:
        """
        Summarize an email and extract any meeting details.

        Both results are persisted on the email.
        """
        email = await self.get_email(user_id, email_id)
        content = email.body or email.snippet or ""

        summary = await self.gemini.summarize_email(content)
        extracted_meeting = await self.gemini.extract_meeting_details(content)

        email.summary = summary
        email.extracted_meeting = extracted_meeting
        await self.db.commit()

        logger.info(f"Summarized email {email_id} for user {user_id}")
        return {"summary": summary, "extractedMeeting": extracted_meeting}
