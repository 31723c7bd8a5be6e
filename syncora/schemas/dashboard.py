from datetime import datetime
from typing import Any

from pydantic import AliasChoices, ConfigDict, Field

from syncora.models.task import Priority
from syncora.schemas import CamelModel


# ============== Emails ==============


class EmailResponse(CamelModel):
    id: str
    message_id: str
    thread_id: str | None = None
    sender: str = Field(..., validation_alias=AliasChoices("sender", "from"), serialization_alias="from")
    subject: str
    snippet: str | None = None
    body: str | None = None
    priority: str
    is_read: bool
    received_at: datetime
    summary: str | None = None
    extracted_meeting: dict[str, Any] | None = None


class EmailSummaryResponse(CamelModel):
    summary: str
    extracted_meeting: dict[str, Any] | None = None


# ============== Calendar ==============


class CalendarEventResponse(CamelModel):
    id: str
    google_event_id: str | None = None
    title: str
    description: str | None = None
    start_time: datetime
    end_time: datetime
    location: str | None = None
    meeting_link: str | None = None
    attendees: list[str] | None = None


# ============== Tasks ==============


class TaskCreate(CamelModel):
    model_config = ConfigDict(use_enum_values=True)

    title: str = Field(..., min_length=1, max_length=500)
    description: str | None = None
    priority: Priority = Priority.MEDIUM.value
    due_date: datetime | None = None
    email_id: str | None = None


class TaskUpdate(CamelModel):
    model_config = ConfigDict(use_enum_values=True)

    title: str | None = Field(None, min_length=1, max_length=500)
    description: str | None = None
    priority: Priority | None = None
    is_completed: bool | None = None
    due_date: datetime | None = None


class TaskResponse(CamelModel):
    id: str
    email_id: str | None = None
    title: str
    description: str | None = None
    priority: str
    is_completed: bool
    due_date: datetime | None = None
    created_at: datetime


# ============== Notifications ==============


class NotificationResponse(CamelModel):
    id: str
    type: str
    title: str
    message: str
    is_read: bool
    extra_data: dict[str, Any] | None = Field(
        None, validation_alias=AliasChoices("extra_data", "metadata"), serialization_alias="metadata"
    )
    created_at: datetime


# ============== Assistant ==============


class ChatRequest(CamelModel):
    message: str = Field(..., min_length=1, max_length=4000)


class ChatResponse(CamelModel):
    response: str
