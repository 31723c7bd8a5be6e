"""
Dashboard API Routes

Current user, inbox, calendar, tasks, notifications and the assistant.
Everything here requires a session and is scoped to the signed-in user.
"""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from syncora.auth import get_current_user
from syncora.database import get_db
from syncora.models.user import User
from syncora.schemas.auth import CurrentUserResponse, SuccessResponse
from syncora.schemas.dashboard import (
    CalendarEventResponse,
    ChatRequest,
    ChatResponse,
    EmailResponse,
    EmailSummaryResponse,
    NotificationResponse,
    TaskCreate,
    TaskResponse,
    TaskUpdate,
)
from syncora.services.assistant_service import AssistantService
from syncora.services.calendar_service import CalendarService
from syncora.services.gemini_service import GeminiService, get_gemini_service
from syncora.services.inbox_service import InboxService
from syncora.services.notification_service import NotificationService
from syncora.services.task_service import TaskService

router = APIRouter()


# ============== User ==============


@router.get("/user", response_model=CurrentUserResponse)
async def get_user(current_user: User = Depends(get_current_user)):
    return current_user


# ============== Emails ==============


@router.get("/emails", response_model=list[EmailResponse])
async def list_emails(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await InboxService(db).list_emails(current_user.id)


@router.post("/emails/{email_id}/summarize", response_model=EmailSummaryResponse)
async def summarize_email(
    email_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    gemini: GeminiService = Depends(get_gemini_service),
):
    """Summarize an email with the AI model and store the result on it."""
    return await InboxService(db, gemini).summarize(current_user.id, email_id)


# ============== Calendar ==============


@router.get("/calendar/events", response_model=list[CalendarEventResponse])
async def list_calendar_events(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await CalendarService(db).list_events(current_user.id)


# ============== Tasks ==============


@router.get("/tasks", response_model=list[TaskResponse])
async def list_tasks(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await TaskService(db).list_tasks(current_user.id)


@router.post("/tasks", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    payload: TaskCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await TaskService(db).create_task(current_user.id, **payload.model_dump())


@router.patch("/tasks/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: str,
    payload: TaskUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await TaskService(db).update_task(current_user.id, task_id, payload.model_dump(exclude_unset=True))


@router.delete("/tasks/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(
    task_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    await TaskService(db).delete_task(current_user.id, task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ============== Notifications ==============


@router.get("/notifications", response_model=list[NotificationResponse])
async def list_notifications(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await NotificationService(db).list_notifications(current_user.id)


@router.patch("/notifications/{notification_id}/read", response_model=SuccessResponse)
async def mark_notification_read(
    notification_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    await NotificationService(db).mark_read(current_user.id, notification_id)
    return SuccessResponse()


# ============== Assistant ==============


@router.post("/ai/chat", response_model=ChatResponse)
async def chat(
    payload: ChatRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    gemini: GeminiService = Depends(get_gemini_service),
):
    reply = await AssistantService(db, gemini).chat(current_user.id, payload.message)
    return ChatResponse(response=reply)
