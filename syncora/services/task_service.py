"""
Task Service

CRUD for dashboard tasks. Tasks belonging to another user behave as if
they did not exist.
"""

import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from syncora.exceptions import ResourceNotFoundError
from syncora.models.task import Priority, Task

logger = logging.getLogger(__name__)

# Fields a PATCH may change
EDITABLE_FIELDS = ("title", "description", "priority", "is_completed", "due_date")


class TaskService:
    """Service for managing a user's tasks."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_tasks(self, user_id: str) -> list[Task]:
        result = await self.db.execute(
            select(Task).where(Task.user_id == user_id).order_by(Task.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_task(self, user_id: str, task_id: str) -> Task:
        result = await self.db.execute(select(Task).where(Task.id == task_id))
        task = result.scalars().first()
        if task is None or task.user_id != user_id:
            raise ResourceNotFoundError("Task", task_id)
        return task

    async def create_task(
        self,
        user_id: str,
        title: str,
        description: str | None = None,
        priority: str | None = None,
        due_date: datetime | None = None,
        email_id: str | None = None,
    ) -> Task:
        task = Task(
            user_id=user_id,
            title=title,
            description=description,
            priority=priority or Priority.MEDIUM.value,
            due_date=due_date,
            email_id=email_id,
        )
        self.db.add(task)
        await self.db.commit()
        await self.db.refresh(task)

        logger.info(f"Task {task.id} created for user {user_id}")
        return task

    async def update_task(self, user_id: str, task_id: str, changes: dict) -> Task:
        task = await self.get_task(user_id, task_id)
        for field in EDITABLE_FIELDS:
            if field in changes:
                setattr(task, field, changes[field])
        await self.db.commit()
        await self.db.refresh(task)
        return task

    async def delete_task(self, user_id: str, task_id: str) -> None:
        task = await self.get_task(user_id, task_id)
        await self.db.delete(task)
        await self.db.commit()
        logger.info(f"Task {task_id} deleted for user {user_id}")
