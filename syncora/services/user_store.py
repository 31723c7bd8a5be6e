"""
Credential Store

CRUD access to user records. Every read goes to the database; callers
never rely on a previously loaded copy for security-sensitive fields.
Database failures surface as UpstreamStoreError and are not retried.
"""

import logging

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from syncora.exceptions import UpstreamStoreError
from syncora.models.user import User

logger = logging.getLogger(__name__)

# Columns callers may change through update()
UPDATABLE_FIELDS = frozenset(
    {
        "email",
        "hashed_password",
        "name",
        "google_id",
        "profile_picture",
        "two_factor_secret",
        "two_factor_enabled",
        "widget_layout",
    }
)


def normalize_email(email: str) -> str:
    """Trim the address and lowercase its domain, the form signup validation stores."""
    local, at, domain = email.strip().rpartition("@")
    if not at:
        return email.strip()
    return f"{local}@{domain.lower()}"


class UserStore:
    """Repository for user credential records."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, user_id: str) -> User | None:
        return await self._first(select(User).where(User.id == user_id), "get_by_id")

    async def get_by_email(self, email: str) -> User | None:
        return await self._first(select(User).where(User.email == normalize_email(email)), "get_by_email")

    async def get_by_google_id(self, google_id: str) -> User | None:
        return await self._first(select(User).where(User.google_id == google_id), "get_by_google_id")

    async def create(self, **fields) -> User:
        if fields.get("email"):
            fields["email"] = normalize_email(fields["email"])
        user = User(**fields)
        try:
            self.db.add(user)
            await self.db.commit()
            await self.db.refresh(user)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to create user: {e}")
            raise UpstreamStoreError(operation="create") from e

        logger.info(f"Created user {user.id}")
        return user

    async def update(self, user_id: str, **fields) -> User | None:
        """
        Apply a partial update in a single statement.

        Fields passed together are committed together, so clearing
        ``two_factor_secret`` and ``two_factor_enabled`` can never be
        observed half-done.
        """
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")
        if fields.get("email"):
            fields["email"] = normalize_email(fields["email"])

        try:
            await self.db.execute(
                update(User).where(User.id == user_id).values(**fields).execution_options(synchronize_session=False)
            )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to update user {user_id}: {e}")
            raise UpstreamStoreError(operation="update") from e

        return await self.get_by_id(user_id)

    async def enable_two_factor(self, user_id: str, secret: str) -> bool:
        """
        Switch 2FA on only if the stored secret is still ``secret``.

        Returns False when the secret was replaced or cleared in the meantime.
        """
        try:
            result = await self.db.execute(
                update(User)
                .where(User.id == user_id, User.two_factor_secret == secret)
                .values(two_factor_enabled=True)
                .execution_options(synchronize_session=False)
            )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to enable 2FA for user {user_id}: {e}")
            raise UpstreamStoreError(operation="update") from e

        return result.rowcount == 1

    async def _first(self, statement, operation: str) -> User | None:
        try:
            result = await self.db.execute(statement.execution_options(populate_existing=True))
            return result.scalars().first()
        except SQLAlchemyError as e:
            logger.error(f"Credential store query failed ({operation}): {e}")
            raise UpstreamStoreError(operation=operation) from e
