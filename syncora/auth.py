import logging

from fastapi import Depends, Request
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession

from syncora.config import settings
from syncora.database import get_db
from syncora.exceptions import NotAuthenticatedError
from syncora.models.user import User
from syncora.services.pending_auth import PendingAuthRegistry
from syncora.services.user_store import UserStore
from syncora.utils.session import SessionManager, get_session_manager

# Initialize logging
logger = logging.getLogger(__name__)

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


# Function to hash a password
def hash_password(password: str) -> str:
    return pwd_context.hash(password)


# Function to verify a password
def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    """
    Salted, constant-time password check.

    When there is no stored hash a dummy verification still runs, so an
    unknown email costs the same time as a wrong password.
    """
    if not hashed_password:
        pwd_context.dummy_verify()
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        logger.warning("Stored password hash could not be parsed")
        return False


def get_user_store(db: AsyncSession = Depends(get_db)) -> UserStore:
    return UserStore(db)


def get_pending_auth_registry(request: Request) -> PendingAuthRegistry:
    """The registry is created once at startup and owned by the app."""
    return request.app.state.pending_auth


async def get_current_user(
    request: Request,
    store: UserStore = Depends(get_user_store),
    sessions: SessionManager = Depends(get_session_manager),
) -> User:
    """
    Resolve the authenticated user for this request.

    The session only carries a user id; the full record is loaded from the
    credential store on every request.
    """
    session_id = request.cookies.get(settings.session_cookie_name)
    if not session_id:
        raise NotAuthenticatedError()

    session = await sessions.get_session(session_id)
    if not session or "user_id" not in session:
        raise NotAuthenticatedError()

    user = await store.get_by_id(session["user_id"])
    if user is None:
        logger.warning("Session refers to a user that no longer exists")
        await sessions.delete_session(session_id)
        raise NotAuthenticatedError()

    request.state.user = user
    return user
