"""
Authentication Service

Drives the staged login flow:

    password check -> (2FA users) pending nonce -> one-time code -> session

Sessions are only created after the last required factor succeeds. All
credential failures collapse into the same InvalidCredentialsError so the
response never reveals whether an email is registered.
"""

import logging
from dataclasses import dataclass

from syncora.auth import hash_password, verify_password
from syncora.config import settings
from syncora.exceptions import (
    DuplicateResourceError,
    InvalidCredentialsError,
    InvalidOrExpiredNonceError,
    InvalidTwoFactorTokenError,
    TwoFactorNotConfiguredError,
)
from syncora.models.user import User
from syncora.services.oauth_service import OAuthProfile
from syncora.services.pending_auth import PendingAuthRegistry
from syncora.services.two_factor_service import verify_totp
from syncora.services.user_store import UserStore
from syncora.utils.session import SessionManager

logger = logging.getLogger(__name__)


@dataclass
class LoginResult:
    """Outcome of a login step: either an established session or a 2FA challenge."""

    user: User | None = None
    session_id: str | None = None
    nonce: str | None = None
    created: bool = False

    @property
    def requires_two_factor(self) -> bool:
        return self.nonce is not None


class AuthService:
    """Authentication orchestrator."""

    def __init__(
        self,
        store: UserStore,
        registry: PendingAuthRegistry,
        sessions: SessionManager,
        valid_window: int | None = None,
    ):
        self.store = store
        self.registry = registry
        self.sessions = sessions
        self.valid_window = settings.totp_valid_window if valid_window is None else valid_window

    async def login(self, email: str, password: str) -> LoginResult:
        """
        Verify primary credentials.

        Users without 2FA get a session straight away. For 2FA users no
        session is created; a single-use nonce is returned instead.
        """
        user = await self.store.get_by_email(email)

        # Always run the hash comparison, even for unknown or password-less accounts
        password_ok = verify_password(password, user.hashed_password if user else None)
        if user is None or not password_ok:
            logger.warning("Login failed: invalid credentials")
            raise InvalidCredentialsError()

        if user.two_factor_enabled:
            nonce = self.registry.create(user.id, user.email)
            logger.info(f"Password accepted for user {user.id}; second factor required")
            return LoginResult(nonce=nonce)

        session_id = await self.establish_session(user)
        return LoginResult(user=user, session_id=session_id)

    async def complete_two_factor(self, nonce: str, code: str) -> LoginResult:
        """
        Finish a login that was challenged for a second factor.

        The nonce is consumed before anything else is checked, so it is
        dead after this call whatever the outcome.
        """
        pending = self.registry.consume(nonce)
        if pending is None:
            logger.warning("2FA completion rejected: unknown or expired nonce")
            raise InvalidOrExpiredNonceError()

        # Identity comes from the registry entry, never from the request
        user = await self.store.get_by_id(pending.user_id)
        if user is None or not user.two_factor_secret:
            logger.warning(f"2FA completion rejected: user {pending.user_id} has no 2FA configured")
            raise TwoFactorNotConfiguredError()

        if not verify_totp(user.two_factor_secret, code, valid_window=self.valid_window):
            logger.warning(f"2FA completion rejected: invalid code for user {user.id}")
            raise InvalidTwoFactorTokenError()

        session_id = await self.establish_session(user)
        return LoginResult(user=user, session_id=session_id)

    async def signup(self, email: str, password: str) -> LoginResult:
        """Create a password account and sign it in."""
        if await self.store.get_by_email(email) is not None:
            raise DuplicateResourceError()

        user = await self.store.create(
            email=email,
            hashed_password=hash_password(password),
            name=email.split("@")[0],
        )
        session_id = await self.establish_session(user)
        return LoginResult(user=user, session_id=session_id, created=True)

    async def resolve_oauth_user(self, profile: OAuthProfile) -> tuple[User, bool]:
        """
        Map a provider identity to a local user.

        Lookup order: external id, then email (link), then create. Linking
        only sets the external id and avatar; the password hash and 2FA
        fields of the existing account are never touched.

        Returns:
            (user, created)
        """
        user = await self.store.get_by_google_id(profile.external_id)
        if user is not None:
            return user, False

        user = await self.store.get_by_email(profile.email)
        if user is not None:
            logger.warning(f"Linking Google identity to existing account {user.id} by email")
            linked = await self.store.update(
                user.id,
                google_id=profile.external_id,
                profile_picture=profile.avatar_url,
            )
            return linked, False

        user = await self.store.create(
            email=profile.email,
            google_id=profile.external_id,
            name=profile.display_name,
            profile_picture=profile.avatar_url,
        )
        return user, True

    async def login_with_oauth(self, profile: OAuthProfile) -> LoginResult:
        user, created = await self.resolve_oauth_user(profile)
        session_id = await self.establish_session(user)
        return LoginResult(user=user, session_id=session_id, created=created)

    async def establish_session(self, user: User) -> str:
        session_id = await self.sessions.create_session(user.id)
        logger.info(f"Session established for user {user.id}")
        return session_id

    async def logout(self, session_id: str | None) -> None:
        if session_id:
            await self.sessions.delete_session(session_id)
