"""
Server-Side Session Management with Redis (with in-memory fallback)

The browser only holds an opaque session id in an HTTP-only cookie; the
authenticated user id lives in the session store. Redis is used when
REDIS_URL is configured, otherwise sessions are kept in process memory.
"""

import json
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any

import redis.asyncio as redis
from fastapi import Request, Response

from syncora.config import settings
from syncora.exceptions import SessionEstablishmentError

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def generate_session_id() -> str:
    return secrets.token_urlsafe(32)


class InMemorySessionManager:
    """
    In-memory session manager fallback when Redis is not available.
    Note: Sessions are lost on server restart and won't scale across instances.
    """

    def __init__(self, expire_seconds: int | None = None):
        self.expire_seconds = expire_seconds or settings.session_expire_seconds
        self._sessions: dict[str, dict[str, Any]] = {}
        self._user_sessions: dict[str, set[str]] = {}
        self._expirations: dict[str, datetime] = {}

    def _cleanup_expired(self):
        """Remove expired sessions"""
        now = _now()
        expired = [sid for sid, exp in self._expirations.items() if exp < now]
        for sid in expired:
            self._delete_session_internal(sid)

    def _delete_session_internal(self, session_id: str):
        if session_id in self._sessions:
            session_data = self._sessions.pop(session_id, {})
            self._expirations.pop(session_id, None)
            user_id = session_data.get("user_id")
            if user_id and user_id in self._user_sessions:
                self._user_sessions[user_id].discard(session_id)
                if not self._user_sessions[user_id]:
                    del self._user_sessions[user_id]

    async def connect(self):
        logger.info("Using in-memory session storage")

    async def disconnect(self):
        """Clear all sessions"""
        self._sessions.clear()
        self._user_sessions.clear()
        self._expirations.clear()

    async def create_session(self, user_id: str) -> str:
        self._cleanup_expired()
        session_id = generate_session_id()
        now = _now()
        self._sessions[session_id] = {
            "user_id": user_id,
            "created_at": now.isoformat(),
            "last_activity": now.isoformat(),
        }
        self._expirations[session_id] = now + timedelta(seconds=self.expire_seconds)
        self._user_sessions.setdefault(user_id, set()).add(session_id)

        logger.info(f"Created in-memory session for user {user_id}")
        return session_id

    async def get_session(self, session_id: str) -> dict[str, Any] | None:
        self._cleanup_expired()
        if session_id not in self._sessions:
            return None
        data = self._sessions[session_id]
        data["last_activity"] = _now().isoformat()
        return data.copy()

    async def delete_session(self, session_id: str) -> bool:
        if session_id in self._sessions:
            self._delete_session_internal(session_id)
            logger.info("Deleted in-memory session")
            return True
        return False

    async def delete_all_user_sessions(self, user_id: str) -> int:
        session_ids = list(self._user_sessions.get(user_id, ()))
        for sid in session_ids:
            self._delete_session_internal(sid)
        logger.info(f"Deleted {len(session_ids)} in-memory sessions for user {user_id}")
        return len(session_ids)


class RedisSessionManager:
    """
    Manages user sessions using Redis as the backend storage.

    Sessions are stored under ``session:<id>`` with a TTL; the set
    ``user_sessions:<user_id>`` tracks a user's active session ids.
    """

    def __init__(self, redis_url: str, expire_seconds: int | None = None):
        self.redis_url = redis_url
        self.expire_seconds = expire_seconds or settings.session_expire_seconds
        self._redis: redis.Redis | None = None
        self._pool: redis.ConnectionPool | None = None

    async def connect(self):
        """Establish connection to Redis."""
        if self._redis is not None:
            return

        try:
            self._pool = redis.ConnectionPool.from_url(self.redis_url, decode_responses=True)
            self._redis = redis.Redis(connection_pool=self._pool)
            await self._redis.ping()
            logger.info("Successfully connected to Redis")
        except Exception as e:
            logger.error(f"Failed to connect to Redis: {e}")
            self._redis = None
            raise

    async def disconnect(self):
        """Close Redis connection"""
        if self._redis:
            await self._redis.aclose()
            self._redis = None
        if self._pool:
            await self._pool.aclose()
            self._pool = None
        logger.info("Disconnected from Redis")

    async def create_session(self, user_id: str) -> str:
        """
        Create a new session for a user.

        Raises:
            SessionEstablishmentError: if Redis rejects the write
        """
        session_id = generate_session_id()
        now = _now().isoformat()
        session_data = {"user_id": user_id, "created_at": now, "last_activity": now}

        try:
            if not self._redis:
                await self.connect()
            await self._redis.setex(f"session:{session_id}", self.expire_seconds, json.dumps(session_data))
            user_sessions_key = f"user_sessions:{user_id}"
            await self._redis.sadd(user_sessions_key, session_id)
            await self._redis.expire(user_sessions_key, self.expire_seconds)
        except redis.RedisError as e:
            logger.error(f"Failed to store session for user {user_id}: {e}")
            raise SessionEstablishmentError() from e

        logger.info(f"Created session for user {user_id}")
        return session_id

    async def get_session(self, session_id: str) -> dict[str, Any] | None:
        """Retrieve session data, or None if not found/expired."""
        if not self._redis:
            await self.connect()

        session_key = f"session:{session_id}"
        raw = await self._redis.get(session_key)
        if not raw:
            logger.debug("Session not found or expired")
            return None

        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.error("Failed to decode session data")
            return None

        data["last_activity"] = _now().isoformat()
        await self._redis.set(session_key, json.dumps(data), keepttl=True)
        return data

    async def delete_session(self, session_id: str) -> bool:
        """Delete a session (logout)."""
        if not self._redis:
            await self.connect()

        session_key = f"session:{session_id}"
        raw = await self._redis.get(session_key)
        deleted = await self._redis.delete(session_key)

        if raw:
            try:
                user_id = json.loads(raw).get("user_id")
            except json.JSONDecodeError:
                user_id = None
            if user_id:
                await self._redis.srem(f"user_sessions:{user_id}", session_id)

        logger.info("Deleted session")
        return bool(deleted)

    async def delete_all_user_sessions(self, user_id: str) -> int:
        """Delete all sessions for a specific user."""
        if not self._redis:
            await self.connect()

        user_sessions_key = f"user_sessions:{user_id}"
        session_ids = await self._redis.smembers(user_sessions_key)

        count = 0
        for session_id in session_ids:
            count += await self._redis.delete(f"session:{session_id}")

        await self._redis.delete(user_sessions_key)

        logger.info(f"Deleted {count} sessions for user {user_id}")
        return count


SessionManager = RedisSessionManager | InMemorySessionManager


async def build_session_manager() -> SessionManager:
    """
    Create the process-wide session manager.

    Uses Redis when REDIS_URL is set and reachable, falls back to
    in-memory storage otherwise.
    """
    if settings.redis_url:
        try:
            manager = RedisSessionManager(settings.redis_url)
            await manager.connect()
            logger.info("Session manager using Redis")
            return manager
        except Exception as e:
            logger.warning(f"Redis not available, using in-memory sessions: {e}")

    manager = InMemorySessionManager()
    await manager.connect()
    return manager


def get_session_manager(request: Request) -> SessionManager:
    """FastAPI dependency returning the manager created at startup."""
    return request.app.state.session_manager


def set_session_cookie(response: Response, session_id: str) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=session_id,
        max_age=settings.session_expire_seconds,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.session_cookie_name,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )
