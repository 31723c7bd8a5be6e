"""
Pending-Authentication Registry

Short-lived, in-process map from an opaque nonce to a user who passed the
password check but still owes a second factor. Entries are single-use and
expire after a fixed window; nothing survives a restart.
"""

import logging
import secrets
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 5 * 60

# Bytes of entropy behind each nonce
NONCE_BYTES = 32


@dataclass(frozen=True)
class PendingAuth:
    """A partially authenticated login awaiting its second factor."""

    user_id: str
    email: str
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return self.expires_at < now


class PendingAuthRegistry:
    """
    Thread-safe nonce registry with lazy expiry.

    ``peek`` and ``consume`` both treat an expired entry as absent and drop
    it on sight, so correctness does not depend on ``sweep`` ever running.
    """

    def __init__(self, ttl_seconds: int = DEFAULT_TTL_SECONDS, clock: Callable[[], float] = time.time):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, PendingAuth] = {}
        self._lock = threading.Lock()

    def create(self, user_id: str, email: str) -> str:
        """Mint a nonce bound to the user and return it."""
        nonce = secrets.token_urlsafe(NONCE_BYTES)
        entry = PendingAuth(user_id=user_id, email=email, expires_at=self._clock() + self.ttl_seconds)
        with self._lock:
            self._entries[nonce] = entry
        logger.debug(f"Pending authentication created for user {user_id}")
        return nonce

    def peek(self, nonce: str) -> PendingAuth | None:
        """Return the live entry for ``nonce`` without consuming it."""
        with self._lock:
            return self._live_entry(nonce)

    def consume(self, nonce: str) -> PendingAuth | None:
        """Atomically fetch and delete the entry; concurrent callers see it at most once."""
        with self._lock:
            entry = self._live_entry(nonce)
            if entry is not None:
                del self._entries[nonce]
            return entry

    def sweep(self) -> int:
        """Delete every expired entry. Returns the number removed."""
        now = self._clock()
        with self._lock:
            expired = [nonce for nonce, entry in self._entries.items() if entry.is_expired(now)]
            for nonce in expired:
                del self._entries[nonce]

        if expired:
            logger.info(f"Swept {len(expired)} expired pending authentication(s)")
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _live_entry(self, nonce: str) -> PendingAuth | None:
        # Caller holds the lock
        entry = self._entries.get(nonce)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            del self._entries[nonce]
            return None
        return entry
