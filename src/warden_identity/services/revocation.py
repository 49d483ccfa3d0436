"""Pluggable token revocation.

Tokens are stateless: without a store, a revoked token stays valid until it
expires. A store makes revocation effective immediately. Swapping stores
never changes TokenAuthority call sites.
"""

from __future__ import annotations

import heapq
import logging
import threading
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime

    from warden_identity.schemas import TokenPayload

logger = logging.getLogger(__name__)


class RevocationStore(ABC):
    """Interface consulted by TokenAuthority on issue and on verify."""

    @abstractmethod
    def generation(self, principal_id: str) -> int:
        """Current revocation generation of a user, embedded in new tokens."""

    @abstractmethod
    def revoke_session(self, principal_id: str, session_id: str, expires_at: datetime) -> None:
        """Revoke both tokens of one pair.

        ``expires_at`` bounds the lifetime of every token of the session;
        the entry may be forgotten after it.
        """

    @abstractmethod
    def revoke_all(self, principal_id: str) -> None:
        """Revoke every token issued to the user so far."""

    @abstractmethod
    def is_revoked(self, payload: TokenPayload, now: datetime) -> bool:
        """Check a verified payload against the store."""


class NullRevocationStore(RevocationStore):
    """Advisory revocation: logged, effective at natural expiry."""

    def generation(self, principal_id: str) -> int:
        return 0

    def revoke_session(self, principal_id: str, session_id: str, expires_at: datetime) -> None:
        logger.info(
            "Session revoked for user %s - tokens will expire naturally",
            principal_id,
        )

    def revoke_all(self, principal_id: str) -> None:
        logger.info(
            "All sessions revoked for user %s - tokens will expire naturally",
            principal_id,
        )

    def is_revoked(self, payload: TokenPayload, now: datetime) -> bool:
        return False


class InMemoryRevocationStore(RevocationStore):
    """Process-local store: per-user generation counter plus session denylist.

    ``revoke_all`` bumps the user's generation, so every token carrying an
    older generation is rejected. Denylisted sessions are dropped once every
    token they could block has expired. Suitable for a single process and
    for tests; a multi-process deployment needs a shared backend.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._generations: dict[str, int] = {}
        self._revoked_sessions: dict[tuple[str, str], datetime] = {}
        # (expires_at, key) min-heap; may hold stale entries for re-revoked sessions
        self._expiry_queue: list[tuple[datetime, tuple[str, str]]] = []

    @property
    def revoked_session_count(self) -> int:
        """Number of denylisted sessions still held."""
        with self._lock:
            return len(self._revoked_sessions)

    def generation(self, principal_id: str) -> int:
        with self._lock:
            return self._generations.get(principal_id, 0)

    def revoke_session(self, principal_id: str, session_id: str, expires_at: datetime) -> None:
        key = (principal_id, session_id)
        with self._lock:
            current = self._revoked_sessions.get(key)
            if current is None or expires_at > current:
                self._revoked_sessions[key] = expires_at
                heapq.heappush(self._expiry_queue, (expires_at, key))
        logger.info("Session revoked for user %s", principal_id)

    def revoke_all(self, principal_id: str) -> None:
        with self._lock:
            self._generations[principal_id] = self._generations.get(principal_id, 0) + 1
        logger.info("All sessions revoked for user %s", principal_id)

    def is_revoked(self, payload: TokenPayload, now: datetime) -> bool:
        with self._lock:
            self._prune(now)
            if payload.generation < self._generations.get(payload.principal_id, 0):
                return True
            return (payload.principal_id, payload.session_id) in self._revoked_sessions

    def prune(self, now: datetime) -> int:
        """Drop denylist entries expired at ``now``; returns how many were dropped."""
        with self._lock:
            return self._prune(now)

    def _prune(self, now: datetime) -> int:
        dropped = 0
        while self._expiry_queue and self._expiry_queue[0][0] <= now:
            expires_at, key = heapq.heappop(self._expiry_queue)
            if self._revoked_sessions.get(key) == expires_at:
                del self._revoked_sessions[key]
                dropped += 1
        if dropped:
            logger.debug("Pruned %d expired revoked sessions", dropped)
        return dropped
