"""
auth/registry.py -- Live refresh token registry.

A refresh token is usable only while it is present here. Signature and expiry
are checked separately by the TokenIssuer; the registry is the single
authority for revocation.

Policy: a user may hold several live refresh tokens at once (one per login).
revoke_by_user_id() removes ALL of them, so logging out from one client ends
every refresh session of that user.

The registry is owned by the application instance (app.state.registry) and
injected into SessionService. InMemoryRefreshTokenRegistry is volatile: every
refresh session is lost on restart and users must log in again.

Concurrency: sync route handlers run on a thread pool, so every method takes
a single threading.Lock. Each call is atomic, which makes operations on the
same token linearizable -- a refresh racing a logout sees the entry either
fully present or fully gone.

Layer rule: no imports from api/ or employees/.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Protocol


class RefreshTokenRegistry(Protocol):
    """Port for refresh token revocation state."""

    def register(self, token: str, user_id: int, expires_at: datetime) -> None:
        """Record token as live for user_id until expires_at."""

    def is_live(self, token: str) -> bool:
        """Return True while token has not been revoked or purged."""

    def revoke(self, token: str) -> bool:
        """Remove a single token. Returns True if it was present."""

    def revoke_by_user_id(self, user_id: int) -> int:
        """Remove every token of user_id. Returns how many were removed."""

    def purge_expired(self, now: datetime | None = None) -> int:
        """Drop entries whose expiry has passed. Returns how many were dropped."""

    def __len__(self) -> int: ...


@dataclass(frozen=True)
class _Entry:
    user_id: int
    expires_at: datetime


class InMemoryRefreshTokenRegistry:
    """Dict-backed registry with a secondary user_id index.

    Usage:
        registry = InMemoryRefreshTokenRegistry()
        registry.register(token, user_id=7, expires_at=issued.expires_at)
        registry.is_live(token)          # True
        registry.revoke_by_user_id(7)    # 1
    """

    def __init__(self) -> None:
        self._entries: dict[str, _Entry] = {}
        self._by_user: dict[int, set[str]] = {}
        self._lock = threading.Lock()

    def register(self, token: str, user_id: int, expires_at: datetime) -> None:
        with self._lock:
            previous = self._entries.get(token)
            if previous is not None:
                self._unindex(token, previous.user_id)
            self._entries[token] = _Entry(user_id=user_id, expires_at=expires_at)
            self._by_user.setdefault(user_id, set()).add(token)

    def is_live(self, token: str) -> bool:
        with self._lock:
            return token in self._entries

    def revoke(self, token: str) -> bool:
        with self._lock:
            entry = self._entries.pop(token, None)
            if entry is None:
                return False
            self._unindex(token, entry.user_id)
            return True

    def revoke_by_user_id(self, user_id: int) -> int:
        with self._lock:
            tokens = self._by_user.pop(user_id, set())
            for token in tokens:
                del self._entries[token]
            return len(tokens)

    def purge_expired(self, now: datetime | None = None) -> int:
        now = now or datetime.now(timezone.utc)
        with self._lock:
            stale = [token for token, entry in self._entries.items() if entry.expires_at <= now]
            for token in stale:
                entry = self._entries.pop(token)
                self._unindex(token, entry.user_id)
            return len(stale)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _unindex(self, token: str, user_id: int) -> None:
        # Caller holds the lock.
        tokens = self._by_user.get(user_id)
        if tokens is None:
            return
        tokens.discard(token)
        if not tokens:
            del self._by_user[user_id]
