"""Session storage for signed-in storefront customers."""

from __future__ import annotations

import abc
import secrets
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Dict, Mapping, Optional


class SessionStore(abc.ABC):
    """Holds the authenticated account payload between requests.

    Implementations decide how the payload is kept (in memory, in a signed
    token, in a shared cache). The HTTP layer only ever talks to this
    interface.
    """

    @abc.abstractmethod
    def set(self, payload: Mapping[str, object]) -> str:
        """Store ``payload`` and return the opaque session token."""

    @abc.abstractmethod
    def get(self, token: str) -> Optional[Dict[str, object]]:
        """Return the payload for ``token`` or ``None`` if unknown or expired."""

    @abc.abstractmethod
    def clear(self, token: str) -> None:
        """Forget ``token``."""


@dataclass
class _SessionRecord:
    payload: Dict[str, object]
    expires_at: datetime


class InMemorySessionStore(SessionStore):
    """Process-local sessions with a sliding expiry."""

    def __init__(self, *, ttl: timedelta = timedelta(hours=8)) -> None:
        self._ttl = ttl
        self._sessions: Dict[str, _SessionRecord] = {}
        self._lock = threading.Lock()

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    @property
    def cookie_max_age(self) -> int:
        return int(self._ttl.total_seconds())

    def set(self, payload: Mapping[str, object]) -> str:
        token = secrets.token_urlsafe(32)
        record = _SessionRecord(payload=dict(payload), expires_at=self._now() + self._ttl)
        with self._lock:
            self._sessions[token] = record
        return token

    def get(self, token: str) -> Optional[Dict[str, object]]:
        now = self._now()
        with self._lock:
            record = self._sessions.get(token)
            if record is None:
                return None
            if record.expires_at <= now:
                self._sessions.pop(token, None)
                return None
            record.expires_at = now + self._ttl
            return dict(record.payload)

    def clear(self, token: str) -> None:
        with self._lock:
            self._sessions.pop(token, None)

    def _now(self) -> datetime:
        return datetime.now(timezone.utc)


__all__ = ["InMemorySessionStore", "SessionStore"]
