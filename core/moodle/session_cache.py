"""Bounded in-memory cache of LMS sessions, keyed by username."""

import time
from dataclasses import dataclass
from typing import Callable


@dataclass
class MoodleSession:
    """An authenticated LMS browser session."""

    cookie: str
    username: str
    expires_at: float  # unix timestamp
    password_hash: str = ""


class SessionCache:
    """TTL cache with a hard entry cap.

    Expired entries are never returned. When the cache grows past
    max_entries, the soonest-expiring entries are evicted first.

    Not persisted: a process restart forces every user to log in again.
    """

    def __init__(
        self,
        max_entries: int,
        clock: Callable[[], float] = time.time,
    ):
        self.max_entries = max_entries
        self._clock = clock
        self._sessions: dict[str, MoodleSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, key: str) -> bool:
        return key in self._sessions

    def get(self, key: str) -> MoodleSession | None:
        """Return the live session for key, or None if missing or expired."""
        session = self._sessions.get(key)
        if session is None or session.expires_at <= self._clock():
            return None
        return session

    def put(
        self, key: str, cookie: str, ttl: float, password_hash: str = ""
    ) -> MoodleSession:
        """Store a session for key, replacing any previous one."""
        session = MoodleSession(
            cookie=cookie,
            username=key,
            expires_at=self._clock() + ttl,
            password_hash=password_hash,
        )
        self._sessions[key] = session
        self.sweep()
        return session

    def invalidate(self, key: str) -> None:
        """Forget the session for key, if any."""
        self._sessions.pop(key, None)

    def sweep(self) -> None:
        """Drop expired sessions, then evict down to max_entries."""
        now = self._clock()
        for key in [k for k, s in self._sessions.items() if s.expires_at <= now]:
            del self._sessions[key]

        overflow = len(self._sessions) - self.max_entries
        if overflow > 0:
            oldest = sorted(self._sessions.items(), key=lambda kv: kv[1].expires_at)
            for key, _ in oldest[:overflow]:
                del self._sessions[key]

    def clear(self) -> None:
        self._sessions.clear()
