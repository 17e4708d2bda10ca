# app/common/session_registry.py

import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

from app.common.locks import KeyedLocks


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Session:
    user_id: str
    token: str
    created_at: datetime = field(default_factory=_utcnow)


class SessionRegistry:
    """
    Live login sessions, at most one per user.

    Created by the application lifespan and kept on ``app.state``; nothing is
    persisted, a restart logs everybody out. With a ``ttl`` a session older
    than the ttl counts as gone. It is dropped the next time it is touched, and
    a login sweeps the whole registry at most once per ``sweep_interval``
    (the ttl unless given).
    """

    def __init__(
        self,
        ttl: Optional[timedelta] = None,
        stripes: int = 64,
        sweep_interval: Optional[timedelta] = None,
    ):
        self._ttl = ttl
        self._sweep_interval = sweep_interval if sweep_interval is not None else ttl
        self._last_sweep = _utcnow()
        self._sweep_lock = threading.Lock()
        self._by_user: Dict[str, Session] = {}
        self._by_token: Dict[str, Session] = {}
        self._user_locks = KeyedLocks(stripes)
        # guards the token index, held only for single dict operations
        self._index_lock = threading.Lock()

    def _expired(self, session: Session, now: datetime) -> bool:
        return self._ttl is not None and now - session.created_at >= self._ttl

    def _drop(self, session: Session) -> None:
        # caller holds the user lock
        if self._by_user.get(session.user_id) == session:
            del self._by_user[session.user_id]
        with self._index_lock:
            self._by_token.pop(session.token, None)

    def purge_expired(self) -> int:
        """Drop every expired session; returns how many went."""
        if self._ttl is None:
            return 0
        now = _utcnow()
        purged = 0
        for session in self.sessions():
            if self._expired(session, now) and self.remove(session):
                purged += 1
        return purged

    def _maybe_sweep(self) -> None:
        if self._ttl is None:
            return
        # one sweeper at a time, others go on without waiting
        if not self._sweep_lock.acquire(blocking=False):
            return
        try:
            now = _utcnow()
            if now - self._last_sweep < self._sweep_interval:
                return
            self._last_sweep = now
        finally:
            self._sweep_lock.release()
        self.purge_expired()

    def register_if_absent(self, session: Session) -> bool:
        """Store ``session`` unless its user already has a live one."""
        self._maybe_sweep()
        with self._user_locks.for_key(session.user_id):
            current = self._by_user.get(session.user_id)
            if current is not None:
                if not self._expired(current, _utcnow()):
                    return False
                self._drop(current)
            self._by_user[session.user_id] = session
            with self._index_lock:
                self._by_token[session.token] = session
            return True

    def get_by_user(self, user_id: str) -> Optional[Session]:
        with self._user_locks.for_key(user_id):
            current = self._by_user.get(user_id)
            if current is not None and self._expired(current, _utcnow()):
                self._drop(current)
                return None
            return current

    def get_by_token(self, token: str) -> Optional[Session]:
        with self._index_lock:
            session = self._by_token.get(token)
        if session is None:
            return None
        if self._expired(session, _utcnow()):
            self.remove(session)
            return None
        return session

    def remove(self, session: Session) -> bool:
        """Drop ``session`` if it is still the user's live session."""
        with self._user_locks.for_key(session.user_id):
            if self._by_user.get(session.user_id) != session:
                return False
            self._drop(session)
            return True

    def remove_user(self, user_id: str) -> Optional[Session]:
        with self._user_locks.for_key(user_id):
            current = self._by_user.get(user_id)
            if current is not None:
                self._drop(current)
            return current

    def sessions(self) -> List[Session]:
        with self._index_lock:
            return list(self._by_token.values())

    def clear(self) -> None:
        with self._index_lock:
            self._by_token.clear()
        self._by_user.clear()

    def __len__(self) -> int:
        with self._index_lock:
            return len(self._by_token)
