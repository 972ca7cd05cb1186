"""Process-wide session handling for the admin console."""

from __future__ import annotations

import enum
import logging
import threading
from typing import Optional

import anyio

from .models import Identity, Role, Session
from .storage import SessionPersistence

logger = logging.getLogger("hotelchain.sessions")


class SessionState(str, enum.Enum):
    UNKNOWN = "unknown"
    AUTHENTICATED = "authenticated"
    ANONYMOUS = "anonymous"


class SessionStore:
    """Hold the current session and mirror it into encrypted local storage.

    One instance is created by the application's composition root and passed
    to whatever needs the current identity. The persisted copy is restored
    exactly once by :meth:`restore`; until then :attr:`state` reports
    ``SessionState.UNKNOWN`` so guarded views neither admit nor bounce the
    operator.
    """

    def __init__(self, persistence: SessionPersistence) -> None:
        self._persistence = persistence
        self._session: Optional[Session] = None
        self._restored = False
        self._changed_before_restore = False
        self._lock = threading.Lock()

    @property
    def state(self) -> SessionState:
        with self._lock:
            if not self._restored:
                return SessionState.UNKNOWN
            if self._session is None:
                return SessionState.ANONYMOUS
            return SessionState.AUTHENTICATED

    def login(self, identity: Identity, token: str) -> Session:
        session = Session(identity=identity, token=token)
        with self._lock:
            self._persistence.save(session)
            self._session = session
            self._changed_before_restore = not self._restored
        logger.info("Operator %s signed in as %s", identity.email, identity.role.value)
        return session

    def logout(self) -> None:
        with self._lock:
            self._persistence.clear()
            previous = self._session
            self._session = None
            self._changed_before_restore = not self._restored
        if previous is not None:
            logger.info("Operator %s signed out", previous.identity.email)

    def current_session(self) -> Optional[Session]:
        with self._lock:
            return self._session

    def current_identity(self) -> Optional[Identity]:
        session = self.current_session()
        return session.identity if session is not None else None

    def current_role(self) -> Optional[Role]:
        identity = self.current_identity()
        return identity.role if identity is not None else None

    async def restore(self) -> Optional[Session]:
        """Load the persisted session once; later calls return the current one."""

        if self._restored:
            return self.current_session()

        loaded = await anyio.to_thread.run_sync(self._persistence.load)

        with self._lock:
            if self._restored:
                return self._session
            if not self._changed_before_restore:
                self._session = loaded
            self._restored = True
            session = self._session

        if session is None:
            logger.info("No persisted session restored")
        else:
            logger.info("Restored session for %s", session.identity.email)
        return session


__all__ = ["SessionState", "SessionStore"]
