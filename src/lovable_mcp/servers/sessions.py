import asyncio
import time
from collections.abc import Callable
from enum import StrEnum
from uuid import uuid4

from fastmcp.utilities.logging import get_logger
from mcp.types import JSONRPCMessage

logger = get_logger(__name__)


def new_session_id() -> str:
    """128 bits from the operating system's random source, hex encoded."""
    return uuid4().hex


class SessionState(StrEnum):
    OPEN = "open"
    CLOSING = "closing"
    CLOSED = "closed"


class Session:
    """One client's streaming connection and the channel its responses are written to."""

    session_id: str
    state: SessionState
    created_at: float
    last_activity: float

    _outbound: asyncio.Queue[JSONRPCMessage | None]

    def __init__(self, session_id: str):
        self.session_id = session_id
        self.state = SessionState.OPEN
        self.created_at = time.monotonic()
        self.last_activity = self.created_at
        self._outbound = asyncio.Queue()

    @property
    def is_open(self) -> bool:
        return self.state == SessionState.OPEN

    def send(self, message: JSONRPCMessage) -> bool:
        """Queue a message for the stream. Returns False, and drops the message, if the session is no longer open."""

        if not self.is_open:
            logger.debug(f"Dropping message for session {self.session_id} in state {self.state}")
            return False

        self._outbound.put_nowait(message)
        return True

    async def next_message(self, timeout: float | None = None) -> JSONRPCMessage | None:
        """Wait for the next outbound message. Returns None once the session is closed.

        Raises:
            TimeoutError: If no message arrived within `timeout` seconds.
        """

        if self.state == SessionState.CLOSED:
            return None

        async with asyncio.timeout(timeout):
            return await self._outbound.get()

    def touch(self) -> None:
        self.last_activity = time.monotonic()

    def idle_for(self) -> float:
        return time.monotonic() - self.last_activity

    def close(self) -> None:
        if self.state == SessionState.CLOSED:
            return

        self.state = SessionState.CLOSING

        while not self._outbound.empty():
            _ = self._outbound.get_nowait()

        self.state = SessionState.CLOSED

        # Wake up a stream that is waiting on the channel
        self._outbound.put_nowait(None)


class SessionTable:
    """Every open session, keyed by identifier. Entries are added when a stream opens and removed when it closes."""

    _sessions: dict[str, Session]
    _lock: asyncio.Lock
    _id_factory: Callable[[], str]

    def __init__(self, id_factory: Callable[[], str] = new_session_id):
        self._sessions = {}
        self._lock = asyncio.Lock()
        self._id_factory = id_factory

    async def create(self) -> Session:
        async with self._lock:
            session_id = self._id_factory()

            while session_id in self._sessions:
                logger.warning("Session identifier collision, generating a new identifier")
                session_id = self._id_factory()

            session = Session(session_id=session_id)
            self._sessions[session_id] = session

        logger.info(f"Opened session {session_id} ({len(self._sessions)} open)")

        return session

    def lookup(self, session_id: str) -> Session | None:
        return self._sessions.get(session_id)

    async def remove(self, session_id: str) -> Session | None:
        """Remove a session and close its channel. Removing an unknown or already removed session does nothing."""

        async with self._lock:
            session = self._sessions.pop(session_id, None)

        if session is None:
            return None

        session.close()

        logger.info(f"Closed session {session_id} ({len(self._sessions)} open)")

        return session

    async def close_all(self) -> None:
        async with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()

        for session in sessions:
            session.close()

        if sessions:
            logger.info(f"Closed {len(sessions)} sessions on shutdown")

    def count(self) -> int:
        return len(self._sessions)

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions
