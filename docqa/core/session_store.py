"""
In-memory chat session store. Keyed by session_id; history is not sent from frontend.

Sessions are bounded three ways: turns per session, number of live sessions
(least recently used evicted first) and idle time (TTL).
"""

import logging
import threading
import time
import uuid
from collections import OrderedDict
from typing import Callable

from docqa.core.config import SESSION_MAX_SESSIONS, SESSION_MAX_TURNS, SESSION_TTL_SECONDS
from docqa.core.models import ConversationTurn

logger = logging.getLogger(__name__)


class Session:
    """Conversation history for one client. Oldest turns drop once max_turns is reached."""

    def __init__(self, session_id: str, max_turns: int = SESSION_MAX_TURNS) -> None:
        self.session_id = session_id
        self.max_turns = max_turns
        self._turns: list[ConversationTurn] = []
        self._lock = threading.Lock()

    def turns(self) -> list[ConversationTurn]:
        """Return a copy so callers cannot mutate the stored history."""
        with self._lock:
            return list(self._turns)

    def append(self, question: str, answer: str) -> None:
        with self._lock:
            self._turns.append(ConversationTurn(question=question, answer=answer or ""))
            if len(self._turns) > self.max_turns:
                del self._turns[: len(self._turns) - self.max_turns]
            count = len(self._turns)
        logger.info("[session_store:append] session_id=%s turns=%d", self.session_id[:16], count)

    def clear(self) -> None:
        with self._lock:
            self._turns.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._turns)


class SessionStore:
    def __init__(
        self,
        max_sessions: int = SESSION_MAX_SESSIONS,
        ttl_seconds: float = SESSION_TTL_SECONDS,
        max_turns: int = SESSION_MAX_TURNS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_sessions = max_sessions
        self.ttl_seconds = ttl_seconds
        self.max_turns = max_turns
        self._clock = clock
        # session_id -> (session, last_access)
        self._sessions: OrderedDict[str, tuple[Session, float]] = OrderedDict()
        self._lock = threading.Lock()

    def _evict_expired(self, now: float) -> None:
        # Entries are ordered by last access, so expired ones sit at the front
        while self._sessions:
            session_id, (_, last_access) = next(iter(self._sessions.items()))
            if now - last_access <= self.ttl_seconds:
                break
            del self._sessions[session_id]
            logger.info("[session_store] expired session_id=%s", session_id[:16])

    def get_or_create(self, session_id: str | None = None) -> Session:
        """Return the live session for session_id, creating it (or a fresh id) when missing."""
        if not session_id or not isinstance(session_id, str) or not session_id.strip():
            session_id = uuid.uuid4().hex
        session_id = session_id.strip()
        now = self._clock()
        with self._lock:
            self._evict_expired(now)
            entry = self._sessions.pop(session_id, None)
            session = entry[0] if entry else Session(session_id, max_turns=self.max_turns)
            self._sessions[session_id] = (session, now)
            while len(self._sessions) > self.max_sessions:
                evicted_id, _ = self._sessions.popitem(last=False)
                logger.info("[session_store] evicted session_id=%s (capacity=%d)", evicted_id[:16], self.max_sessions)
        if entry is None:
            logger.info("[session_store:get_or_create] created session_id=%s", session_id[:16])
        return session

    def get(self, session_id: str) -> Session | None:
        now = self._clock()
        with self._lock:
            self._evict_expired(now)
            entry = self._sessions.get(session_id)
        return entry[0] if entry else None

    def delete(self, session_id: str) -> bool:
        with self._lock:
            removed = self._sessions.pop(session_id, None) is not None
        logger.info("[session_store:delete] session_id=%s removed=%s", (session_id or "")[:16], removed)
        return removed

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
