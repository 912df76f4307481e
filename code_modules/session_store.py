"""
In-memory session store for the conversational assistant.

Sessions are best-effort and non-durable: they live in process memory,
are dropped after an idle timeout by a background sweep, and the oldest
one is evicted when the store is full. Every public operation takes the
store lock, so each call is atomic on its own.
"""
from __future__ import annotations

import copy
import logging
import threading
import time
from collections import OrderedDict
from typing import Callable, Iterable, Optional

from code_modules.assistant_types import Preferences, Session, SessionInfo, Turn

logger = logging.getLogger(__name__)

MAX_REMEMBERED_LOCATIONS = 5


class SessionStore:
    """
    Bounded, TTL-based mapping of session id to conversation state.

    Args:
        max_history (int): Turns kept per session, oldest dropped first.
        session_timeout (float): Idle seconds after which the sweep drops a session.
        max_sessions (int): Capacity; the oldest-inserted session is evicted beyond it.
        sweep_interval (float): Seconds between two background sweeps.
        clock (Callable[[], float]): Time source, replaceable in tests.
    """

    def __init__(
        self,
        max_history: int = 20,
        session_timeout: float = 30 * 60,
        max_sessions: int = 1000,
        sweep_interval: float = 5 * 60,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.max_history = max_history
        self.session_timeout = session_timeout
        self.max_sessions = max_sessions
        self.sweep_interval = sweep_interval
        self._clock = clock
        self._sessions: "OrderedDict[str, Session]" = OrderedDict()
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._sweeper: Optional[threading.Thread] = None

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._sessions

    def _create(self, session_id: str) -> Session:
        while len(self._sessions) >= self.max_sessions:
            evicted_id, _ = self._sessions.popitem(last=False)
            logger.info("Session store full, evicted session %s", evicted_id)
        now = self._clock()
        session = Session(session_id=session_id, created_at=now, last_activity=now)
        self._sessions[session_id] = session
        logger.info("Created session %s", session_id)
        return session

    def get_or_create(self, session_id: str) -> Session:
        """
        Return a snapshot of the session, refreshing its last activity, or
        create an empty one.
        """
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                session = self._create(session_id)
            else:
                session.last_activity = self._clock()
            return copy.deepcopy(session)

    def update(
        self,
        session_id: str,
        turns: Optional[Iterable[Turn]] = None,
        intent: Optional[str] = None,
        location: Optional[str] = None,
        preferences: Optional[Preferences] = None,
    ) -> None:
        """
        Merge the supplied fields into the session.

        A session evicted since it was looked up is recreated empty before
        the merge.
        """
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                session = self._create(session_id)
            if turns:
                session.turns.extend(turns)
            if len(session.turns) > self.max_history:
                del session.turns[: len(session.turns) - self.max_history]
            if intent is not None:
                session.last_intent = intent
            if location is not None:
                session.last_location = location
            if preferences is not None:
                _merge_preferences(session.preferences, preferences)
            session.last_activity = self._clock()

    def clear(self, session_id: str) -> None:
        with self._lock:
            if self._sessions.pop(session_id, None) is not None:
                logger.info("Cleared session %s", session_id)

    def describe(self, session_id: str) -> Optional[SessionInfo]:
        """Return a diagnostics snapshot, or None when the session is unknown."""
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None
            return SessionInfo(
                created_at=session.created_at,
                last_activity=session.last_activity,
                message_count=len(session.turns),
                preferences=copy.deepcopy(session.preferences),
            )

    def sweep(self) -> int:
        """Drop every session idle for longer than the timeout."""
        cutoff = self._clock() - self.session_timeout
        with self._lock:
            expired = [sid for sid, s in self._sessions.items() if s.last_activity < cutoff]
            for sid in expired:
                del self._sessions[sid]
        if expired:
            logger.info("Swept %d idle session(s)", len(expired))
        return len(expired)

    def _sweep_loop(self) -> None:
        while not self._stop_event.wait(self.sweep_interval):
            try:
                self.sweep()
            except Exception:
                logger.exception("Session sweep failed")

    def start_sweeper(self) -> None:
        if self._sweeper is not None and self._sweeper.is_alive():
            return
        self._stop_event.clear()
        self._sweeper = threading.Thread(target=self._sweep_loop, name="session-sweeper", daemon=True)
        self._sweeper.start()
        logger.info("Session sweeper started, interval %.0fs", self.sweep_interval)

    def stop_sweeper(self) -> None:
        self._stop_event.set()
        if self._sweeper is not None:
            self._sweeper.join(timeout=5)
            self._sweeper = None


def _merge_preferences(current: Preferences, update: Preferences) -> None:
    if update.property_type and update.property_type != "any":
        current.property_type = update.property_type
    if update.min_price is not None:
        current.min_price = update.min_price
    if update.max_price is not None:
        current.max_price = update.max_price
    if update.bedrooms is not None:
        current.bedrooms = update.bedrooms
    for location in update.locations:
        if location in current.locations:
            current.locations.remove(location)
        current.locations.append(location)
    del current.locations[:-MAX_REMEMBERED_LOCATIONS]
