"""Session and audit trail: bounded, in-memory, process-local."""
from collections import deque
from datetime import datetime
from typing import Any, Callable, Deque, Dict, List, Optional
from uuid import uuid4
import logging
import threading

from core.pending_actions import utc_now
from models.session import ActionLogEntry, SessionContext, SessionEvent, SessionEventType

logger = logging.getLogger(__name__)


class SessionTrail:
    """
    Tracks what happened to workspace items per session, plus a global
    action log. Events per session, the number of sessions and the log are
    all capped; the oldest entries are dropped first. Dropping a session
    also drops its log entries, so a reused session id starts clean.
    """

    def __init__(
        self,
        max_events: int = 200,
        max_log_entries: int = 500,
        max_sessions: int = 1000,
        clock: Callable[[], datetime] = utc_now,
    ):
        if max_sessions < 1:
            raise ValueError("max_sessions must be at least 1")
        self.max_events = max_events
        self.max_sessions = max_sessions
        self._clock = clock
        self._sessions: Dict[str, SessionContext] = {}
        self._events: Dict[str, Deque[SessionEvent]] = {}
        self._action_log: Deque[ActionLogEntry] = deque(maxlen=max_log_entries)
        self._lock = threading.Lock()

    def _snapshot(self, session_id: str) -> SessionContext:
        session = self._sessions[session_id]
        return session.model_copy(update={"events": list(self._events[session_id])})

    def get_or_create_session(self, session_id: str, user_id: str) -> SessionContext:
        with self._lock:
            if session_id not in self._sessions:
                while len(self._sessions) >= self.max_sessions:
                    # dicts keep insertion order, so the first key is the oldest session
                    oldest = next(iter(self._sessions))
                    self._drop_session(oldest)
                    logger.info(f"Evicted session {oldest}")
                self._sessions[session_id] = SessionContext(
                    session_id=session_id,
                    user_id=user_id,
                    started_at=self._clock(),
                )
                self._events[session_id] = deque(maxlen=self.max_events)
                logger.info(f"Started session {session_id} for user {user_id}")
            return self._snapshot(session_id)

    def get_session(self, session_id: str) -> Optional[SessionContext]:
        with self._lock:
            if session_id not in self._sessions:
                return None
            return self._snapshot(session_id)

    def track_event(
        self,
        session_id: str,
        type: SessionEventType,
        item_type: str,
        item_id: str,
        detail: Optional[str] = None,
    ) -> Optional[SessionEvent]:
        """Append an event; returns None when the session is unknown."""
        with self._lock:
            events = self._events.get(session_id)
            if events is None:
                logger.warning(f"track_event for unknown session {session_id}")
                return None
            event = SessionEvent(
                type=type,
                item_type=item_type,
                item_id=item_id,
                timestamp=self._clock(),
                detail=detail,
            )
            events.append(event)
            return event

    def get_events(self, session_id: str) -> List[SessionEvent]:
        with self._lock:
            return list(self._events.get(session_id, ()))

    def log_action(
        self,
        session_id: str,
        tool_name: str,
        args: Dict[str, Any],
        result: Dict[str, Any],
        reason: Optional[str] = None,
    ) -> ActionLogEntry:
        entry = ActionLogEntry(
            id=str(uuid4()),
            session_id=session_id,
            tool_name=tool_name,
            args=dict(args),
            result=dict(result),
            reason=reason,
            created_at=self._clock(),
        )
        with self._lock:
            self._action_log.append(entry)
        return entry

    def get_action_log(self, session_id: Optional[str] = None) -> List[ActionLogEntry]:
        with self._lock:
            if session_id is None:
                return list(self._action_log)
            return [entry for entry in self._action_log if entry.session_id == session_id]

    def _drop_session(self, session_id: str) -> None:
        """Caller holds the lock."""
        self._sessions.pop(session_id, None)
        self._events.pop(session_id, None)
        kept = [entry for entry in self._action_log if entry.session_id != session_id]
        if len(kept) != len(self._action_log):
            self._action_log.clear()
            self._action_log.extend(kept)

    def clear_session(self, session_id: str) -> None:
        with self._lock:
            self._drop_session(session_id)

    def clear_all(self) -> None:
        with self._lock:
            self._sessions.clear()
            self._events.clear()
            self._action_log.clear()
