"""Pending action store: proposals waiting for explicit user confirmation."""
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional
from uuid import uuid4
import logging
import threading

from models.action import ActionProposal, StoredAction

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class PendingActionStore:
    """
    Process-local, owner-scoped proposal store with a fixed TTL.

    Expired entries are swept lazily on every access; there is no
    background timer. Unknown, expired and foreign ids all look the same
    to callers, so the store never reveals that someone else's proposal
    exists.
    """

    def __init__(self, ttl: timedelta = timedelta(minutes=15), clock: Clock = utc_now):
        self.ttl = ttl
        self._clock = clock
        self._actions: Dict[str, StoredAction] = {}
        self._lock = threading.Lock()

    def _sweep(self, now: datetime) -> None:
        """Drop expired entries. Caller holds the lock."""
        expired = [action_id for action_id, action in self._actions.items() if action.expires_at <= now]
        for action_id in expired:
            del self._actions[action_id]
        if expired:
            logger.debug(f"Swept {len(expired)} expired pending action(s)")

    def create(
        self,
        user_id: str,
        tool_name: str,
        arguments: Dict[str, Any],
        summary: str,
    ) -> ActionProposal:
        now = self._clock()
        stored = StoredAction(
            id=str(uuid4()),
            user_id=user_id,
            tool_name=tool_name,
            arguments=dict(arguments),
            summary=summary,
            created_at=now,
            expires_at=now + self.ttl,
        )
        with self._lock:
            self._sweep(now)
            self._actions[stored.id] = stored

        logger.info(f"Stored pending action {stored.id} ({tool_name}) for user {user_id}")
        return stored.to_proposal()

    def get(self, action_id: str, user_id: str) -> Optional[ActionProposal]:
        with self._lock:
            self._sweep(self._clock())
            stored = self._actions.get(action_id)
            if stored is None or stored.user_id != user_id:
                return None
            return stored.to_proposal()

    def remove(self, action_id: str) -> None:
        with self._lock:
            self._actions.pop(action_id, None)

    def take(self, action_id: str, user_id: str) -> Optional[ActionProposal]:
        """Atomically fetch and remove. Of two concurrent callers only one gets the proposal."""
        with self._lock:
            self._sweep(self._clock())
            stored = self._actions.get(action_id)
            if stored is None or stored.user_id != user_id:
                return None
            del self._actions[action_id]
            return stored.to_proposal()

    def clear(self) -> None:
        with self._lock:
            self._actions.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._actions)
