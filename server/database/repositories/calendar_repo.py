"""Calendar event repository."""
from typing import Optional, List
from uuid import uuid4
import logging

from models.workspace import CalendarEvent

logger = logging.getLogger(__name__)


class CalendarRepository:
    """Process-local calendar event store keyed by user id."""

    def __init__(self):
        self._events: dict[str, dict[str, CalendarEvent]] = {}

    def _bucket(self, user_id: str) -> dict[str, CalendarEvent]:
        return self._events.setdefault(user_id, {})

    async def list_events(
        self,
        user_id: str,
        q: Optional[str] = None,
        type: Optional[str] = None,
        status: Optional[str] = None,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
    ) -> List[CalendarEvent]:
        """List events for a user, filtered and ordered by date and time."""
        needle = q.lower() if q else None
        events = []
        for event in self._bucket(user_id).values():
            if needle and needle not in event.title.lower() and needle not in event.description.lower():
                continue
            if type and event.type != type:
                continue
            if status and (event.status or "pending") != status:
                continue
            if date_from and event.date < date_from:
                continue
            if date_to and event.date > date_to:
                continue
            events.append(event)
        return sorted(events, key=lambda e: (e.date, e.time or ""))

    async def get_event(self, user_id: str, event_id: str) -> Optional[CalendarEvent]:
        return self._bucket(user_id).get(event_id)

    async def create_event(self, user_id: str, data: dict) -> CalendarEvent:
        event = CalendarEvent(id=data.get("id") or uuid4().hex, **{k: v for k, v in data.items() if k != "id"})
        self._bucket(user_id)[event.id] = event
        logger.info(f"Created calendar event {event.id} for user {user_id}")
        return event

    async def update_event(self, user_id: str, event_id: str, changes: dict) -> Optional[CalendarEvent]:
        bucket = self._bucket(user_id)
        existing = bucket.get(event_id)
        if existing is None:
            return None
        updates = {k: v for k, v in changes.items() if v is not None}
        updated = CalendarEvent(**{**existing.model_dump(), **updates})
        bucket[event_id] = updated
        return updated

    async def delete_event(self, user_id: str, event_id: str) -> bool:
        return self._bucket(user_id).pop(event_id, None) is not None
