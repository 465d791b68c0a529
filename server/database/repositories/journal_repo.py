"""Journal (daily log) repository."""
from typing import Optional, List
from uuid import uuid4

from models.workspace import JournalEntry


class JournalRepository:
    """Process-local journal store keyed by user id."""

    def __init__(self):
        self._entries: dict[str, dict[str, JournalEntry]] = {}

    async def list_entries(
        self,
        user_id: str,
        date: Optional[str] = None,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        q: Optional[str] = None,
        tag: Optional[str] = None,
    ) -> List[JournalEntry]:
        needle = q.lower() if q else None
        entries = []
        for entry in self._entries.get(user_id, {}).values():
            if date and entry.date != date:
                continue
            if date_from and entry.date < date_from:
                continue
            if date_to and entry.date > date_to:
                continue
            if needle and needle not in entry.title.lower() and needle not in entry.body.lower():
                continue
            if tag and tag not in entry.tags:
                continue
            entries.append(entry)
        return sorted(entries, key=lambda e: e.date, reverse=True)

    async def get_entry(self, user_id: str, entry_id: str) -> Optional[JournalEntry]:
        return self._entries.get(user_id, {}).get(entry_id)

    async def create_entry(self, user_id: str, data: dict) -> JournalEntry:
        entry = JournalEntry(id=uuid4().hex, **data)
        self._entries.setdefault(user_id, {})[entry.id] = entry
        return entry

    async def update_entry(self, user_id: str, entry_id: str, changes: dict) -> Optional[JournalEntry]:
        entries = self._entries.get(user_id, {})
        existing = entries.get(entry_id)
        if existing is None:
            return None
        updates = {k: v for k, v in changes.items() if v is not None}
        updated = JournalEntry(**{**existing.model_dump(), **updates})
        entries[entry_id] = updated
        return updated

    async def delete_entry(self, user_id: str, entry_id: str) -> bool:
        return self._entries.get(user_id, {}).pop(entry_id, None) is not None
