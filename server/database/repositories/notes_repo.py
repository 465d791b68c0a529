"""Notes repository."""
from typing import Optional, List
from uuid import uuid4
import logging

from models.workspace import Note

logger = logging.getLogger(__name__)

_UNSET = object()


class NotesRepository:
    """Process-local note store keyed by user id."""

    def __init__(self):
        self._notes: dict[str, dict[str, Note]] = {}

    async def list_notes(
        self,
        user_id: str,
        q: Optional[str] = None,
        tag: Optional[str] = None,
        parent_id: Optional[str] = None,
    ) -> List[Note]:
        needle = q.lower() if q else None
        notes = []
        for note in self._notes.get(user_id, {}).values():
            if needle and needle not in note.title.lower() and needle not in note.body.lower():
                continue
            if tag and tag not in note.tags:
                continue
            if parent_id and note.parent_id != parent_id:
                continue
            notes.append(note)
        return notes

    async def create_note(self, user_id: str, data: dict) -> Note:
        note = Note(id=uuid4().hex, **data)
        self._notes.setdefault(user_id, {})[note.id] = note
        logger.info(f"Created note {note.id} for user {user_id}")
        return note

    async def update_note(self, user_id: str, note_id: str, changes: dict, parent_id=_UNSET) -> Optional[Note]:
        """Apply non-empty changes. ``parent_id=None`` detaches the note from its parent."""
        notes = self._notes.get(user_id, {})
        existing = notes.get(note_id)
        if existing is None:
            return None
        updates = {k: v for k, v in changes.items() if v is not None}
        if parent_id is not _UNSET:
            updates["parent_id"] = parent_id
        updated = Note(**{**existing.model_dump(), **updates})
        notes[note_id] = updated
        return updated

    async def delete_note(self, user_id: str, note_id: str) -> bool:
        return self._notes.get(user_id, {}).pop(note_id, None) is not None
