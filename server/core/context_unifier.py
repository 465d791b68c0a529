"""Context Unifier: merges per-domain records into one prompt-ready view."""
from typing import Dict, Iterable, Optional
import locale
import logging

from models.workspace import (
    CalendarEvent,
    DailyItem,
    KanbanCard,
    Note,
    UnifiedContext,
    UnifiedEntity,
)

logger = logging.getLogger(__name__)

# Lexicographically after any real YYYY-MM-DD, so undated entities sort last
_NO_DATE = "9999-99-99"
_TRUNCATION_MARKER = "…"


def _event_key(event_id: str) -> str:
    return f"event:{event_id}"


def _truncate(value: str, max_chars: int) -> str:
    if len(value) <= max_chars:
        return value
    if max_chars <= 0:
        return ""
    return value[: max_chars - 1] + _TRUNCATION_MARKER


def _sort_key(entity: UnifiedEntity):
    return (
        entity.date or _NO_DATE,
        # strxfrm rejects embedded NUL characters
        locale.strxfrm(entity.title.casefold().replace("\x00", "")),
        entity.global_entity_id,
    )


def _render_line(entity: UnifiedEntity) -> str:
    line = f"- [{entity.global_entity_id}] {entity.title} ({','.join(entity.sources)})"
    if entity.date:
        line += f" date={entity.date}"
    if entity.event is not None and entity.event.time:
        line += f" time={entity.event.time}"
    if entity.status:
        line += f" status={entity.status}"
    return line


def unify(
    events: Iterable[CalendarEvent] = (),
    cards: Iterable[KanbanCard] = (),
    notes: Iterable[Note] = (),
    daily_items: Iterable[DailyItem] = (),
    max_chars: int = 3000,
) -> UnifiedContext:
    """
    Collapse records that point at the same calendar event into one entity.

    Cards and notes merge through their first ``event_links`` entry, daily
    items through ``linked_event_id``. Records without a shared event id
    never merge, even when titles match.
    """
    entities: Dict[str, UnifiedEntity] = {}

    for event in events:
        key = _event_key(event.id)
        entities[key] = UnifiedEntity(
            global_entity_id=key,
            title=event.title,
            sources=["calendar"],
            date=event.date,
            status=event.status,
            event=event,
        )

    for card in cards:
        linked: Optional[str] = card.event_links[0] if card.event_links else None
        key = _event_key(linked) if linked else f"kanban:{card.id}"
        existing = entities.get(key)
        if existing is not None:
            existing.cards.append(card)
            existing.add_source("kanban")
            continue
        entities[key] = UnifiedEntity(
            global_entity_id=key,
            title=card.title,
            sources=["kanban"],
            date=card.due_date,
            cards=[card],
        )

    for note in notes:
        linked = note.event_links[0] if note.event_links else None
        key = _event_key(linked) if linked else f"note:{note.id}"
        existing = entities.get(key)
        if existing is not None:
            existing.notes.append(note)
            existing.add_source("notes")
            continue
        entities[key] = UnifiedEntity(
            global_entity_id=key,
            title=note.title,
            sources=["notes"],
            notes=[note],
        )

    for item in daily_items:
        key = _event_key(item.linked_event_id) if item.linked_event_id else f"daily:{item.id}"
        existing = entities.get(key)
        if existing is not None:
            existing.add_source("daily")
            # first writer wins
            if not existing.date:
                existing.date = item.date
            if not existing.status:
                existing.status = item.status
            continue
        entities[key] = UnifiedEntity(
            global_entity_id=key,
            title=item.title,
            sources=["daily"],
            date=item.date,
            status=item.status,
        )

    ordered = sorted(entities.values(), key=_sort_key)
    fragment = _truncate("\n".join(_render_line(entity) for entity in ordered), max_chars)

    logger.debug(f"Unified {len(ordered)} entities into {len(fragment)} chars of context")
    return UnifiedContext(entities=ordered, prompt_fragment=fragment)
