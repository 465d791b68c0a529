"""Workspace domain records and the unified cross-domain view."""
from pydantic import BaseModel, ConfigDict
from typing import Optional, Literal

from models.intent import AgentModule


class DomainRecord(BaseModel):
    """Base for records handed over by domain providers.

    Providers own validation of their data; extra fields are kept as-is.
    """
    model_config = ConfigDict(extra="allow")


class CalendarEvent(DomainRecord):
    id: str
    title: str
    description: str = ""
    date: str  # YYYY-MM-DD
    time: Optional[str] = None  # HH:MM
    type: Literal["event", "task"] = "task"
    status: Optional[Literal["pending", "done"]] = None


class KanbanColumn(DomainRecord):
    id: str
    title: str
    position: int = 0


class KanbanBoard(DomainRecord):
    id: str
    title: str
    columns: list[KanbanColumn] = []


class KanbanCard(DomainRecord):
    id: str
    board_id: str = ""
    column_id: str = ""
    title: str
    description: str = ""
    position: int = 0
    due_date: Optional[str] = None
    event_links: list[str] = []


class Note(DomainRecord):
    id: str
    title: str
    body: str = ""
    tags: list[str] = []
    parent_id: Optional[str] = None
    event_links: list[str] = []


class DailyItem(DomainRecord):
    id: str
    title: str
    date: str
    source: Literal["calendar", "kanban"] = "calendar"
    status: Literal["pending", "done"] = "pending"
    linked_event_id: Optional[str] = None


class JournalEntry(DomainRecord):
    id: str
    title: str
    body: str = ""
    date: str
    mood: Optional[str] = None
    tags: list[str] = []


ItemType = Literal["event", "task", "note", "log"]
RelationType = Literal["references", "blocks", "belongs_to", "scheduled_for"]


class ItemLink(DomainRecord):
    id: str
    from_item_id: str
    from_item_type: ItemType
    to_item_id: str
    to_item_type: ItemType
    relation_type: RelationType = "references"


class WorkspaceSnapshot(BaseModel):
    """Per-domain entity lists used to build a turn's context."""
    events: list[CalendarEvent] = []
    cards: list[KanbanCard] = []
    notes: list[Note] = []
    daily_items: list[DailyItem] = []


class UnifiedEntity(BaseModel):
    """One real-world item as seen by every domain that references it."""
    global_entity_id: str
    title: str
    sources: list[AgentModule] = []
    date: Optional[str] = None
    status: Optional[str] = None
    event: Optional[CalendarEvent] = None
    cards: list[KanbanCard] = []
    notes: list[Note] = []

    def add_source(self, source: AgentModule) -> None:
        if source not in self.sources:
            self.sources.append(source)


class UnifiedContext(BaseModel):
    entities: list[UnifiedEntity] = []
    prompt_fragment: str = ""
