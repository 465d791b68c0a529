"""Workspace data provider client"""
from dataclasses import dataclass, field
from typing import Optional
import logging

from database.repositories.calendar_repo import CalendarRepository
from database.repositories.journal_repo import JournalRepository
from database.repositories.kanban_repo import KanbanRepository
from database.repositories.link_repo import LinkRepository
from database.repositories.notes_repo import NotesRepository

logger = logging.getLogger(__name__)


@dataclass
class Workspace:
    """Bundle of the per-domain repositories the tools read and write."""
    calendar: CalendarRepository = field(default_factory=CalendarRepository)
    kanban: KanbanRepository = field(default_factory=KanbanRepository)
    notes: NotesRepository = field(default_factory=NotesRepository)
    journal: JournalRepository = field(default_factory=JournalRepository)
    links: LinkRepository = field(default_factory=LinkRepository)


_workspace: Optional[Workspace] = None


def init_workspace() -> Workspace:
    """Initialize the workspace providers"""
    global _workspace

    if _workspace is None:
        logger.info("Initializing in-memory workspace providers...")
        _workspace = Workspace()

    return _workspace


def reset_workspace() -> None:
    """Drop all workspace data (tests, process teardown)."""
    global _workspace
    _workspace = None
