"""Tool catalogue assembled from every domain module."""
from typing import List

from database.client import Workspace
from tools.base import BaseTool, ToolRegistry
from tools.calendar_tool import calendar_tools
from tools.daily_tool import daily_tools
from tools.journal_tool import journal_tools
from tools.kanban_tool import kanban_tools
from tools.link_tool import link_tools
from tools.notes_tool import notes_tools


def all_tools(workspace: Workspace) -> List[BaseTool]:
    return [
        *calendar_tools(workspace.calendar),
        *kanban_tools(workspace.kanban),
        *notes_tools(workspace.notes),
        *daily_tools(workspace.calendar, workspace.kanban),
        *journal_tools(workspace.journal),
        *link_tools(workspace.links),
    ]


def build_registry(workspace: Workspace) -> ToolRegistry:
    """Register every tool once and seal the registry."""
    return ToolRegistry.from_tools(all_tools(workspace))
