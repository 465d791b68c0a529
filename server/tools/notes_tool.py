"""Notes tools"""
from typing import Dict, Any, List
import logging

from tools.base import (
    BaseTool,
    ToolExecutionContext,
    ToolParameter,
    ToolResult,
    ToolSchema,
    to_string_list,
    to_string_value,
)
from database.repositories.notes_repo import NotesRepository

logger = logging.getLogger(__name__)

_STRING_LIST = {"type": "string"}


class NotesSearchTool(BaseTool):
    """Search notes by text, tag or parent"""

    def __init__(self, repo: NotesRepository):
        self.repo = repo

    def _build_schema(self) -> ToolSchema:
        return ToolSchema(
            name="notes_search",
            description="Search notes by text, tag, or parent",
            module="notes",
            mutating=False,
            parameters=[
                ToolParameter(name="q", type="string"),
                ToolParameter(name="tag", type="string"),
                ToolParameter(name="parentId", type="string"),
            ],
        )

    async def execute(self, args: Dict[str, Any], ctx: ToolExecutionContext) -> ToolResult:
        notes = await self.repo.list_notes(
            ctx.user_id,
            q=to_string_value(args.get("q")),
            tag=to_string_value(args.get("tag")),
            parent_id=to_string_value(args.get("parentId")),
        )
        return ToolResult(ok=True, data=[note.model_dump() for note in notes[:100]])


class NotesCreateTool(BaseTool):
    """Create a note"""

    def __init__(self, repo: NotesRepository):
        self.repo = repo

    def _build_schema(self) -> ToolSchema:
        return ToolSchema(
            name="notes_create",
            description="Create note with content and tags",
            module="notes",
            mutating=True,
            parameters=[
                ToolParameter(name="title", type="string", required=True),
                ToolParameter(name="body", type="string"),
                ToolParameter(name="parentId", type="string"),
                ToolParameter(name="tags", type="array", items=_STRING_LIST),
                ToolParameter(name="eventLinks", type="array", items=_STRING_LIST),
            ],
        )

    async def execute(self, args: Dict[str, Any], ctx: ToolExecutionContext) -> ToolResult:
        title = to_string_value(args.get("title"))
        if not title:
            return ToolResult(ok=False, error="title is required")

        note = await self.repo.create_note(ctx.user_id, {
            "title": title,
            "body": to_string_value(args.get("body")) or "",
            "parent_id": to_string_value(args.get("parentId")),
            "tags": to_string_list(args.get("tags")) or [],
            "event_links": to_string_list(args.get("eventLinks")) or [],
        })
        logger.info(f"Created note: {title}")
        return ToolResult(ok=True, data=note.model_dump())


class NotesUpdateTool(BaseTool):
    """Update a note"""

    def __init__(self, repo: NotesRepository):
        self.repo = repo

    def _build_schema(self) -> ToolSchema:
        return ToolSchema(
            name="notes_update",
            description="Update note fields",
            module="notes",
            mutating=True,
            parameters=[
                ToolParameter(name="noteId", type="string", required=True),
                ToolParameter(name="title", type="string"),
                ToolParameter(name="body", type="string"),
                ToolParameter(name="parentId", type=["string", "null"]),
                ToolParameter(name="tags", type="array", items=_STRING_LIST),
                ToolParameter(name="eventLinks", type="array", items=_STRING_LIST),
            ],
        )

    async def execute(self, args: Dict[str, Any], ctx: ToolExecutionContext) -> ToolResult:
        note_id = to_string_value(args.get("noteId"))
        if not note_id:
            return ToolResult(ok=False, error="noteId is required")

        changes = {
            "title": to_string_value(args.get("title")),
            "body": to_string_value(args.get("body")),
            "tags": to_string_list(args.get("tags")),
            "event_links": to_string_list(args.get("eventLinks")),
        }
        if "parentId" in args:
            # explicit null detaches the note from its parent
            note = await self.repo.update_note(
                ctx.user_id, note_id, changes, parent_id=to_string_value(args.get("parentId"))
            )
        else:
            note = await self.repo.update_note(ctx.user_id, note_id, changes)

        if note is None:
            return ToolResult(ok=False, error="note not found")
        return ToolResult(ok=True, data=note.model_dump())


class NotesDeleteTool(BaseTool):
    """Delete a note"""

    def __init__(self, repo: NotesRepository):
        self.repo = repo

    def _build_schema(self) -> ToolSchema:
        return ToolSchema(
            name="notes_delete",
            description="Delete note by id",
            module="notes",
            mutating=True,
            parameters=[ToolParameter(name="noteId", type="string", required=True)],
        )

    async def execute(self, args: Dict[str, Any], ctx: ToolExecutionContext) -> ToolResult:
        note_id = to_string_value(args.get("noteId"))
        if not note_id:
            return ToolResult(ok=False, error="noteId is required")

        deleted = await self.repo.delete_note(ctx.user_id, note_id)
        return ToolResult(ok=deleted, data={"deleted": deleted}, error=None if deleted else "note not found")


def notes_tools(repo: NotesRepository) -> List[BaseTool]:
    return [
        NotesSearchTool(repo),
        NotesCreateTool(repo),
        NotesUpdateTool(repo),
        NotesDeleteTool(repo),
    ]
