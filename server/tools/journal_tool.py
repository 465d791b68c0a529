"""Journal (daily log) tools"""
from typing import Dict, Any, List

from tools.base import (
    BaseTool,
    ToolExecutionContext,
    ToolParameter,
    ToolResult,
    ToolSchema,
    to_string_list,
    to_string_value,
)
from database.repositories.journal_repo import JournalRepository

_STRING_LIST = {"type": "string"}


class JournalListTool(BaseTool):
    def __init__(self, repo: JournalRepository):
        self.repo = repo

    def _build_schema(self) -> ToolSchema:
        return ToolSchema(
            name="journal_list",
            description="List journal/log entries with optional date and text filters",
            module="daily",
            mutating=False,
            parameters=[
                ToolParameter(name="date", type="string", description="Exact date YYYY-MM-DD"),
                ToolParameter(name="dateFrom", type="string"),
                ToolParameter(name="dateTo", type="string"),
                ToolParameter(name="q", type="string"),
                ToolParameter(name="tag", type="string"),
            ],
        )

    async def execute(self, args: Dict[str, Any], ctx: ToolExecutionContext) -> ToolResult:
        entries = await self.repo.list_entries(
            ctx.user_id,
            date=to_string_value(args.get("date")),
            date_from=to_string_value(args.get("dateFrom")),
            date_to=to_string_value(args.get("dateTo")),
            q=to_string_value(args.get("q")),
            tag=to_string_value(args.get("tag")),
        )
        return ToolResult(ok=True, data=[entry.model_dump() for entry in entries[:100]])


class JournalGetTool(BaseTool):
    def __init__(self, repo: JournalRepository):
        self.repo = repo

    def _build_schema(self) -> ToolSchema:
        return ToolSchema(
            name="journal_get",
            description="Get a single journal entry by id",
            module="daily",
            mutating=False,
            parameters=[ToolParameter(name="entryId", type="string", required=True)],
        )

    async def execute(self, args: Dict[str, Any], ctx: ToolExecutionContext) -> ToolResult:
        entry_id = to_string_value(args.get("entryId"))
        if not entry_id:
            return ToolResult(ok=False, error="entryId is required")

        entry = await self.repo.get_entry(ctx.user_id, entry_id)
        if entry is None:
            return ToolResult(ok=False, error="journal entry not found")
        return ToolResult(ok=True, data=entry.model_dump())


class JournalCreateTool(BaseTool):
    def __init__(self, repo: JournalRepository):
        self.repo = repo

    def _build_schema(self) -> ToolSchema:
        return ToolSchema(
            name="journal_create",
            description="Create a journal/log entry for a given date",
            module="daily",
            mutating=True,
            parameters=[
                ToolParameter(name="title", type="string", required=True),
                ToolParameter(name="date", type="string", description="Date YYYY-MM-DD", required=True),
                ToolParameter(name="body", type="string"),
                ToolParameter(name="mood", type="string"),
                ToolParameter(name="tags", type="array", items=_STRING_LIST),
            ],
        )

    async def execute(self, args: Dict[str, Any], ctx: ToolExecutionContext) -> ToolResult:
        title = to_string_value(args.get("title"))
        date = to_string_value(args.get("date"))
        if not title or not date:
            return ToolResult(ok=False, error="title and date are required")

        entry = await self.repo.create_entry(ctx.user_id, {
            "title": title,
            "date": date,
            "body": to_string_value(args.get("body")) or "",
            "mood": to_string_value(args.get("mood")),
            "tags": to_string_list(args.get("tags")) or [],
        })
        return ToolResult(ok=True, data=entry.model_dump())


class JournalUpdateTool(BaseTool):
    def __init__(self, repo: JournalRepository):
        self.repo = repo

    def _build_schema(self) -> ToolSchema:
        return ToolSchema(
            name="journal_update",
            description="Update a journal entry",
            module="daily",
            mutating=True,
            parameters=[
                ToolParameter(name="entryId", type="string", required=True),
                ToolParameter(name="title", type="string"),
                ToolParameter(name="body", type="string"),
                ToolParameter(name="date", type="string"),
                ToolParameter(name="mood", type="string"),
                ToolParameter(name="tags", type="array", items=_STRING_LIST),
            ],
        )

    async def execute(self, args: Dict[str, Any], ctx: ToolExecutionContext) -> ToolResult:
        entry_id = to_string_value(args.get("entryId"))
        if not entry_id:
            return ToolResult(ok=False, error="entryId is required")

        entry = await self.repo.update_entry(ctx.user_id, entry_id, {
            "title": to_string_value(args.get("title")),
            "body": to_string_value(args.get("body")),
            "date": to_string_value(args.get("date")),
            "mood": to_string_value(args.get("mood")),
            "tags": to_string_list(args.get("tags")),
        })
        if entry is None:
            return ToolResult(ok=False, error="journal entry not found")
        return ToolResult(ok=True, data=entry.model_dump())


class JournalDeleteTool(BaseTool):
    def __init__(self, repo: JournalRepository):
        self.repo = repo

    def _build_schema(self) -> ToolSchema:
        return ToolSchema(
            name="journal_delete",
            description="Delete a journal entry by id",
            module="daily",
            mutating=True,
            parameters=[ToolParameter(name="entryId", type="string", required=True)],
        )

    async def execute(self, args: Dict[str, Any], ctx: ToolExecutionContext) -> ToolResult:
        entry_id = to_string_value(args.get("entryId"))
        if not entry_id:
            return ToolResult(ok=False, error="entryId is required")

        deleted = await self.repo.delete_entry(ctx.user_id, entry_id)
        return ToolResult(ok=deleted, data={"deleted": deleted}, error=None if deleted else "journal entry not found")


def journal_tools(repo: JournalRepository) -> List[BaseTool]:
    return [
        JournalListTool(repo),
        JournalGetTool(repo),
        JournalCreateTool(repo),
        JournalUpdateTool(repo),
        JournalDeleteTool(repo),
    ]
