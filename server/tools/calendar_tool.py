"""Calendar tools"""
from typing import Dict, Any, List
import logging

from tools.base import (
    BaseTool,
    ToolExecutionContext,
    ToolParameter,
    ToolResult,
    ToolSchema,
    to_number_value,
    to_string_value,
)
from database.repositories.calendar_repo import CalendarRepository

logger = logging.getLogger(__name__)

_EVENT_TYPES = ["event", "task"]
_EVENT_STATUSES = ["pending", "done"]


def _enum_value(value: Any, allowed: List[str]):
    text = to_string_value(value)
    return text if text in allowed else None


class CalendarListEventsTool(BaseTool):
    """Read calendar events in a date range"""

    def __init__(self, repo: CalendarRepository):
        self.repo = repo

    def _build_schema(self) -> ToolSchema:
        return ToolSchema(
            name="calendar_list_events",
            description="List calendar events and tasks, optionally filtered by text, type, status and date range",
            module="calendar",
            mutating=False,
            parameters=[
                ToolParameter(name="q", type="string", description="Text to search in title/description"),
                ToolParameter(name="type", type="string", enum=_EVENT_TYPES),
                ToolParameter(name="status", type="string", enum=_EVENT_STATUSES),
                ToolParameter(name="dateFrom", type="string", description="YYYY-MM-DD"),
                ToolParameter(name="dateTo", type="string", description="YYYY-MM-DD"),
                ToolParameter(name="limit", type="number", default=30),
            ],
        )

    async def execute(self, args: Dict[str, Any], ctx: ToolExecutionContext) -> ToolResult:
        limit = int(min(100, max(1, to_number_value(args.get("limit")) or 30)))
        events = await self.repo.list_events(
            ctx.user_id,
            q=to_string_value(args.get("q")),
            type=_enum_value(args.get("type"), _EVENT_TYPES),
            status=_enum_value(args.get("status"), _EVENT_STATUSES),
            date_from=to_string_value(args.get("dateFrom")),
            date_to=to_string_value(args.get("dateTo")),
        )
        return ToolResult(ok=True, data=[event.model_dump() for event in events[:limit]])


class CalendarCreateEventTool(BaseTool):
    """Create a calendar event or task"""

    def __init__(self, repo: CalendarRepository):
        self.repo = repo

    def _build_schema(self) -> ToolSchema:
        return ToolSchema(
            name="calendar_create_event",
            description=(
                "Create a calendar event or task. This is a WRITE operation that "
                "adds an entry to the user's calendar."
            ),
            module="calendar",
            mutating=True,
            parameters=[
                ToolParameter(name="title", type="string", required=True),
                ToolParameter(name="date", type="string", description="YYYY-MM-DD", required=True),
                ToolParameter(name="time", type="string", description="HH:MM"),
                ToolParameter(name="description", type="string"),
                ToolParameter(name="type", type="string", enum=_EVENT_TYPES, default="task"),
                ToolParameter(name="status", type="string", enum=_EVENT_STATUSES, default="pending"),
            ],
        )

    async def execute(self, args: Dict[str, Any], ctx: ToolExecutionContext) -> ToolResult:
        title = to_string_value(args.get("title"))
        date = to_string_value(args.get("date"))
        if not title or not date:
            return ToolResult(ok=False, error="title and date are required")

        event = await self.repo.create_event(ctx.user_id, {
            "title": title,
            "description": to_string_value(args.get("description")) or "",
            "date": date,
            "time": to_string_value(args.get("time")),
            "type": _enum_value(args.get("type"), _EVENT_TYPES) or "task",
            "status": _enum_value(args.get("status"), _EVENT_STATUSES) or "pending",
        })
        logger.info(f"Created calendar event: {title} on {date}")
        return ToolResult(ok=True, data=event.model_dump())


class CalendarUpdateEventTool(BaseTool):
    """Update fields of an existing calendar event"""

    def __init__(self, repo: CalendarRepository):
        self.repo = repo

    def _build_schema(self) -> ToolSchema:
        return ToolSchema(
            name="calendar_update_event",
            description="Update a calendar event (reschedule, rename, mark done)",
            module="calendar",
            mutating=True,
            parameters=[
                ToolParameter(name="eventId", type="string", required=True),
                ToolParameter(name="title", type="string"),
                ToolParameter(name="description", type="string"),
                ToolParameter(name="date", type="string", description="YYYY-MM-DD"),
                ToolParameter(name="time", type="string", description="HH:MM"),
                ToolParameter(name="type", type="string", enum=_EVENT_TYPES),
                ToolParameter(name="status", type="string", enum=_EVENT_STATUSES),
            ],
        )

    async def execute(self, args: Dict[str, Any], ctx: ToolExecutionContext) -> ToolResult:
        event_id = to_string_value(args.get("eventId"))
        if not event_id:
            return ToolResult(ok=False, error="eventId is required")

        event = await self.repo.update_event(ctx.user_id, event_id, {
            "title": to_string_value(args.get("title")),
            "description": to_string_value(args.get("description")),
            "date": to_string_value(args.get("date")),
            "time": to_string_value(args.get("time")),
            "type": _enum_value(args.get("type"), _EVENT_TYPES),
            "status": _enum_value(args.get("status"), _EVENT_STATUSES),
        })
        if event is None:
            return ToolResult(ok=False, error="event not found")
        return ToolResult(ok=True, data=event.model_dump())


class CalendarDeleteEventTool(BaseTool):
    """Delete a calendar event"""

    def __init__(self, repo: CalendarRepository):
        self.repo = repo

    def _build_schema(self) -> ToolSchema:
        return ToolSchema(
            name="calendar_delete_event",
            description="Delete a calendar event by id. Cannot be undone.",
            module="calendar",
            mutating=True,
            parameters=[
                ToolParameter(name="eventId", type="string", required=True),
            ],
        )

    async def execute(self, args: Dict[str, Any], ctx: ToolExecutionContext) -> ToolResult:
        event_id = to_string_value(args.get("eventId"))
        if not event_id:
            return ToolResult(ok=False, error="eventId is required")

        deleted = await self.repo.delete_event(ctx.user_id, event_id)
        return ToolResult(
            ok=deleted,
            data={"deleted": deleted},
            error=None if deleted else "event not found",
        )


def calendar_tools(repo: CalendarRepository) -> List[BaseTool]:
    return [
        CalendarListEventsTool(repo),
        CalendarCreateEventTool(repo),
        CalendarUpdateEventTool(repo),
        CalendarDeleteEventTool(repo),
    ]
