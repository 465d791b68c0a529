"""Daily planner tools"""
from datetime import date, datetime, timedelta
from typing import Dict, Any, List

from tools.base import BaseTool, ToolExecutionContext, ToolParameter, ToolResult, ToolSchema, to_number_value
from database.repositories.calendar_repo import CalendarRepository
from database.repositories.kanban_repo import KanbanRepository
from models.workspace import DailyItem


def _parse_date(value: Any, fallback: date) -> date:
    if not isinstance(value, str):
        return fallback
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    except ValueError:
        return fallback


class DailyOverviewTool(BaseTool):
    """Tasks and card deadlines for the coming days, merged into one list."""

    def __init__(self, calendar_repo: CalendarRepository, kanban_repo: KanbanRepository):
        self.calendar_repo = calendar_repo
        self.kanban_repo = kanban_repo

    def _build_schema(self) -> ToolSchema:
        return ToolSchema(
            name="daily_overview",
            description="Get daily planner overview for tasks and deadlines",
            module="daily",
            mutating=False,
            parameters=[
                ToolParameter(name="startDate", type="string", description="YYYY-MM-DD, defaults to today"),
                ToolParameter(name="days", type="number", default=7),
            ],
        )

    async def execute(self, args: Dict[str, Any], ctx: ToolExecutionContext) -> ToolResult:
        today = _parse_date(ctx.now_iso, date.today())
        start = _parse_date(args.get("startDate"), today)
        days = to_number_value(args.get("days")) or 7
        safe_days = min(31, max(1, int(days)))

        date_from = start.isoformat()
        date_to = (start + timedelta(days=safe_days)).isoformat()

        tasks = await self.calendar_repo.list_events(
            ctx.user_id, type="task", date_from=date_from, date_to=date_to
        )
        due_cards = await self.kanban_repo.list_cards_due(ctx.user_id, date_from, date_to)

        items: List[DailyItem] = [
            DailyItem(
                id=f"daily-event-{task.id}",
                title=task.title,
                date=task.date,
                source="calendar",
                status=task.status or "pending",
                linked_event_id=task.id,
            )
            for task in tasks
        ]
        items.extend(
            DailyItem(
                id=f"daily-card-{card.id}",
                title=card.title,
                date=card.due_date or date_from,
                source="kanban",
                status="pending",
                linked_event_id=card.event_links[0] if card.event_links else None,
            )
            for card in due_cards
        )
        items.sort(key=lambda item: item.date)

        done = sum(1 for item in items if item.status == "done")
        return ToolResult(ok=True, data={
            "dateFrom": date_from,
            "dateTo": date_to,
            "items": [item.model_dump() for item in items],
            "stats": {"total": len(items), "done": done, "pending": len(items) - done},
        })


def daily_tools(calendar_repo: CalendarRepository, kanban_repo: KanbanRepository) -> List[BaseTool]:
    return [DailyOverviewTool(calendar_repo, kanban_repo)]
