"""Kanban tools"""
from typing import Dict, Any, List

from tools.base import (
    BaseTool,
    ToolExecutionContext,
    ToolParameter,
    ToolResult,
    ToolSchema,
    to_number_value,
    to_string_list,
    to_string_value,
)
from database.repositories.kanban_repo import KanbanRepository

_STRING_LIST = {"type": "string"}


class KanbanListBoardsTool(BaseTool):
    def __init__(self, repo: KanbanRepository):
        self.repo = repo

    def _build_schema(self) -> ToolSchema:
        return ToolSchema(
            name="kanban_list_boards",
            description="List kanban boards with their columns",
            module="kanban",
            mutating=False,
        )

    async def execute(self, args: Dict[str, Any], ctx: ToolExecutionContext) -> ToolResult:
        boards = await self.repo.list_boards(ctx.user_id)
        return ToolResult(ok=True, data=[board.model_dump() for board in boards])


class KanbanListCardsTool(BaseTool):
    def __init__(self, repo: KanbanRepository):
        self.repo = repo

    def _build_schema(self) -> ToolSchema:
        return ToolSchema(
            name="kanban_list_cards",
            description="List kanban cards with optional board filter",
            module="kanban",
            mutating=False,
            parameters=[ToolParameter(name="boardId", type="string")],
        )

    async def execute(self, args: Dict[str, Any], ctx: ToolExecutionContext) -> ToolResult:
        cards = await self.repo.list_cards(ctx.user_id, board_id=to_string_value(args.get("boardId")))
        return ToolResult(ok=True, data=[card.model_dump() for card in cards])


class KanbanCreateCardTool(BaseTool):
    def __init__(self, repo: KanbanRepository):
        self.repo = repo

    def _build_schema(self) -> ToolSchema:
        return ToolSchema(
            name="kanban_create_card",
            description="Create a card in a kanban column. When columnId is omitted the first column of the first board is used.",
            module="kanban",
            mutating=True,
            parameters=[
                ToolParameter(name="title", type="string", required=True),
                ToolParameter(name="columnId", type="string"),
                ToolParameter(name="description", type="string"),
                ToolParameter(name="position", type="number"),
                ToolParameter(name="dueDate", type="string", description="YYYY-MM-DD"),
                ToolParameter(name="eventLinks", type="array", items=_STRING_LIST),
            ],
        )

    async def _default_column(self, user_id: str):
        boards = await self.repo.list_boards(user_id)
        for board in boards:
            if board.columns:
                return sorted(board.columns, key=lambda c: c.position)[0].id
        return None

    async def execute(self, args: Dict[str, Any], ctx: ToolExecutionContext) -> ToolResult:
        title = to_string_value(args.get("title"))
        if not title:
            return ToolResult(ok=False, error="title is required")

        column_id = to_string_value(args.get("columnId")) or await self._default_column(ctx.user_id)
        if not column_id:
            return ToolResult(ok=False, error="columnId is required: no kanban board exists yet")

        card = await self.repo.create_card(ctx.user_id, column_id, {
            "title": title,
            "description": to_string_value(args.get("description")) or "",
            "position": int(max(0, to_number_value(args.get("position")) or 0)),
            "due_date": to_string_value(args.get("dueDate")),
            "event_links": to_string_list(args.get("eventLinks")) or [],
        })
        if card is None:
            return ToolResult(ok=False, error="column not found")
        return ToolResult(ok=True, data=card.model_dump())


class KanbanUpdateCardTool(BaseTool):
    def __init__(self, repo: KanbanRepository):
        self.repo = repo

    def _build_schema(self) -> ToolSchema:
        return ToolSchema(
            name="kanban_update_card",
            description="Update kanban card fields",
            module="kanban",
            mutating=True,
            parameters=[
                ToolParameter(name="cardId", type="string", required=True),
                ToolParameter(name="title", type="string"),
                ToolParameter(name="description", type="string"),
                ToolParameter(name="dueDate", type=["string", "null"]),
                ToolParameter(name="eventLinks", type="array", items=_STRING_LIST),
            ],
        )

    async def execute(self, args: Dict[str, Any], ctx: ToolExecutionContext) -> ToolResult:
        card_id = to_string_value(args.get("cardId"))
        if not card_id:
            return ToolResult(ok=False, error="cardId is required")

        card = await self.repo.update_card(ctx.user_id, card_id, {
            "title": to_string_value(args.get("title")),
            "description": to_string_value(args.get("description")),
            "due_date": to_string_value(args.get("dueDate")),
            "event_links": to_string_list(args.get("eventLinks")),
        })
        if card is None:
            return ToolResult(ok=False, error="card not found")
        return ToolResult(ok=True, data=card.model_dump())


class KanbanMoveCardTool(BaseTool):
    def __init__(self, repo: KanbanRepository):
        self.repo = repo

    def _build_schema(self) -> ToolSchema:
        return ToolSchema(
            name="kanban_move_card",
            description="Move card to another column",
            module="kanban",
            mutating=True,
            parameters=[
                ToolParameter(name="cardId", type="string", required=True),
                ToolParameter(name="columnId", type="string", required=True),
                ToolParameter(name="position", type="number"),
            ],
        )

    async def execute(self, args: Dict[str, Any], ctx: ToolExecutionContext) -> ToolResult:
        card_id = to_string_value(args.get("cardId"))
        column_id = to_string_value(args.get("columnId"))
        position = int(max(0, to_number_value(args.get("position")) or 0))
        if not card_id or not column_id:
            return ToolResult(ok=False, error="cardId and columnId are required")

        card = await self.repo.move_card(ctx.user_id, card_id, column_id, position)
        if card is None:
            return ToolResult(ok=False, error="card or column not found")
        return ToolResult(ok=True, data=card.model_dump())


class KanbanDeleteCardTool(BaseTool):
    def __init__(self, repo: KanbanRepository):
        self.repo = repo

    def _build_schema(self) -> ToolSchema:
        return ToolSchema(
            name="kanban_delete_card",
            description="Delete card by id",
            module="kanban",
            mutating=True,
            parameters=[ToolParameter(name="cardId", type="string", required=True)],
        )

    async def execute(self, args: Dict[str, Any], ctx: ToolExecutionContext) -> ToolResult:
        card_id = to_string_value(args.get("cardId"))
        if not card_id:
            return ToolResult(ok=False, error="cardId is required")

        deleted = await self.repo.delete_card(ctx.user_id, card_id)
        return ToolResult(ok=deleted, data={"deleted": deleted}, error=None if deleted else "card not found")


def kanban_tools(repo: KanbanRepository) -> List[BaseTool]:
    return [
        KanbanListBoardsTool(repo),
        KanbanListCardsTool(repo),
        KanbanCreateCardTool(repo),
        KanbanUpdateCardTool(repo),
        KanbanMoveCardTool(repo),
        KanbanDeleteCardTool(repo),
    ]
