"""Cross-module item link tools"""
from typing import Dict, Any, List

from tools.base import BaseTool, ToolExecutionContext, ToolParameter, ToolResult, ToolSchema, to_string_value
from database.repositories.link_repo import LinkRepository

VALID_ITEM_TYPES = ["event", "task", "note", "log"]
VALID_RELATIONS = ["references", "blocks", "belongs_to", "scheduled_for"]


class ItemsLinkTool(BaseTool):
    def __init__(self, repo: LinkRepository):
        self.repo = repo

    def _build_schema(self) -> ToolSchema:
        return ToolSchema(
            name="items_link",
            description="Create a link between two items (cross-module)",
            module="daily",
            mutating=True,
            parameters=[
                ToolParameter(name="fromItemId", type="string", required=True),
                ToolParameter(name="fromItemType", type="string", enum=VALID_ITEM_TYPES, required=True),
                ToolParameter(name="toItemId", type="string", required=True),
                ToolParameter(name="toItemType", type="string", enum=VALID_ITEM_TYPES, required=True),
                ToolParameter(
                    name="relationType",
                    type="string",
                    enum=VALID_RELATIONS,
                    description="Defaults to 'references'",
                ),
            ],
        )

    async def execute(self, args: Dict[str, Any], ctx: ToolExecutionContext) -> ToolResult:
        from_item_id = to_string_value(args.get("fromItemId"))
        to_item_id = to_string_value(args.get("toItemId"))
        from_item_type = to_string_value(args.get("fromItemType"))
        to_item_type = to_string_value(args.get("toItemType"))
        relation_type = to_string_value(args.get("relationType")) or "references"

        if not from_item_id or not to_item_id or not from_item_type or not to_item_type:
            return ToolResult(ok=False, error="fromItemId, toItemId, fromItemType, toItemType are required")
        if from_item_type not in VALID_ITEM_TYPES:
            return ToolResult(ok=False, error=f"Invalid fromItemType: {from_item_type}")
        if to_item_type not in VALID_ITEM_TYPES:
            return ToolResult(ok=False, error=f"Invalid toItemType: {to_item_type}")
        if relation_type not in VALID_RELATIONS:
            return ToolResult(ok=False, error=f"Invalid relationType: {relation_type}")

        link = await self.repo.upsert_link(from_item_id, from_item_type, to_item_id, to_item_type, relation_type)
        return ToolResult(ok=True, data=link.model_dump())


class ItemsUnlinkTool(BaseTool):
    def __init__(self, repo: LinkRepository):
        self.repo = repo

    def _build_schema(self) -> ToolSchema:
        return ToolSchema(
            name="items_unlink",
            description="Remove a link between two items",
            module="daily",
            mutating=True,
            parameters=[
                ToolParameter(name="fromItemId", type="string", required=True),
                ToolParameter(name="toItemId", type="string", required=True),
                ToolParameter(name="relationType", type="string", enum=VALID_RELATIONS),
            ],
        )

    async def execute(self, args: Dict[str, Any], ctx: ToolExecutionContext) -> ToolResult:
        from_item_id = to_string_value(args.get("fromItemId"))
        to_item_id = to_string_value(args.get("toItemId"))
        relation_type = to_string_value(args.get("relationType")) or "references"

        if not from_item_id or not to_item_id:
            return ToolResult(ok=False, error="fromItemId and toItemId are required")
        if relation_type not in VALID_RELATIONS:
            return ToolResult(ok=False, error=f"Invalid relationType: {relation_type}")

        existing = await self.repo.find_link(from_item_id, to_item_id, relation_type)
        if existing is None:
            return ToolResult(ok=False, error="link not found")

        await self.repo.delete_link(existing)
        return ToolResult(ok=True, data={"deleted": True})


class ItemsListLinksTool(BaseTool):
    def __init__(self, repo: LinkRepository):
        self.repo = repo

    def _build_schema(self) -> ToolSchema:
        return ToolSchema(
            name="items_list_links",
            description="List all links for a given item",
            module="daily",
            mutating=False,
            parameters=[ToolParameter(name="itemId", type="string", required=True)],
        )

    async def execute(self, args: Dict[str, Any], ctx: ToolExecutionContext) -> ToolResult:
        item_id = to_string_value(args.get("itemId"))
        if not item_id:
            return ToolResult(ok=False, error="itemId is required")

        links = await self.repo.list_links(item_id)
        return ToolResult(ok=True, data=[link.model_dump() for link in links])


def link_tools(repo: LinkRepository) -> List[BaseTool]:
    return [ItemsLinkTool(repo), ItemsUnlinkTool(repo), ItemsListLinksTool(repo)]
