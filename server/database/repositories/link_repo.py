"""Cross-module item link repository."""
from typing import Optional, List
from uuid import uuid4

from models.workspace import ItemLink


class LinkRepository:
    """Links between items of any module, unique per (from, to, relation)."""

    def __init__(self):
        self._links: dict[tuple, ItemLink] = {}

    async def upsert_link(
        self,
        from_item_id: str,
        from_item_type: str,
        to_item_id: str,
        to_item_type: str,
        relation_type: str,
    ) -> ItemLink:
        key = (from_item_id, to_item_id, relation_type)
        existing = self._links.get(key)
        if existing is not None:
            return existing
        link = ItemLink(
            id=uuid4().hex,
            from_item_id=from_item_id,
            from_item_type=from_item_type,
            to_item_id=to_item_id,
            to_item_type=to_item_type,
            relation_type=relation_type,
        )
        self._links[key] = link
        return link

    async def find_link(self, from_item_id: str, to_item_id: str, relation_type: str) -> Optional[ItemLink]:
        return self._links.get((from_item_id, to_item_id, relation_type))

    async def delete_link(self, link: ItemLink) -> None:
        self._links.pop((link.from_item_id, link.to_item_id, link.relation_type), None)

    async def list_links(self, item_id: str, limit: int = 100) -> List[ItemLink]:
        links = [
            link for link in self._links.values()
            if link.from_item_id == item_id or link.to_item_id == item_id
        ]
        return links[:limit]
