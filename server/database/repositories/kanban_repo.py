"""Kanban board and card repository."""
from typing import Optional, List
from uuid import uuid4
import logging

from models.workspace import KanbanBoard, KanbanCard, KanbanColumn

logger = logging.getLogger(__name__)


class KanbanRepository:
    """Process-local kanban store keyed by user id."""

    def __init__(self):
        self._boards: dict[str, dict[str, KanbanBoard]] = {}
        self._cards: dict[str, dict[str, KanbanCard]] = {}

    def _find_column(self, user_id: str, column_id: str) -> Optional[tuple]:
        for board in self._boards.get(user_id, {}).values():
            for column in board.columns:
                if column.id == column_id:
                    return board, column
        return None

    async def list_boards(self, user_id: str) -> List[KanbanBoard]:
        return list(self._boards.get(user_id, {}).values())

    async def create_board(self, user_id: str, title: str, column_titles: List[str]) -> KanbanBoard:
        board = KanbanBoard(
            id=uuid4().hex,
            title=title,
            columns=[
                KanbanColumn(id=uuid4().hex, title=column_title, position=index)
                for index, column_title in enumerate(column_titles)
            ],
        )
        self._boards.setdefault(user_id, {})[board.id] = board
        return board

    async def list_cards(self, user_id: str, board_id: Optional[str] = None) -> List[KanbanCard]:
        cards = self._cards.get(user_id, {}).values()
        if board_id:
            cards = [card for card in cards if card.board_id == board_id]
        return sorted(cards, key=lambda c: (c.column_id, c.position))

    async def list_cards_due(self, user_id: str, date_from: str, date_to: str) -> List[KanbanCard]:
        due = [
            card for card in self._cards.get(user_id, {}).values()
            if card.due_date and date_from <= card.due_date <= date_to
        ]
        return sorted(due, key=lambda c: c.due_date)

    async def create_card(self, user_id: str, column_id: str, data: dict) -> Optional[KanbanCard]:
        """Create a card; returns None when the column does not exist."""
        found = self._find_column(user_id, column_id)
        if found is None:
            return None
        board, _ = found
        card = KanbanCard(id=uuid4().hex, board_id=board.id, column_id=column_id, **data)
        self._cards.setdefault(user_id, {})[card.id] = card
        logger.info(f"Created kanban card {card.id} in column {column_id}")
        return card

    async def update_card(self, user_id: str, card_id: str, changes: dict) -> Optional[KanbanCard]:
        cards = self._cards.get(user_id, {})
        existing = cards.get(card_id)
        if existing is None:
            return None
        updates = {k: v for k, v in changes.items() if v is not None}
        updated = KanbanCard(**{**existing.model_dump(), **updates})
        cards[card_id] = updated
        return updated

    async def move_card(self, user_id: str, card_id: str, column_id: str, position: int) -> Optional[KanbanCard]:
        """Move a card; returns None when either the card or the column is missing."""
        cards = self._cards.get(user_id, {})
        existing = cards.get(card_id)
        found = self._find_column(user_id, column_id)
        if existing is None or found is None:
            return None
        board, _ = found
        moved = existing.model_copy(update={"board_id": board.id, "column_id": column_id, "position": position})
        cards[card_id] = moved
        return moved

    async def delete_card(self, user_id: str, card_id: str) -> bool:
        return self._cards.get(user_id, {}).pop(card_id, None) is not None
