"""Tests for the default workspace summary composer."""
import pytest

from core.context_unifier import unify
from core.response_composer import WorkspaceSummaryComposer
from models.intent import Intent
from models.workspace import CalendarEvent, KanbanCard

QUERY = Intent(type="query", confidence=0.72)


@pytest.fixture
def composer():
    return WorkspaceSummaryComposer()


class TestWorkspaceSummaryComposer:
    @pytest.mark.asyncio
    async def test_clarify(self, composer):
        text = await composer.compose("", Intent(type="clarify", confidence=0.2), unify(), ["daily"], "en")
        assert text == "Could you tell me what you would like to do?"

    @pytest.mark.asyncio
    async def test_nothing_found_names_checked_modules(self, composer):
        text = await composer.compose("anything?", QUERY, unify(), ["calendar", "notes"], "en")
        assert text == "I could not find anything relevant. Checked: calendar, notes."

    @pytest.mark.asyncio
    async def test_nothing_found_russian(self, composer):
        text = await composer.compose("что там?", QUERY, unify(), ["calendar", "daily"], "ru")
        assert text == "Ничего не найдено. Проверены разделы: календарь, ежедневник."

    @pytest.mark.asyncio
    async def test_lists_entities_with_date_time_and_status(self, composer):
        context = unify(events=[
            CalendarEvent(id="e1", title="Dentist", date="2026-03-11", time="15:00", status="pending"),
        ])
        text = await composer.compose("what is planned?", QUERY, context, ["calendar"], "en")
        assert text == "Here is what I found:\n- Dentist (2026-03-11 15:00) [pending]"

    @pytest.mark.asyncio
    async def test_named_entities_narrow_the_answer(self, composer):
        context = unify(cards=[KanbanCard(id="c1", title="Deploy"), KanbanCard(id="c2", title="Review")])
        text = await composer.compose("where is Review?", QUERY, context, ["kanban"], "en")
        assert "Review" in text
        assert "Deploy" not in text

    @pytest.mark.asyncio
    async def test_long_lists_are_capped(self, composer):
        context = unify(cards=[KanbanCard(id=f"c{i}", title=f"Card {i:02d}") for i in range(12)])
        text = await composer.compose("cards?", QUERY, context, ["kanban"], "en")
        lines = text.split("\n")
        assert len(lines) == 12  # header, ten items, overflow line
        assert lines[-1] == "... and 2 more"

    @pytest.mark.asyncio
    async def test_unknown_intent_header(self, composer):
        context = unify(cards=[KanbanCard(id="c1", title="Deploy")])
        text = await composer.compose("hmm", Intent(type="unknown", confidence=0.4), context, ["kanban"], "en")
        assert text.startswith("I am not sure what you mean.")
