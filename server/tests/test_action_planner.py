"""Tests for the deterministic action planner."""
import pytest

from conftest import FIXED_NOW
from core.action_planner import (
    ActionPlanner,
    build_summary,
    extract_date,
    extract_time,
    extract_title,
)
from core.context_unifier import unify
from models.workspace import CalendarEvent, KanbanCard, KanbanColumn, Note


@pytest.fixture
def planner():
    return ActionPlanner()


class TestExtraction:
    def test_summary_english(self):
        assert build_summary("notes_create", {"title": "Plan"}, "en") == (
            'Please confirm action notes_create with args {"title":"Plan"}'
        )

    def test_summary_russian_keeps_cyrillic(self):
        assert build_summary("notes_create", {"title": "План"}, "ru") == (
            'Подтвердите действие notes_create с параметрами {"title":"План"}'
        )

    @pytest.mark.parametrize("message,expected", [
        ("call at 9:05", "09:05"),
        ("standup 14:30 sharp", "14:30"),
        ("no time here", None),
    ])
    def test_extract_time(self, message, expected):
        assert extract_time(message) == expected

    def test_iso_date(self):
        assert extract_date("move it to 2026-04-01", FIXED_NOW) == "2026-04-01"

    def test_invalid_iso_date_is_ignored(self):
        assert extract_date("on 2026-13-45", FIXED_NOW) is None

    def test_relative_dates(self):
        assert extract_date("dentist tomorrow", FIXED_NOW) == "2026-03-11"
        assert extract_date("встреча завтра", FIXED_NOW, "ru") == "2026-03-11"
        assert extract_date("today is fine", FIXED_NOW) == "2026-03-10"

    def test_no_date(self):
        assert extract_date("buy milk", FIXED_NOW) is None

    @pytest.mark.parametrize("message,expected", [
        ('add note "Grocery list"', "Grocery list"),
        ("добавь заметку «Идеи»", "Идеи"),
        ("create task called Buy milk for friday", "Buy milk"),
        ("создай заметку с названием План релиза", "План релиза"),
        ("add meeting with Anna tomorrow at 10:00", "with Anna"),
        ("create something", None),
    ])
    def test_extract_title(self, message, expected):
        assert extract_title(message) == expected

    def test_apostrophes_are_not_quotes(self):
        assert extract_title("add note about Bob's birthday") == "Bob's birthday"


class TestChooseModule:
    def test_generate_always_targets_notes(self, planner):
        assert planner.choose_module("generate", ["calendar"], "write a summary") == "notes"

    def test_journal_keywords(self, planner):
        assert planner.choose_module("create", ["daily"], "add journal entry for today") == "journal"

    def test_all_modules_fall_back_to_default(self, planner):
        modules = ["calendar", "kanban", "notes", "daily"]
        assert planner.choose_module("create", modules, "add something") == "calendar"
        assert planner.choose_module("move", modules, "move it") == "kanban"

    def test_first_mentioned_module_wins(self, planner):
        message = "add card for the meeting"
        assert planner.choose_module("create", ["calendar", "kanban"], message) == "kanban"


class TestPlan:
    def test_create_calendar_task_defaults_to_today(self, planner):
        planned = planner.plan("create", ["daily"], "add task Pay rent", unify(), FIXED_NOW)
        assert planned.tool_name == "calendar_create_event"
        assert planned.arguments == {"title": "Pay rent", "date": "2026-03-10", "type": "task"}

    def test_create_card_with_due_date(self, planner):
        planned = planner.plan("create", ["kanban"], "add card Review PR by friday", unify(), FIXED_NOW)
        assert planned.tool_name == "kanban_create_card"
        assert planned.arguments == {"title": "Review PR", "dueDate": "2026-03-13"}

    def test_create_journal_entry(self, planner):
        planned = planner.plan(
            "create", ["daily"], "add journal entry about the trip tomorrow", unify(), FIXED_NOW
        )
        assert planned.tool_name == "journal_create"
        assert planned.arguments == {"title": "the trip", "date": "2026-03-11"}

    def test_generate_note_is_tagged_draft(self, planner):
        planned = planner.plan("generate", ["notes"], "write a note about onboarding", unify(), FIXED_NOW)
        assert planned.tool_name == "notes_create"
        assert planned.arguments == {"title": "onboarding", "tags": ["draft"]}

    def test_rename_note(self, planner):
        context = unify(notes=[Note(id="n1", title="Draft")])
        planned = planner.plan("update", ["notes"], "rename note Draft to Final", context, FIXED_NOW)
        assert planned.tool_name == "notes_update"
        assert planned.arguments == {"noteId": "n1", "title": "Final"}
        assert planned.target_title == "Draft"

    def test_mark_event_done(self, planner):
        context = unify(events=[CalendarEvent(id="e1", title="Standup", date="2026-03-11")])
        planned = planner.plan("update", ["calendar"], "mark event Standup as done", context, FIXED_NOW)
        assert planned.arguments == {"eventId": "e1", "status": "done"}

    def test_longest_title_wins(self, planner):
        context = unify(cards=[
            KanbanCard(id="c1", title="Deploy"),
            KanbanCard(id="c2", title="Deploy backend"),
        ])
        planned = planner.plan("delete", ["kanban"], "delete card Deploy backend", context, FIXED_NOW)
        assert planned.arguments == {"cardId": "c2"}

    def test_move_without_matching_column(self, planner):
        context = unify(cards=[KanbanCard(id="c1", title="Deploy")])
        columns = [KanbanColumn(id="col-1", title="Todo")]
        planned = planner.plan("move", ["kanban"], "move card Deploy to Review", context, FIXED_NOW, columns=columns)
        assert planned.arguments == {"cardId": "c1"}

    def test_move_to_column_in_russian(self, planner):
        context = unify(cards=[KanbanCard(id="c1", title="Деплой")])
        columns = [KanbanColumn(id="col-1", title="Todo"), KanbanColumn(id="col-2", title="Готово")]
        planned = planner.plan(
            "move", ["kanban"], "перемести карточку Деплой в Готово", context, FIXED_NOW, "ru", columns
        )
        assert planned.arguments == {"cardId": "c1", "columnId": "col-2"}

    def test_unknown_target_leaves_id_out(self, planner):
        planned = planner.plan("delete", ["notes"], "delete note Ghost", unify(), FIXED_NOW)
        assert planned.tool_name == "notes_delete"
        assert planned.arguments == {}
