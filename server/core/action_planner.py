"""Action Planner: turns an action intent into one concrete mutating tool call."""
from datetime import date as date_cls, datetime
from typing import Any, Dict, List, Optional, Sequence
import json
import logging
import re

import dateparser

from core.intent_classifier import MODULE_RULES
from models.action import PlannedAction
from models.intent import ALL_MODULES, ActionKind, AgentModule, Language
from models.workspace import KanbanColumn, UnifiedContext, UnifiedEntity

logger = logging.getLogger(__name__)

# (action kind, module) -> tool name
TOOL_TABLE: Dict[tuple, str] = {
    ("create", "calendar"): "calendar_create_event",
    ("create", "kanban"): "kanban_create_card",
    ("create", "notes"): "notes_create",
    ("create", "daily"): "calendar_create_event",
    ("create", "journal"): "journal_create",
    ("update", "calendar"): "calendar_update_event",
    ("update", "kanban"): "kanban_update_card",
    ("update", "notes"): "notes_update",
    ("update", "daily"): "calendar_update_event",
    ("update", "journal"): "journal_update",
    ("delete", "calendar"): "calendar_delete_event",
    ("delete", "kanban"): "kanban_delete_card",
    ("delete", "notes"): "notes_delete",
    ("delete", "daily"): "calendar_delete_event",
    ("delete", "journal"): "journal_delete",
    ("move", "calendar"): "calendar_update_event",
    ("move", "kanban"): "kanban_move_card",
    ("move", "daily"): "calendar_update_event",
}

# Used when the message names no domain at all
DEFAULT_MODULE: Dict[str, str] = {
    "create": "calendar",
    "update": "calendar",
    "delete": "calendar",
    "move": "kanban",
    "generate": "notes",
}

_JOURNAL_RE = re.compile(r"\b(?:journal|log entry|diary)\b|\b(?:дневник|журнал)\w*", re.IGNORECASE)

_QUOTED_RE = re.compile(r"[\"“«]([^\"”»]+)[\"”»]")
_NAMED_RE = re.compile(r"(?:\b(?:titled|called|named)|с названием|под названием)\s+(.+)$", re.IGNORECASE)
_AFTER_NOUN_RE = re.compile(
    r"\b(?:note|event|meeting|task|card|entry|reminder)\s+(?:about\s+|for\s+|on\s+)?(.+)$"
    r"|\b(?:заметк|событи|встреч|задач|карточк|запис)\w*\s+(?:о\s+|об\s+|про\s+)?(.+)$",
    re.IGNORECASE,
)
_RENAME_TO_RE = re.compile(
    r"\b(?:to|into)\s+[\"“«]?([^\"”»]+)[\"”»]?\s*$|\bна\s+[\"“«]?([^\"”»]+)[\"”»]?\s*$",
    re.IGNORECASE,
)
_MOVE_TO_RE = re.compile(
    r"\b(?:to|into)\s+(?:the\s+)?[\"“«]?([^\"”»]+?)[\"”»]?(?:\s+column)?\s*$"
    r"|\b(?:в|на)\s+(?:колонку\s+)?[\"“«]?([^\"”»]+?)[\"”»]?\s*$",
    re.IGNORECASE,
)
_DONE_RE = re.compile(r"\b(?:done|complete|completed|finished)\b|выполнен\w*|сделан\w*", re.IGNORECASE)

_TIME_RE = re.compile(r"\b([01]?\d|2[0-3]):([0-5]\d)\b")
_ISO_DATE_RE = re.compile(r"\b\d{4}-\d{2}-\d{2}\b")
_DATE_PHRASE_RES: List[re.Pattern] = [
    _ISO_DATE_RE,
    re.compile(r"\b\d{1,2}\.\d{1,2}(?:\.\d{2,4})?\b"),
    re.compile(r"\b(?:day after tomorrow|today|tomorrow)\b", re.IGNORECASE),
    re.compile(r"\b(?:monday|tuesday|wednesday|thursday|friday|saturday|sunday)\b", re.IGNORECASE),
    re.compile(r"\bin\s+\d+\s+days?\b", re.IGNORECASE),
    re.compile(r"(?:послезавтра|сегодня|завтра)", re.IGNORECASE),
    re.compile(r"\b(?:понедельник|вторник|сред[ау]|четверг|пятниц[ау]|суббот[ау]|воскресенье)\b", re.IGNORECASE),
]
# Connectives left dangling once dates and times are cut out of a title
_TRAILING_NOISE_RE = re.compile(
    r"(?:\s+(?:for|on|at|by|due|in|to|на|в|к|до|с))+\s*$|[\s,.;:!?]+$",
    re.IGNORECASE,
)


def build_summary(tool_name: str, arguments: Dict[str, Any], language: Language) -> str:
    arg_text = json.dumps(arguments, ensure_ascii=False, separators=(",", ":"))
    if language == "ru":
        return f"Подтвердите действие {tool_name} с параметрами {arg_text}"
    return f"Please confirm action {tool_name} with args {arg_text}"


def extract_time(message: str) -> Optional[str]:
    match = _TIME_RE.search(message)
    if not match:
        return None
    return f"{int(match.group(1)):02d}:{match.group(2)}"


def extract_date(message: str, now: datetime, language: Language = "en") -> Optional[str]:
    """Resolve the first date-like phrase relative to ``now``; YYYY-MM-DD or None."""
    relative_base = now.replace(tzinfo=None)
    for pattern in _DATE_PHRASE_RES:
        match = pattern.search(message)
        if not match:
            continue
        if pattern is _ISO_DATE_RE:
            try:
                return date_cls.fromisoformat(match.group(0)).isoformat()
            except ValueError:
                continue
        parsed = dateparser.parse(
            match.group(0),
            languages=["ru", "en"] if language == "ru" else ["en", "ru"],
            settings={
                "RELATIVE_BASE": relative_base,
                "PREFER_DATES_FROM": "future",
                "DATE_ORDER": "DMY",
            },
        )
        if parsed is not None:
            return parsed.date().isoformat()
        logger.debug(f"dateparser could not resolve '{match.group(0)}'")
    return None


def _strip_dates_and_times(text: str) -> str:
    text = _TIME_RE.sub(" ", text)
    for pattern in _DATE_PHRASE_RES:
        text = pattern.sub(" ", text)
    text = re.sub(r"\s{2,}", " ", text).strip()
    previous = None
    while previous != text:
        previous = text
        text = _TRAILING_NOISE_RE.sub("", text).strip()
    return text


def extract_title(message: str) -> Optional[str]:
    """Quoted text, then "titled X" style phrases, then whatever follows the domain noun."""
    quoted = _QUOTED_RE.search(message)
    if quoted:
        return quoted.group(1).strip() or None

    named = _NAMED_RE.search(message)
    if named:
        return _strip_dates_and_times(named.group(1)) or None

    after_noun = _AFTER_NOUN_RE.search(message)
    if after_noun:
        raw = after_noun.group(1) or after_noun.group(2) or ""
        return _strip_dates_and_times(raw) or None
    return None


class ActionPlanner:
    """
    Deterministic mapping from (action kind, modules, message, context) to
    a single mutating tool call. Missing arguments are left out rather than
    guessed; the tool reports them when the proposal is confirmed.
    """

    def choose_module(self, action_kind: ActionKind, modules: Sequence[AgentModule], message: str) -> str:
        if action_kind == "generate":
            return "notes"
        if _JOURNAL_RE.search(message) and action_kind in ("create", "update", "delete"):
            return "journal"

        candidates = [m for m in modules if (action_kind, m) in TOOL_TABLE]
        if not candidates or set(modules) == set(ALL_MODULES):
            return DEFAULT_MODULE[action_kind]

        # the domain noun mentioned first is usually the object of the verb
        positions: Dict[str, int] = {}
        for module, rules in MODULE_RULES:
            if module not in candidates:
                continue
            matches = [pattern.search(message) for pattern in rules.values()]
            hits = [match.start() for match in matches if match]
            positions[module] = min(hits) if hits else len(message)
        return min(
            candidates,
            key=lambda module: (positions.get(module, len(message)), ALL_MODULES.index(module)),
        )

    def find_target(
        self,
        message: str,
        context: UnifiedContext,
        module: str,
        title: Optional[str] = None,
    ) -> Optional[UnifiedEntity]:
        """Entity whose title is mentioned in the message; the longest match wins."""
        needle = message.casefold()
        wanted = title.casefold() if title else None
        best: Optional[UnifiedEntity] = None
        for entity in context.entities:
            if not self._has_record(entity, module):
                continue
            entity_title = entity.title.casefold()
            if not entity_title:
                continue
            if (wanted and entity_title == wanted) or entity_title in needle:
                if best is None or len(entity.title) > len(best.title):
                    best = entity
        return best

    @staticmethod
    def _has_record(entity: UnifiedEntity, module: str) -> bool:
        if module in ("calendar", "daily"):
            return entity.event is not None
        if module == "kanban":
            return bool(entity.cards)
        if module == "notes":
            return bool(entity.notes)
        return False

    @staticmethod
    def _record_id(entity: UnifiedEntity, module: str) -> Optional[str]:
        if module in ("calendar", "daily") and entity.event is not None:
            return entity.event.id
        if module == "kanban" and entity.cards:
            return entity.cards[0].id
        if module == "notes" and entity.notes:
            return entity.notes[0].id
        return None

    def plan(
        self,
        action_kind: ActionKind,
        modules: Sequence[AgentModule],
        message: str,
        context: UnifiedContext,
        now: datetime,
        language: Language = "en",
        columns: Sequence[KanbanColumn] = (),
    ) -> PlannedAction:
        module = self.choose_module(action_kind, modules, message)
        tool_name = "notes_create" if action_kind == "generate" else TOOL_TABLE[(action_kind, module)]

        title = extract_title(message)
        date = extract_date(message, now, language)
        time = extract_time(message)
        args: Dict[str, Any] = {}
        target_title: Optional[str] = None

        if action_kind in ("create", "generate"):
            if title:
                args["title"] = title
            if tool_name == "calendar_create_event":
                args["date"] = date or now.date().isoformat()
                if time:
                    args["time"] = time
                args["type"] = "event" if time or module == "calendar" else "task"
            elif tool_name == "kanban_create_card":
                if date:
                    args["dueDate"] = date
            elif tool_name == "journal_create":
                args["date"] = date or now.date().isoformat()
            elif action_kind == "generate":
                args["tags"] = ["draft"]
        else:
            target = self.find_target(message, context, module, title)
            if target is not None:
                target_title = target.title
                record_id = self._record_id(target, module)
                if record_id:
                    args[self._id_arg(tool_name)] = record_id
            args.update(self._change_args(action_kind, tool_name, message, date, time, columns))

        logger.info(f"Planned {tool_name} for '{action_kind}' in module {module}")
        return PlannedAction(tool_name=tool_name, arguments=args, target_title=target_title)

    @staticmethod
    def _id_arg(tool_name: str) -> str:
        if tool_name.startswith("calendar_"):
            return "eventId"
        if tool_name.startswith("kanban_"):
            return "cardId"
        if tool_name.startswith("journal_"):
            return "entryId"
        return "noteId"

    @staticmethod
    def _change_args(
        action_kind: ActionKind,
        tool_name: str,
        message: str,
        date: Optional[str],
        time: Optional[str],
        columns: Sequence[KanbanColumn],
    ) -> Dict[str, Any]:
        changes: Dict[str, Any] = {}
        if action_kind == "delete":
            return changes

        if tool_name == "kanban_move_card":
            match = _MOVE_TO_RE.search(message)
            column_name = (match.group(1) or match.group(2)).strip().casefold() if match else None
            if column_name:
                for column in columns:
                    if column.title.casefold() == column_name:
                        changes["columnId"] = column.id
                        break
            return changes

        if tool_name == "calendar_update_event":
            if date:
                changes["date"] = date
            if time:
                changes["time"] = time
            if _DONE_RE.search(message):
                changes["status"] = "done"
        elif tool_name == "kanban_update_card" and date:
            changes["dueDate"] = date

        if action_kind == "update" and re.search(r"\brename\b|переименуй", message, re.IGNORECASE):
            renamed = _RENAME_TO_RE.search(message)
            if renamed:
                changes["title"] = (renamed.group(1) or renamed.group(2)).strip()
        return changes
