"""Intent Classifier: rule-based, bilingual, deterministic."""
from typing import Dict, List, Optional, Tuple
import logging
import re

from models.intent import ALL_MODULES, AgentModule, Intent, Language

logger = logging.getLogger(__name__)


def _compile_word_patterns(keywords: List[str]) -> re.Pattern:
    """
    Build a single compiled regex that matches any of the keywords
    on word boundaries.  This prevents "add" from matching inside
    "address" and "note" from matching inside "denote".
    """
    escaped = [re.escape(kw) for kw in keywords]
    pattern = r"\b(?:" + "|".join(escaped) + r")\b"
    return re.compile(pattern, re.IGNORECASE)


def _compile_stem_patterns(stems: List[str]) -> re.Pattern:
    """
    Same as above but for inflected languages: the stem must start a word,
    any ending is accepted ("календар" matches "календарь", "календаре").
    """
    escaped = [re.escape(stem) for stem in stems]
    pattern = r"\b(?:" + "|".join(escaped) + r")\w*"
    return re.compile(pattern, re.IGNORECASE)


# Rule table: category -> language -> compiled pattern.
# Adding a language means adding one entry per category here.
ACTION_RULES: Dict[str, Dict[Language, re.Pattern]] = {
    "create": {
        "en": _compile_word_patterns(["create", "add", "new"]),
        "ru": _compile_stem_patterns(["сделай", "создай", "добавь"]),
    },
    "update": {
        "en": _compile_word_patterns(["update", "edit", "rename"]),
        "ru": _compile_stem_patterns(["измени", "обнови", "переименуй"]),
    },
    "delete": {
        "en": _compile_word_patterns(["delete", "remove"]),
        "ru": _compile_stem_patterns(["удали", "убери"]),
    },
    "move": {
        "en": _compile_word_patterns(["move", "transfer"]),
        "ru": _compile_stem_patterns(["перемести", "перенеси"]),
    },
    "generate": {
        "en": _compile_word_patterns(["generate", "draft", "write"]),
        "ru": _compile_stem_patterns(["сгенерируй", "напиши"]),
    },
}

NAVIGATION_RULES: List[Tuple[str, Dict[Language, re.Pattern]]] = [
    ("/calendar", {
        "en": _compile_word_patterns(["calendar"]),
        "ru": _compile_stem_patterns(["календар"]),
    }),
    ("/kanban", {
        "en": _compile_word_patterns(["kanban", "board"]),
        "ru": _compile_stem_patterns(["доск", "канбан"]),
    }),
    ("/notes", {
        "en": _compile_word_patterns(["note", "notes"]),
        "ru": _compile_stem_patterns(["заметк"]),
    }),
    ("/home", {
        "en": _compile_word_patterns(["home", "dashboard"]),
        "ru": _compile_stem_patterns(["главн"]),
    }),
    ("/settings", {
        "en": _compile_word_patterns(["setting", "settings"]),
        "ru": _compile_stem_patterns(["настройк"]),
    }),
]

NAVIGATION_VERBS: Dict[Language, re.Pattern] = {
    "en": _compile_word_patterns(["open", "show", "go to"]),
    "ru": _compile_stem_patterns(["перейди", "открой", "покажи"]),
}

QUERY_WORDS: Dict[Language, re.Pattern] = {
    "en": _compile_word_patterns(["when", "what", "show", "list"]),
    "ru": _compile_word_patterns(["какие", "какой", "что", "покажи", "найди"]),
}

MODULE_RULES: List[Tuple[AgentModule, Dict[Language, re.Pattern]]] = [
    ("calendar", {
        "en": _compile_word_patterns(["calendar", "event", "events", "meeting", "meetings", "deadline"]),
        "ru": _compile_stem_patterns(["календар", "событи", "расписан"]),
    }),
    ("kanban", {
        "en": _compile_word_patterns(["kanban", "board", "card", "cards", "column"]),
        "ru": _compile_stem_patterns(["канбан", "доск", "карточк", "статус"]),
    }),
    ("notes", {
        "en": _compile_word_patterns(["note", "notes", "wiki"]),
        "ru": _compile_stem_patterns(["заметк", "конспект"]),
    }),
    ("daily", {
        "en": _compile_word_patterns(["daily", "planner", "routine", "today", "tomorrow"]),
        "ru": _compile_stem_patterns(["ежеднев", "сегодня", "завтра"]),
    }),
]

_CYRILLIC_RE = re.compile(r"[Ѐ-ӿ]")


def _matches(rules: Dict[Language, re.Pattern], text: str) -> bool:
    return any(pattern.search(text) for pattern in rules.values())


def detect_language(text: Optional[str]) -> Language:
    """Cyrillic anywhere in the text means Russian, everything else English."""
    if text and _CYRILLIC_RE.search(text):
        return "ru"
    return "en"


def classify(message: str) -> Intent:
    """Classify a user message. Never raises."""
    normalized = (message or "").strip()
    if not normalized:
        return Intent(type="clarify", confidence=0.2)

    if _matches(NAVIGATION_VERBS, normalized):
        for route, rules in NAVIGATION_RULES:
            if _matches(rules, normalized):
                return Intent(type="navigate", confidence=0.85, navigate_to=route)

    for action_kind, rules in ACTION_RULES.items():
        if _matches(rules, normalized):
            return Intent(
                type="action",
                action_kind=action_kind,
                confidence=0.8,
                requires_confirmation=True,
            )

    if normalized.endswith("?") or _matches(QUERY_WORDS, normalized):
        return Intent(type="query", confidence=0.72)

    return Intent(type="unknown", confidence=0.4)


def select_relevant_modules(message: str) -> List[AgentModule]:
    """Modules whose vocabulary appears in the message, in table order."""
    normalized = (message or "").strip()
    if not normalized:
        return ["daily"]

    selected = [module for module, rules in MODULE_RULES if _matches(rules, normalized)]
    if not selected:
        return list(ALL_MODULES)

    # dict preserves order while dropping repeats
    return list(dict.fromkeys(selected))
