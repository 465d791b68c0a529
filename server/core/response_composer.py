"""Response Composer: informational answers for query, clarify and unknown turns."""
from abc import ABC, abstractmethod
from typing import List, Sequence
import logging

from models.intent import AgentModule, Intent, Language
from models.workspace import UnifiedContext, UnifiedEntity

logger = logging.getLogger(__name__)

_MAX_LISTED = 10

_MODULE_NAMES = {
    "en": {"calendar": "calendar", "kanban": "kanban", "notes": "notes", "daily": "daily planner"},
    "ru": {"calendar": "календарь", "kanban": "канбан", "notes": "заметки", "daily": "ежедневник"},
}


class ResponseComposer(ABC):
    """Pluggable answer generator. Exceptions propagate to the transport."""

    @abstractmethod
    async def compose(
        self,
        message: str,
        intent: Intent,
        context: UnifiedContext,
        modules: Sequence[AgentModule],
        language: Language,
    ) -> str:
        ...


class WorkspaceSummaryComposer(ResponseComposer):
    """Deterministic composer that lists the workspace entities behind the answer."""

    async def compose(
        self,
        message: str,
        intent: Intent,
        context: UnifiedContext,
        modules: Sequence[AgentModule],
        language: Language,
    ) -> str:
        if intent.type == "clarify":
            if language == "ru":
                return "Уточните, пожалуйста, что нужно сделать."
            return "Could you tell me what you would like to do?"

        entities = self._matching(message, context.entities)
        module_list = ", ".join(_MODULE_NAMES[language][m] for m in modules)

        if not entities:
            if language == "ru":
                return f"Ничего не найдено. Проверены разделы: {module_list}."
            return f"I could not find anything relevant. Checked: {module_list}."

        lines = [self._render(entity) for entity in entities[:_MAX_LISTED]]
        if len(entities) > _MAX_LISTED:
            more = len(entities) - _MAX_LISTED
            lines.append(f"... и ещё {more}" if language == "ru" else f"... and {more} more")

        header = "Вот что я нашёл:" if language == "ru" else "Here is what I found:"
        if intent.type == "unknown":
            header = (
                "Не уверен, что понял запрос. Вот что есть в рабочем пространстве:"
                if language == "ru"
                else "I am not sure what you mean. Here is what is in your workspace:"
            )
        return "\n".join([header, *lines])

    @staticmethod
    def _matching(message: str, entities: List[UnifiedEntity]) -> List[UnifiedEntity]:
        """Entities named in the message, or all of them when none is named."""
        needle = message.casefold()
        named = [e for e in entities if e.title and e.title.casefold() in needle]
        return named or list(entities)

    @staticmethod
    def _render(entity: UnifiedEntity) -> str:
        line = f"- {entity.title}"
        if entity.date:
            line += f" ({entity.date}"
            if entity.event is not None and entity.event.time:
                line += f" {entity.event.time}"
            line += ")"
        if entity.status:
            line += f" [{entity.status}]"
        return line
