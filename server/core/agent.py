"""Turn orchestrator: classify, gather context, propose or resolve actions."""
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional, Sequence
import time
import logging

from core.action_planner import ActionPlanner, build_summary
from core.context_unifier import unify
from core.intent_classifier import classify, detect_language, select_relevant_modules
from core.pending_actions import PendingActionStore, utc_now
from core.response_composer import ResponseComposer, WorkspaceSummaryComposer
from core.session_context import SessionTrail
from models.action import ActionProposal, ToolCall
from models.intent import AgentModule, Intent, Language
from models.message import TurnInput, TurnResult
from models.workspace import (
    CalendarEvent,
    DailyItem,
    KanbanBoard,
    KanbanCard,
    KanbanColumn,
    Note,
    UnifiedContext,
    WorkspaceSnapshot,
)
from tools.base import ToolExecutionContext, ToolRegistry, ToolResult
from tools.dispatcher import ToolDispatcher

logger = logging.getLogger(__name__)


class AgentError(Exception):
    """Typed agent errors so callers can distinguish transient from permanent failures."""
    def __init__(self, message: str, *, retryable: bool = False):
        super().__init__(message)
        self.retryable = retryable


_TEXTS: Dict[str, Dict[Language, str]] = {
    "not_found": {
        "en": "Requested action was not found or has expired.",
        "ru": "Запрошенное действие не найдено или уже истекло.",
    },
    "declined": {
        "en": "Understood, action was canceled.",
        "ru": "Понял, действие отменено.",
    },
    "done": {
        "en": "Done. Action completed successfully.",
        "ru": "Готово. Действие выполнено успешно.",
    },
    "failed": {
        "en": "Could not execute action: {error}",
        "ru": "Не удалось выполнить действие: {error}",
    },
    "navigate": {
        "en": "Opening section {route}.",
        "ru": "Открываю раздел {route}.",
    },
    "proposal": {
        "en": "I suggest this action: {summary}",
        "ru": "Предлагаю действие: {summary}",
    },
}

# Read-only tool used to gather context for each module
_CONTEXT_TOOLS: Dict[str, str] = {
    "calendar": "calendar_list_events",
    "kanban": "kanban_list_cards",
    "notes": "notes_search",
    "daily": "daily_overview",
}

_ID_ARGS = ("eventId", "cardId", "noteId", "entryId", "fromItemId")

_ITEM_TYPES = {
    "calendar": "event",
    "kanban": "card",
    "notes": "note",
    "journal": "log",
    "items": "link",
}


def _text(key: str, language: Language, **kwargs) -> str:
    return _TEXTS[key][language].format(**kwargs)


def _action_kind_for_tool(tool_name: str) -> str:
    if tool_name == "items_link" or tool_name.endswith("_create") or "_create_" in tool_name:
        return "create"
    if tool_name == "items_unlink" or "_delete" in tool_name:
        return "delete"
    if "_move" in tool_name:
        return "move"
    return "update"


def _session_event_type(tool_name: str) -> str:
    if tool_name == "items_link":
        return "linked"
    kind = _action_kind_for_tool(tool_name)
    return {"create": "created", "delete": "deleted"}.get(kind, "updated")


class WorkspaceAgent:
    """
    One turn in, one TurnResult out.

    Decision turns resolve a stored proposal (removal always happens before
    dispatch, so a proposal can run at most once). Fresh turns classify the
    message and either navigate, propose a mutating call, or answer from
    the unified workspace context.
    """

    def __init__(
        self,
        tool_registry: ToolRegistry,
        dispatcher: ToolDispatcher,
        pending_store: PendingActionStore,
        session_trail: SessionTrail,
        planner: Optional[ActionPlanner] = None,
        composer: Optional[ResponseComposer] = None,
        context_max_chars: int = 2400,
        context_window_days: int = 14,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.tool_registry = tool_registry
        self.dispatcher = dispatcher
        self.pending_store = pending_store
        self.session_trail = session_trail
        self.planner = planner or ActionPlanner()
        self.composer = composer or WorkspaceSummaryComposer()
        self.context_max_chars = context_max_chars
        self.context_window_days = context_window_days
        self._clock = clock

    async def run_turn(self, turn_input: TurnInput, user_id: str) -> TurnResult:
        start_time = time.time()
        now = self._clock()

        if turn_input.message is not None:
            language = detect_language(turn_input.message)
        else:
            language = detect_language(turn_input.history[-1].content if turn_input.history else "")

        session = self._audit(self.session_trail.get_or_create_session, turn_input.session_id, user_id)
        # only the user who owns a session id writes to its trail
        audit_session = turn_input.session_id if session is not None and session.user_id == user_id else None
        if session is not None and audit_session is None:
            logger.warning(f"Session {turn_input.session_id} belongs to another user; turn is not audited")

        if turn_input.action_decision is not None:
            result = await self._resolve_decision(turn_input, user_id, language, now, audit_session)
        else:
            result = await self._fresh_turn(turn_input, user_id, language, now, audit_session)

        execution_time = int((time.time() - start_time) * 1000)
        logger.info(
            f"Turn for session {turn_input.session_id} finished in {execution_time}ms "
            f"(intent={result.intent.type}, status={result.status})"
        )
        return result

    # ------------------------------------------------------------------
    # Decision branch
    # ------------------------------------------------------------------

    async def _resolve_decision(
        self,
        turn_input: TurnInput,
        user_id: str,
        language: Language,
        now: datetime,
        audit_session: Optional[str],
    ) -> TurnResult:
        decision = turn_input.action_decision
        proposal = self.pending_store.take(decision.action_id, user_id)

        if proposal is None:
            logger.info(f"Pending action {decision.action_id} not found for user {user_id}")
            return TurnResult(
                text=_text("not_found", language),
                language=language,
                intent=Intent(type="clarify", confidence=0.6),
                status="error",
                error_code="action_not_found",
            )

        intent = Intent(
            type="action",
            action_kind=_action_kind_for_tool(proposal.tool_name),
            confidence=0.9,
            requires_confirmation=True,
        )

        if not decision.approved:
            if audit_session is not None:
                self._audit(
                    self.session_trail.log_action,
                    audit_session,
                    proposal.tool_name,
                    proposal.arguments,
                    {"ok": False, "declined": True, "action_id": proposal.id},
                    "declined",
                )
            return TurnResult(text=_text("declined", language), language=language, intent=intent)

        ctx = ToolExecutionContext(user_id=user_id, now_iso=now.isoformat())
        result = await self.dispatcher.dispatch(proposal.tool_name, proposal.arguments, ctx)
        if audit_session is not None:
            self._record_dispatch(audit_session, proposal, result)

        tool = self.tool_registry.get_tool(proposal.tool_name)
        used_modules: List[AgentModule] = [tool.module] if tool else []

        if not result.ok:
            text = _text("failed", language, error=result.error or "unknown")
        else:
            text = _text("done", language)
        return TurnResult(text=text, language=language, intent=intent, used_modules=used_modules)

    def _record_dispatch(self, session_id: str, proposal: ActionProposal, result: ToolResult) -> None:
        self._audit(
            self.session_trail.log_action,
            session_id,
            proposal.tool_name,
            proposal.arguments,
            result.model_dump(),
            "confirmed",
        )
        if not result.ok:
            return

        data = result.data if isinstance(result.data, dict) else {}
        item_id = data.get("id") or next(
            (proposal.arguments[arg] for arg in _ID_ARGS if proposal.arguments.get(arg)),
            None,
        )
        if not item_id:
            return
        prefix = proposal.tool_name.split("_", 1)[0]
        self._audit(
            self.session_trail.track_event,
            session_id,
            _session_event_type(proposal.tool_name),
            _ITEM_TYPES.get(prefix, prefix),
            str(item_id),
            data.get("title"),
        )

    # ------------------------------------------------------------------
    # Fresh branch
    # ------------------------------------------------------------------

    async def _fresh_turn(
        self,
        turn_input: TurnInput,
        user_id: str,
        language: Language,
        now: datetime,
        audit_session: Optional[str],
    ) -> TurnResult:
        message = turn_input.message or ""
        intent = classify(message)

        if intent.type == "navigate":
            return TurnResult(
                text=_text("navigate", language, route=intent.navigate_to),
                language=language,
                intent=intent,
                navigate_to=intent.navigate_to,
            )

        modules = select_relevant_modules(message)
        ctx = ToolExecutionContext(user_id=user_id, now_iso=now.isoformat())
        context = await self._build_context(turn_input.snapshot, modules, ctx, now)

        if intent.type == "action":
            return await self._propose(turn_input, intent, modules, context, ctx, language, now, audit_session)

        text = await self.composer.compose(message, intent, context, modules, language)
        return TurnResult(text=text, language=language, intent=intent, used_modules=modules)

    async def _propose(
        self,
        turn_input: TurnInput,
        intent: Intent,
        modules: List[AgentModule],
        context: UnifiedContext,
        ctx: ToolExecutionContext,
        language: Language,
        now: datetime,
        audit_session: Optional[str],
    ) -> TurnResult:
        message = turn_input.message or ""
        columns: List[KanbanColumn] = []
        if intent.action_kind == "move":
            columns = await self._load_columns(ctx)

        planned = self.planner.plan(
            intent.action_kind, modules, message, context, now, language, columns=columns
        )
        if not self.tool_registry.is_mutating(planned.tool_name):
            raise AgentError(f"Planned tool '{planned.tool_name}' is not a registered mutating tool")

        summary = build_summary(planned.tool_name, planned.arguments, language)
        proposal = self.pending_store.create(ctx.user_id, planned.tool_name, planned.arguments, summary)
        if audit_session is not None:
            self._audit(
                self.session_trail.log_action,
                audit_session,
                planned.tool_name,
                planned.arguments,
                {"pending_action_id": proposal.id},
                "proposed",
            )
        return TurnResult(
            text=_text("proposal", language, summary=summary),
            language=language,
            intent=intent,
            pending_action=proposal,
            used_modules=modules,
        )

    async def _load_columns(self, ctx: ToolExecutionContext) -> List[KanbanColumn]:
        result = await self.dispatcher.dispatch("kanban_list_boards", {}, ctx)
        if not result.ok:
            return []
        boards = [KanbanBoard(**board) for board in result.data or []]
        return [column for board in boards for column in board.columns]

    async def _build_context(
        self,
        snapshot: Optional[WorkspaceSnapshot],
        modules: Sequence[AgentModule],
        ctx: ToolExecutionContext,
        now: datetime,
    ) -> UnifiedContext:
        if snapshot is None:
            snapshot = await self._gather_snapshot(modules, ctx, now)
        return unify(
            events=snapshot.events,
            cards=snapshot.cards,
            notes=snapshot.notes,
            daily_items=snapshot.daily_items,
            max_chars=self.context_max_chars,
        )

    async def _gather_snapshot(
        self,
        modules: Sequence[AgentModule],
        ctx: ToolExecutionContext,
        now: datetime,
    ) -> WorkspaceSnapshot:
        """Read the selected modules in parallel through their list tools."""
        date_from = now.date().isoformat()
        date_to = (now.date() + timedelta(days=self.context_window_days)).isoformat()
        args_by_module: Dict[str, Dict[str, Any]] = {
            "calendar": {"dateFrom": date_from, "dateTo": date_to, "limit": 100},
            "kanban": {},
            "notes": {},
            "daily": {"startDate": date_from, "days": self.context_window_days},
        }
        calls = [
            ToolCall(tool_name=_CONTEXT_TOOLS[module], args=args_by_module[module])
            for module in modules
        ]
        outcomes = await self.dispatcher.dispatch_batch(calls, ctx)

        snapshot = WorkspaceSnapshot()
        for outcome in outcomes:
            result: ToolResult = outcome["result"]
            if not result.ok:
                logger.warning(f"Context tool {outcome['tool_name']} failed: {result.error}")
                continue
            name = outcome["tool_name"]
            if name == "calendar_list_events":
                snapshot.events = [CalendarEvent(**row) for row in result.data]
            elif name == "kanban_list_cards":
                snapshot.cards = [KanbanCard(**row) for row in result.data]
            elif name == "notes_search":
                snapshot.notes = [Note(**row) for row in result.data]
            elif name == "daily_overview":
                snapshot.daily_items = [DailyItem(**row) for row in result.data["items"]]
        return snapshot

    # ------------------------------------------------------------------
    # Audit
    # ------------------------------------------------------------------

    @staticmethod
    def _audit(fn: Callable, *args) -> Any:
        """Audit writes never change the turn result; a failed write returns None."""
        try:
            return fn(*args)
        except Exception as e:
            logger.warning(f"Audit write failed ({getattr(fn, '__name__', fn)}): {e}", exc_info=True)
            return None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_RETRYABLE_ERRORS = (
    ConnectionError,
    TimeoutError,
    OSError,
)


def _is_retryable(exc: Exception) -> bool:
    """Classify an exception as transient (retryable) or permanent."""
    if isinstance(exc, AgentError):
        return exc.retryable
    if isinstance(exc, _RETRYABLE_ERRORS):
        return True
    msg = str(exc).lower()
    return any(kw in msg for kw in ("timeout", "connection", "unreachable"))


def _classify_error(exc: Exception) -> str:
    """Return a machine-readable error code for the exception."""
    if isinstance(exc, TimeoutError):
        return "timeout"
    if isinstance(exc, (ConnectionError, OSError)):
        return "connection_error"
    msg = str(exc).lower()
    if "timeout" in msg:
        return "timeout"
    if "connection" in msg or "unreachable" in msg:
        return "connection_error"
    if "json" in msg or "parse" in msg:
        return "parse_error"
    return "internal_error"
