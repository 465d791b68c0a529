"""
Shared singleton dependencies for the application.

Stores, the tool registry and the agent are created once at startup by
init_dependencies() and dropped by shutdown_dependencies(), so tests can
rebuild a clean process state between cases.
"""
from datetime import timedelta
from typing import Optional
import logging

from config.settings import settings
from core.agent import WorkspaceAgent
from core.pending_actions import PendingActionStore
from core.session_context import SessionTrail
from database.client import Workspace, init_workspace, reset_workspace
from tools.base import ToolRegistry
from tools.catalog import build_registry
from tools.dispatcher import ToolDispatcher

logger = logging.getLogger(__name__)

# Module-level singletons, initialized once via init_dependencies()
_workspace: Optional[Workspace] = None
_tool_registry: Optional[ToolRegistry] = None
_dispatcher: Optional[ToolDispatcher] = None
_pending_store: Optional[PendingActionStore] = None
_session_trail: Optional[SessionTrail] = None
_agent: Optional[WorkspaceAgent] = None


def init_dependencies() -> None:
    """
    Initialize all shared singletons. Called once at application startup.
    """
    global _workspace, _tool_registry, _dispatcher, _pending_store, _session_trail, _agent

    logger.info("Initializing shared dependencies...")

    _workspace = init_workspace()

    # Tool registry: every tool registered once, then frozen
    _tool_registry = build_registry(_workspace)
    _dispatcher = ToolDispatcher(_tool_registry, concurrency=settings.TOOL_BATCH_CONCURRENCY)

    _pending_store = PendingActionStore(ttl=timedelta(minutes=settings.PENDING_ACTION_TTL_MINUTES))
    _session_trail = SessionTrail(
        max_events=settings.SESSION_MAX_EVENTS,
        max_log_entries=settings.ACTION_LOG_MAX_ENTRIES,
        max_sessions=settings.SESSION_MAX_COUNT,
    )

    _agent = WorkspaceAgent(
        tool_registry=_tool_registry,
        dispatcher=_dispatcher,
        pending_store=_pending_store,
        session_trail=_session_trail,
        context_max_chars=settings.CONTEXT_MAX_CHARS,
        context_window_days=settings.CONTEXT_WINDOW_DAYS,
    )

    logger.info(
        f"Dependencies initialized: {len(_tool_registry.list_tools())} tools registered"
    )


async def shutdown_dependencies() -> None:
    """Clean up process-local state on shutdown."""
    global _workspace, _tool_registry, _dispatcher, _pending_store, _session_trail, _agent
    if _pending_store is not None:
        _pending_store.clear()
    if _session_trail is not None:
        _session_trail.clear_all()
    reset_workspace()
    _workspace = _tool_registry = _dispatcher = _pending_store = _session_trail = _agent = None
    logger.info("Shared dependencies released")


def _require(value, name: str):
    if value is None:
        raise RuntimeError(f"Dependencies not initialized ({name}). Call init_dependencies() first.")
    return value


def get_workspace() -> Workspace:
    return _require(_workspace, "workspace")


def get_tool_registry() -> ToolRegistry:
    return _require(_tool_registry, "tool registry")


def get_dispatcher() -> ToolDispatcher:
    return _require(_dispatcher, "dispatcher")


def get_pending_store() -> PendingActionStore:
    return _require(_pending_store, "pending action store")


def get_session_trail() -> SessionTrail:
    return _require(_session_trail, "session trail")


def get_agent() -> WorkspaceAgent:
    return _require(_agent, "agent")
