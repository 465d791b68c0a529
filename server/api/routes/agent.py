"""Agent API routes: turns, streaming, tool discovery and the audit trail."""
from datetime import datetime, timezone
from fastapi import APIRouter, HTTPException, Depends, Query, status
from fastapi.responses import StreamingResponse
from typing import Optional
import logging

from api.middleware.auth_middleware import get_current_user
from api.schemas.request_schemas import AgentTurnRequest, ToolExecuteRequest
from api.schemas.response_schemas import (
    ActionLogResponse,
    ErrorDetail,
    SessionEventsResponse,
    ToolListResponse,
)
from config.settings import settings
from core.agent import _classify_error, _is_retryable
from core.dependencies import get_agent, get_dispatcher, get_session_trail, get_tool_registry
from core.streaming import SSE_HEADERS, SSE_MEDIA_TYPE, build_frames, error_frames, iter_sse
from models.intent import ALL_MODULES
from models.message import TurnResult
from models.session import SessionContext
from tools.base import ConfirmationRequiredError, ToolExecutionContext, ToolNotFoundError, ToolResult

logger = logging.getLogger(__name__)
router = APIRouter()


# ---------------------------------------------------------------------------
# Turns
# ---------------------------------------------------------------------------

@router.post("/turn", response_model=TurnResult)
async def run_turn(
    request: AgentTurnRequest,
    current_user: dict = Depends(get_current_user),
):
    """Run one conversational turn and return the whole result as JSON."""
    try:
        return await get_agent().run_turn(request.to_turn_input(), current_user["id"])
    except Exception as e:
        error_code = _classify_error(e)
        retryable = _is_retryable(e)
        logger.error(f"Error running turn (code={error_code}, retryable={retryable}): {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE if retryable else status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=ErrorDetail(
                message="An internal error occurred. Please try again later.",
                error_code=error_code,
                retryable=retryable,
            ).model_dump(),
        )


@router.post("/stream")
async def stream_turn(
    request: AgentTurnRequest,
    current_user: dict = Depends(get_current_user),
):
    """
    Run one turn and stream it as server-sent events.

    Failures never surface as an HTTP error once the turn has started:
    they are delivered as a single terminal ``error`` frame.
    """
    try:
        result = await get_agent().run_turn(request.to_turn_input(), current_user["id"])
        frames = build_frames(result, chunk_size=settings.STREAM_CHUNK_SIZE)
    except Exception as e:
        error_code = _classify_error(e)
        logger.error(f"Error streaming turn (code={error_code}): {e}", exc_info=True)
        frames = error_frames("Something went wrong processing your request. Please try again.", error_code)

    return StreamingResponse(iter_sse(frames), media_type=SSE_MEDIA_TYPE, headers=SSE_HEADERS)


# ---------------------------------------------------------------------------
# Tool discovery and direct execution
# ---------------------------------------------------------------------------

@router.get("/tools", response_model=ToolListResponse)
async def list_tools(
    module: Optional[str] = Query(None),
    current_user: dict = Depends(get_current_user),
):
    """
    List available tools with their JSON Schema definitions.

    This allows clients to discover capabilities at runtime.
    """
    if module is not None and module not in ALL_MODULES:
        raise HTTPException(status_code=400, detail=f"Unknown module: {module}")
    registry = get_tool_registry()
    return ToolListResponse(tools=registry.get_json_schemas([module] if module else []))


@router.post("/tools/execute", response_model=ToolResult)
async def execute_tool(
    request: ToolExecuteRequest,
    current_user: dict = Depends(get_current_user),
):
    """Execute one tool directly. Mutating tools require ``confirm_mutating``."""
    ctx = ToolExecutionContext(
        user_id=current_user["id"],
        now_iso=datetime.now(timezone.utc).isoformat(),
    )
    try:
        return await get_dispatcher().execute_direct(
            request.tool_name,
            request.args,
            ctx,
            confirm_mutating=request.confirm_mutating,
        )
    except ToolNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ConfirmationRequiredError as e:
        logger.info(f"Rejected unconfirmed call to {request.tool_name}")
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


# ---------------------------------------------------------------------------
# Session audit trail
# ---------------------------------------------------------------------------

def _owned_session(session_id: str, current_user: dict) -> SessionContext:
    """The session if the caller owns it; unknown and foreign sessions are both 404."""
    session = get_session_trail().get_session(session_id)
    if session is None or session.user_id != current_user["id"]:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    return session


@router.get("/sessions/{session_id}/events", response_model=SessionEventsResponse)
async def session_events(session_id: str, current_user: dict = Depends(get_current_user)):
    session = _owned_session(session_id, current_user)
    return SessionEventsResponse(session_id=session.session_id, events=session.events)


@router.get("/sessions/{session_id}/actions", response_model=ActionLogResponse)
async def session_actions(session_id: str, current_user: dict = Depends(get_current_user)):
    session = _owned_session(session_id, current_user)
    return ActionLogResponse(
        session_id=session.session_id,
        actions=get_session_trail().get_action_log(session.session_id),
    )
