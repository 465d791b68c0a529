"""API response schemas"""
from pydantic import BaseModel
from typing import Optional, List, Dict, Any

from models.session import ActionLogEntry, SessionEvent


class ToolListResponse(BaseModel):
    tools: List[Dict[str, Any]]


class SessionEventsResponse(BaseModel):
    session_id: str
    events: List[SessionEvent]


class ActionLogResponse(BaseModel):
    session_id: str
    actions: List[ActionLogEntry]


class ErrorDetail(BaseModel):
    """Structured ``detail`` for failed turns."""
    message: str
    error_code: Optional[str] = None
    retryable: bool = False
