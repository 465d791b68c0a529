"""Session and audit trail models"""
from pydantic import BaseModel
from typing import Optional, Any, Literal
from datetime import datetime

SessionEventType = Literal["created", "updated", "deleted", "linked"]


class SessionEvent(BaseModel):
    """Something that happened to a workspace item during a session."""
    type: SessionEventType
    item_type: str
    item_id: str
    timestamp: datetime
    detail: Optional[str] = None


class SessionContext(BaseModel):
    session_id: str
    user_id: str
    events: list[SessionEvent] = []
    started_at: datetime


class ActionLogEntry(BaseModel):
    """Audit record of a tool call made (or proposed) on behalf of a session."""
    id: str
    session_id: str
    tool_name: str
    args: dict[str, Any] = {}
    result: dict[str, Any] = {}
    reason: Optional[str] = None
    created_at: datetime
