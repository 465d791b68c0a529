"""Action proposal and tool call data models"""
from pydantic import BaseModel, Field
from typing import Optional, Any
from datetime import datetime
from uuid import uuid4


class ActionProposal(BaseModel):
    """A mutating tool call waiting for the user to confirm it.

    This is the client-safe shape: the owning user id lives only on
    ``StoredAction`` inside the pending action store.
    """
    id: str
    tool_name: str
    arguments: dict[str, Any] = {}
    summary: str
    created_at: datetime
    expires_at: datetime


class StoredAction(ActionProposal):
    """Proposal as kept by the store, together with its owner."""
    user_id: str

    def to_proposal(self) -> ActionProposal:
        return ActionProposal(**self.model_dump(exclude={"user_id"}))


class ActionDecision(BaseModel):
    """User's answer to a previously proposed action."""
    action_id: str = Field(..., min_length=1)
    approved: bool


class ToolCall(BaseModel):
    """One entry of a parallel tool batch."""
    tool_call_id: str = ""
    tool_name: str
    args: dict[str, Any] = {}

    def __init__(self, **data):
        if 'tool_call_id' not in data or not data['tool_call_id']:
            data['tool_call_id'] = str(uuid4())
        super().__init__(**data)


class PlannedAction(BaseModel):
    """Mutating call resolved from an action intent, before it is stored."""
    tool_name: str
    arguments: dict[str, Any] = {}
    target_title: Optional[str] = None
