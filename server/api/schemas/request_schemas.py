"""API request schemas"""
from pydantic import BaseModel, Field, model_validator
from typing import Optional, List, Dict, Any

from models.action import ActionDecision
from models.message import ChatMessage, TurnInput
from models.workspace import WorkspaceSnapshot


class AgentTurnRequest(BaseModel):
    """Body of POST /agent/turn and POST /agent/stream."""
    message: Optional[str] = Field(None, max_length=10000)
    session_id: str = Field(..., min_length=1, max_length=256)
    history: List[ChatMessage] = Field(default_factory=list, max_length=100)
    action_decision: Optional[ActionDecision] = None
    snapshot: Optional[WorkspaceSnapshot] = None

    @model_validator(mode="after")
    def _require_message_or_decision(self) -> "AgentTurnRequest":
        if self.message is None and self.action_decision is None:
            raise ValueError("Either message or action_decision is required")
        if not self.session_id.strip():
            raise ValueError("session_id must not be blank")
        return self

    def to_turn_input(self) -> TurnInput:
        return TurnInput(**self.model_dump())


class ToolExecuteRequest(BaseModel):
    """Body of POST /agent/tools/execute."""
    tool_name: str = Field(..., min_length=1)
    args: Dict[str, Any] = Field(default_factory=dict)
    confirm_mutating: bool = False
