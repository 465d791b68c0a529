"""Conversation turn data models"""
from pydantic import BaseModel, Field, model_validator
from typing import Optional, Literal

from models.action import ActionDecision, ActionProposal
from models.intent import Intent, AgentModule, Language
from models.workspace import WorkspaceSnapshot


class ChatMessage(BaseModel):
    """Message from the conversation history"""
    role: Literal["system", "user", "assistant", "tool"]
    content: str
    name: Optional[str] = None
    tool_call_id: Optional[str] = None


class TurnInput(BaseModel):
    """Everything the orchestrator needs for one turn."""
    message: Optional[str] = None
    session_id: str = Field(..., min_length=1)
    history: list[ChatMessage] = []
    action_decision: Optional[ActionDecision] = None
    snapshot: Optional[WorkspaceSnapshot] = None

    @model_validator(mode="after")
    def _require_message_or_decision(self) -> "TurnInput":
        if self.message is None and self.action_decision is None:
            raise ValueError("Either message or action_decision is required")
        if not self.session_id.strip():
            raise ValueError("session_id must not be blank")
        return self


class TurnResult(BaseModel):
    """Outcome of one turn, ready for the JSON or streaming transport."""
    text: str
    language: Language
    intent: Intent
    pending_action: Optional[ActionProposal] = None
    navigate_to: Optional[str] = None
    used_modules: list[AgentModule] = []
    status: Literal["ok", "error"] = "ok"
    error_code: Optional[str] = None
