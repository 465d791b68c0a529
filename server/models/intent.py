"""Intent data models"""
from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Literal, Optional

IntentType = Literal["query", "action", "navigate", "clarify", "unknown"]
ActionKind = Literal["create", "update", "delete", "move", "generate"]
AgentModule = Literal["calendar", "kanban", "notes", "daily"]
Language = Literal["en", "ru"]

ALL_MODULES: tuple = ("calendar", "kanban", "notes", "daily")


class Intent(BaseModel):
    """Classification result for a single user message.

    Tagged by ``type``: ``action_kind`` only exists on action intents,
    ``navigate_to`` only on navigate intents, and every action intent
    requires confirmation.
    """
    model_config = ConfigDict(frozen=True)

    type: IntentType
    action_kind: Optional[ActionKind] = None
    confidence: float = Field(ge=0.0, le=1.0)
    navigate_to: Optional[str] = None
    requires_confirmation: bool = False

    @model_validator(mode="after")
    def _check_variant(self) -> "Intent":
        if self.type == "action":
            if self.action_kind is None:
                raise ValueError("action intents must carry an action_kind")
            if not self.requires_confirmation:
                raise ValueError("action intents always require confirmation")
        else:
            if self.action_kind is not None:
                raise ValueError(f"action_kind is not allowed on '{self.type}' intents")
            if self.requires_confirmation:
                raise ValueError(f"'{self.type}' intents never require confirmation")

        if self.type == "navigate" and not self.navigate_to:
            raise ValueError("navigate intents must carry a route")
        if self.type != "navigate" and self.navigate_to is not None:
            raise ValueError(f"navigate_to is not allowed on '{self.type}' intents")
        return self
