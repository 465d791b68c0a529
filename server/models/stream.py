"""Streaming frame models"""
from pydantic import BaseModel, Field
from typing import Annotated, Literal, Optional, Union

from models.action import ActionProposal


class NavigatePayload(BaseModel):
    path: str


class TokenFrame(BaseModel):
    type: Literal["token"] = "token"
    text: str


class ActionFrame(BaseModel):
    type: Literal["action"] = "action"
    payload: ActionProposal


class NavigateFrame(BaseModel):
    type: Literal["navigate"] = "navigate"
    payload: NavigatePayload


class DoneFrame(BaseModel):
    type: Literal["done"] = "done"


class ErrorFrame(BaseModel):
    type: Literal["error"] = "error"
    message: str
    code: Optional[str] = None


StreamFrame = Annotated[
    Union[TokenFrame, ActionFrame, NavigateFrame, DoneFrame, ErrorFrame],
    Field(discriminator="type"),
]
