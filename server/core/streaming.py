"""Streaming encoder: TurnResult -> ordered frames -> server-sent event text."""
from typing import AsyncIterator, Iterable, List, Optional
import logging

from models.message import TurnResult
from models.stream import (
    ActionFrame,
    DoneFrame,
    ErrorFrame,
    NavigateFrame,
    NavigatePayload,
    StreamFrame,
    TokenFrame,
)

logger = logging.getLogger(__name__)

SSE_MEDIA_TYPE = "text/event-stream"

SSE_HEADERS = {
    "Cache-Control": "no-cache, no-transform",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def text_chunks(text: str, chunk_size: int = 36) -> List[TokenFrame]:
    """Fixed-size token frames; blank text still yields one (empty) frame."""
    if chunk_size < 1:
        raise ValueError("chunk_size must be a positive integer")
    if not text.strip():
        return [TokenFrame(text="")]
    return [TokenFrame(text=text[i:i + chunk_size]) for i in range(0, len(text), chunk_size)]


def error_frames(message: str, code: Optional[str] = None) -> List[StreamFrame]:
    return [ErrorFrame(message=message, code=code)]


def build_frames(result: TurnResult, chunk_size: int = 36) -> List[StreamFrame]:
    """Tokens, then action, then navigate, then done. Error results are a single error frame."""
    if result.status == "error":
        return error_frames(result.text, result.error_code)

    frames: List[StreamFrame] = list(text_chunks(result.text, chunk_size))
    if result.pending_action is not None:
        frames.append(ActionFrame(payload=result.pending_action))
    if result.navigate_to:
        frames.append(NavigateFrame(payload=NavigatePayload(path=result.navigate_to)))
    frames.append(DoneFrame())
    return frames


def encode_frame(frame: StreamFrame) -> str:
    return f"event: {frame.type}\ndata: {frame.model_dump_json()}\n\n"


async def iter_sse(frames: Iterable[StreamFrame]) -> AsyncIterator[str]:
    for frame in frames:
        yield encode_frame(frame)
