"""Tests for the streaming frame builder and SSE encoding."""
import json
from datetime import datetime, timedelta, timezone

import pytest

from core.streaming import SSE_HEADERS, build_frames, encode_frame, error_frames, iter_sse, text_chunks
from models.action import ActionProposal
from models.intent import Intent
from models.message import TurnResult
from models.stream import DoneFrame, TokenFrame


def _result(**overrides):
    defaults = dict(text="hello", language="en", intent=Intent(type="query", confidence=0.72))
    defaults.update(overrides)
    return TurnResult(**defaults)


def _proposal():
    now = datetime(2026, 3, 10, tzinfo=timezone.utc)
    return ActionProposal(
        id="a1",
        tool_name="notes_create",
        arguments={"title": "Plan"},
        summary="Please confirm",
        created_at=now,
        expires_at=now + timedelta(minutes=15),
    )


class TestTextChunks:
    def test_fixed_size_chunks(self):
        chunks = text_chunks("hello world this is a longer message", chunk_size=10)
        assert [c.text for c in chunks] == ["hello worl", "d this is ", "a longer m", "essage"]

    def test_chunks_reassemble(self):
        text = "x" * 100
        assert "".join(c.text for c in text_chunks(text)) == text
        assert len(text_chunks(text)) == 3  # default size 36

    @pytest.mark.parametrize("text", ["", "   "])
    def test_blank_text_is_one_empty_token(self, text):
        assert text_chunks(text) == [TokenFrame(text="")]

    def test_invalid_chunk_size(self):
        with pytest.raises(ValueError):
            text_chunks("abc", chunk_size=0)


class TestBuildFrames:
    def test_plain_answer(self):
        frames = build_frames(_result())
        assert [f.type for f in frames] == ["token", "done"]

    def test_order_tokens_action_navigate_done(self):
        frames = build_frames(_result(
            text="a" * 40,
            pending_action=_proposal(),
            navigate_to="/notes",
        ))
        assert [f.type for f in frames] == ["token", "token", "action", "navigate", "done"]
        assert frames[2].payload.id == "a1"
        assert frames[3].payload.path == "/notes"

    def test_error_result_is_single_error_frame(self):
        frames = build_frames(_result(
            text="Requested action was not found or has expired.",
            intent=Intent(type="clarify", confidence=0.6),
            status="error",
            error_code="action_not_found",
        ))
        assert len(frames) == 1
        assert frames[0].type == "error"
        assert frames[0].code == "action_not_found"

    def test_error_frames(self):
        frames = error_frames("boom", "timeout")
        assert [f.type for f in frames] == ["error"]
        assert frames[0].message == "boom"


class TestEncoding:
    def test_encode_frame(self):
        encoded = encode_frame(TokenFrame(text="hi"))
        event_line, data_line, blank, end = encoded.split("\n")
        assert event_line == "event: token"
        assert json.loads(data_line[len("data: "):]) == {"type": "token", "text": "hi"}
        assert blank == "" and end == ""

    def test_action_payload_is_json(self):
        encoded = encode_frame(build_frames(_result(pending_action=_proposal()))[1])
        data = json.loads(encoded.split("\n")[1][len("data: "):])
        assert data["type"] == "action"
        assert data["payload"]["tool_name"] == "notes_create"
        assert "user_id" not in data["payload"]

    @pytest.mark.asyncio
    async def test_iter_sse(self):
        chunks = [chunk async for chunk in iter_sse([TokenFrame(text="a"), DoneFrame()])]
        assert chunks[-1] == 'event: done\ndata: {"type":"done"}\n\n'

    def test_headers(self):
        assert SSE_HEADERS["Cache-Control"] == "no-cache, no-transform"
        assert SSE_HEADERS["X-Accel-Buffering"] == "no"
