"""
API tests: POST /query, POST /query/stream and DELETE /sessions/{id} with the
pipeline and the answering model mocked.
"""

import json
import uuid
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from research_agent.agent.graph import ToolExecutionResult
from research_agent.core.config import OPENAI_LLM_MODEL
from research_agent.core.errors import ServiceUnavailableError
from research_agent.core.session_store import get_history
from research_agent.main import app

ANNOTATION = {"role": "data", "content": {"type": "tool_call", "data": {"toolCallId": "agent_pipeline"}}}
TOOL_MESSAGES = [
    {"role": "assistant", "content": "overview"},
    {"role": "assistant", "content": "summary"},
    {"role": "user", "content": "Cite [1]."},
]


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


@pytest.fixture
def session_id() -> str:
    return f"test-{uuid.uuid4().hex}"


async def _fake_execute(messages, data_stream, model, search_mode):
    data_stream.write_data({"type": "tool_call", "data": {"state": "call", "toolCallId": "call_1", "toolName": "search"}})
    data_stream.write_message_annotation(
        {"type": "tool_call", "data": {"state": "result", "toolCallId": "call_1", "toolName": "search"}}
    )
    return ToolExecutionResult(tool_call_data_annotation=ANNOTATION, tool_call_messages=list(TOOL_MESSAGES))


def _parse_sse(body: str) -> list[tuple[str, dict]]:
    events = []
    for block in body.strip().split("\n\n"):
        lines = dict(line.split(": ", 1) for line in block.splitlines())
        events.append((lines["event"], json.loads(lines["data"])))
    return events


class TestSystemRoutes:
    def test_root_and_health(self, client: TestClient) -> None:
        assert client.get("/").status_code == 200
        assert client.get("/health").json() == {"ok": True}


class TestQuery:
    """Tests for POST /query."""

    def test_returns_answer_tools_and_annotation(self, client: TestClient, session_id: str) -> None:
        with (
            patch("research_agent.api.handlers.execute_tool_call", new=_fake_execute),
            patch("research_agent.api.handlers.complete_chat", new=AsyncMock(return_value="Solar is cheap [1](https://x).")) as mock_chat,
        ):
            response = client.post("/query", json={"question": "  Solar prices?  ", "session_id": session_id})

        assert response.status_code == 200
        body = response.json()
        assert body == {
            "answer": "Solar is cheap [1](https://x).",
            "tools_used": ["search"],
            "annotation": ANNOTATION,
        }
        messages, model, _ = mock_chat.await_args.args
        assert model == OPENAI_LLM_MODEL
        assert messages[0]["role"] == "system"
        assert messages[1] == {"role": "user", "content": "Solar prices?"}
        assert messages[2:] == TOOL_MESSAGES

    def test_history_is_replayed_on_next_turn(self, client: TestClient, session_id: str) -> None:
        mock_execute = AsyncMock(return_value=ToolExecutionResult.empty())
        with (
            patch("research_agent.api.handlers.execute_tool_call", new=mock_execute),
            patch("research_agent.api.handlers.complete_chat", new=AsyncMock(side_effect=["first answer", "second answer"])),
        ):
            client.post("/query", json={"question": "first", "session_id": session_id})
            client.post("/query", json={"question": "second", "session_id": session_id, "model": "other-model"})

        conversation, _, model, _ = mock_execute.await_args.args
        assert model == "other-model"
        assert conversation == [
            {"role": "user", "content": "first"},
            {"role": "assistant", "content": "first answer"},
            {"role": "user", "content": "second"},
        ]
        assert len(get_history(session_id)) == 4

    def test_search_mode_is_passed_through(self, client: TestClient, session_id: str) -> None:
        mock_execute = AsyncMock(return_value=ToolExecutionResult.empty())
        with (
            patch("research_agent.api.handlers.execute_tool_call", new=mock_execute),
            patch("research_agent.api.handlers.complete_chat", new=AsyncMock(return_value="ok")),
        ):
            response = client.post("/query", json={"question": "hi", "session_id": session_id, "search_mode": False})
        assert response.json()["tools_used"] == []
        assert response.json()["annotation"] is None
        assert mock_execute.await_args.args[3] is False

    def test_blank_question_is_400(self, client: TestClient, session_id: str) -> None:
        response = client.post("/query", json={"question": "   ", "session_id": session_id})
        assert response.status_code == 400

    def test_missing_fields_are_422(self, client: TestClient) -> None:
        assert client.post("/query", json={"session_id": "s"}).status_code == 422
        assert client.post("/query", json={"question": "", "session_id": "s"}).status_code == 422

    def test_unconfigured_model_is_503(self, client: TestClient, session_id: str) -> None:
        with (
            patch("research_agent.api.handlers.execute_tool_call", new=AsyncMock(return_value=ToolExecutionResult.empty())),
            patch(
                "research_agent.api.handlers.complete_chat",
                new=AsyncMock(side_effect=ServiceUnavailableError("OPENAI_API_KEY is not set.")),
            ),
        ):
            response = client.post("/query", json={"question": "hi", "session_id": session_id})
        assert response.status_code == 503
        assert response.json()["detail"] == "OPENAI_API_KEY is not set."
        assert get_history(session_id) == []

    def test_unexpected_error_is_500(self, client: TestClient, session_id: str) -> None:
        with patch("research_agent.api.handlers.execute_tool_call", new=AsyncMock(side_effect=RuntimeError("boom"))):
            response = client.post("/query", json={"question": "hi", "session_id": session_id})
        assert response.status_code == 500


class TestQueryStream:
    """Tests for POST /query/stream."""

    def test_streams_progress_annotation_and_answer(self, client: TestClient, session_id: str) -> None:
        async def fake_stream(messages, model, max_tokens):
            for delta in ("Solar ", "is cheap."):
                yield delta

        with (
            patch("research_agent.api.handlers.execute_tool_call", new=_fake_execute),
            patch("research_agent.api.handlers.stream_chat", new=fake_stream),
        ):
            response = client.post("/query/stream", json={"question": "Solar prices?", "session_id": session_id})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        events = _parse_sse(response.text)
        assert [name for name, _ in events] == [
            "tool_call",
            "tool_call",
            "annotation",
            "answer_delta",
            "answer_delta",
            "done",
        ]
        assert events[0][1]["kind"] == "data"
        assert events[1][1]["kind"] == "message_annotation"
        assert events[2][1] == ANNOTATION
        assert events[-1][1] == {"answer": "Solar is cheap.", "tools_used": ["search"]}
        assert get_history(session_id)[-1] == {"role": "assistant", "content": "Solar is cheap."}

    def test_pipeline_failure_emits_error_event(self, client: TestClient, session_id: str) -> None:
        with patch("research_agent.api.handlers.execute_tool_call", new=AsyncMock(side_effect=RuntimeError("boom"))):
            response = client.post("/query/stream", json={"question": "hi", "session_id": session_id})
        assert _parse_sse(response.text) == [("error", {"message": "boom"})]

    def test_blank_question_is_400(self, client: TestClient, session_id: str) -> None:
        response = client.post("/query/stream", json={"question": "  ", "session_id": session_id})
        assert response.status_code == 400


class TestSessions:
    def test_delete_session(self, client: TestClient, session_id: str) -> None:
        with (
            patch("research_agent.api.handlers.execute_tool_call", new=AsyncMock(return_value=ToolExecutionResult.empty())),
            patch("research_agent.api.handlers.complete_chat", new=AsyncMock(return_value="ok")),
        ):
            client.post("/query", json={"question": "hi", "session_id": session_id})

        assert client.delete(f"/sessions/{session_id}").json() == {"cleared": True}
        assert get_history(session_id) == []
        assert client.delete(f"/sessions/{session_id}").json() == {"cleared": False}
