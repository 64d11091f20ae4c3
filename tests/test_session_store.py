"""
Unit tests for the in-memory session store.
"""

import uuid

import pytest

from research_agent.core import session_store
from research_agent.core.session_store import append_message, clear_history, get_history


@pytest.fixture
def session_id() -> str:
    return f"store-{uuid.uuid4().hex}"


class TestSessionStore:
    def test_appends_in_order(self, session_id: str) -> None:
        append_message(session_id, "user", "hi")
        append_message(session_id, "assistant", None)
        assert get_history(session_id) == [
            {"role": "user", "content": "hi"},
            {"role": "assistant", "content": ""},
        ]

    def test_history_is_a_copy(self, session_id: str) -> None:
        append_message(session_id, "user", "hi")
        history = get_history(session_id)
        history[0]["content"] = "changed"
        history.append({"role": "user", "content": "extra"})
        assert get_history(session_id) == [{"role": "user", "content": "hi"}]

    def test_oldest_messages_are_dropped_past_cap(self, session_id: str, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(session_store, "SESSION_MAX_MESSAGES", 3)
        for i in range(5):
            append_message(session_id, "user", f"m{i}")
        assert [m["content"] for m in get_history(session_id)] == ["m2", "m3", "m4"]

    def test_invalid_session_id_is_ignored(self) -> None:
        append_message("", "user", "hi")
        assert get_history("") == []

    def test_clear_history(self, session_id: str) -> None:
        assert clear_history(session_id) is False
        append_message(session_id, "user", "hi")
        assert clear_history(session_id) is True
        assert get_history(session_id) == []
