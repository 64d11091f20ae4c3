"""
In-memory conversation store. Keyed by session_id; the client sends only the new
question and the server replays earlier turns to the planner and answering model.
At most SESSION_MAX_MESSAGES messages are kept per session.
"""

import logging
import threading
from typing import Any

from research_agent.core.config import SESSION_MAX_MESSAGES

logger = logging.getLogger(__name__)

# session_id -> list of {"role": "user"|"assistant", "content": str}
_sessions: dict[str, list[dict[str, Any]]] = {}
_lock = threading.Lock()


def _valid(session_id: Any) -> bool:
    return bool(session_id) and isinstance(session_id, str)


def get_history(session_id: str) -> list[dict[str, Any]]:
    """Return conversation history for the session (copies, so callers cannot mutate the store)."""
    if not _valid(session_id):
        logger.info("[session_store:get_history] IN  session_id=%r -> empty", session_id)
        return []
    with _lock:
        out = [dict(m) for m in _sessions.get(session_id) or []]
    logger.info("[session_store:get_history] IN  session_id=%s OUT messages=%d", session_id[:16], len(out))
    return out


def append_message(session_id: str, role: str, content: str) -> None:
    """Append one message; the oldest messages are dropped past the per-session cap."""
    if not _valid(session_id):
        logger.info("[session_store:append_message] skip invalid session_id=%r", session_id)
        return
    with _lock:
        history = _sessions.setdefault(session_id, [])
        history.append({"role": role, "content": content or ""})
        dropped = max(0, len(history) - SESSION_MAX_MESSAGES)
        if dropped:
            del history[:dropped]
    logger.info(
        "[session_store:append_message] session_id=%s role=%s content_len=%d dropped=%d",
        session_id[:16],
        role,
        len(content or ""),
        dropped,
    )


def clear_history(session_id: str) -> bool:
    """Drop a session's history. Returns True if the session existed."""
    with _lock:
        existed = _sessions.pop(session_id, None) is not None
    logger.info("[session_store:clear_history] session_id=%s existed=%s", (session_id or "")[:16], existed)
    return existed
