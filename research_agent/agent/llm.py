"""
Agent LLM: OpenAI chat completions (async).

generate_object() is the planner's structured-output call: JSON mode plus
pydantic validation. complete_chat()/stream_chat() produce the final answer.
"""

import json
import logging
from collections.abc import AsyncIterator
from typing import Any, TypeVar

from openai import AsyncOpenAI
from pydantic import BaseModel

from research_agent.core.config import LLM_API_TIMEOUT, OPENAI_API_KEY, OPENAI_BASE_URL
from research_agent.core.errors import ServiceUnavailableError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

_client: AsyncOpenAI | None = None


def _get_client() -> AsyncOpenAI:
    global _client
    if not OPENAI_API_KEY:
        raise ServiceUnavailableError("OPENAI_API_KEY is not configured.")
    if _client is None:
        _client = AsyncOpenAI(
            api_key=OPENAI_API_KEY,
            base_url=OPENAI_BASE_URL or None,
            timeout=LLM_API_TIMEOUT,
        )
    return _client


def _content_text(content: Any) -> str:
    """Plain text of a message: str content as-is, typed parts -> joined 'text' parts."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = [p.get("text") or "" for p in content if isinstance(p, dict) and p.get("type") == "text"]
        return "\n".join(p for p in parts if p)
    return ""


def to_chat_messages(messages: list[dict[str, Any]], system: str | None = None) -> list[dict[str, str]]:
    """Convert conversation messages to OpenAI chat format. Non-chat roles (e.g. 'data') are skipped."""
    out: list[dict[str, str]] = []
    if system:
        out.append({"role": "system", "content": system})
    for m in messages:
        role = (m.get("role") or "").strip().lower()
        if role not in ("system", "user", "assistant"):
            continue
        text = _content_text(m.get("content"))
        if text.strip():
            out.append({"role": role, "content": text})
    return out


async def generate_object(
    *,
    system: str,
    messages: list[dict[str, Any]],
    schema: type[ModelT],
    model: str,
) -> ModelT:
    """
    Ask the model for a JSON object matching `schema`.
    Raises on API errors, invalid JSON (json.JSONDecodeError) and schema
    violations (pydantic.ValidationError); callers decide how to recover.
    """
    json_schema = json.dumps(schema.model_json_schema(by_alias=True))
    system_prompt = (
        f"{system.rstrip()}\n\n"
        "Respond with a single JSON object that conforms to this JSON Schema:\n"
        f"{json_schema}"
    )
    chat_messages = to_chat_messages(messages, system=system_prompt)
    logger.info("[llm:generate_object] IN  model=%s schema=%s messages=%d", model, schema.__name__, len(chat_messages))
    response = await _get_client().chat.completions.create(
        model=model,
        messages=chat_messages,
        response_format={"type": "json_object"},
    )
    msg = response.choices[0].message if response.choices else None
    raw = (getattr(msg, "content", None) or "").strip()
    logger.debug("[llm:generate_object] raw=%r", raw[:1000])
    obj = schema.model_validate(json.loads(raw))
    logger.info("[llm:generate_object] OUT %s", schema.__name__)
    return obj


async def complete_chat(messages: list[dict[str, Any]], model: str, max_tokens: int = 1024) -> str:
    """Non-streaming chat completion. Returns generated text."""
    chat_messages = to_chat_messages(messages)
    logger.info("[llm:complete_chat] IN  model=%s messages=%d", model, len(chat_messages))
    response = await _get_client().chat.completions.create(
        model=model,
        messages=chat_messages,
        max_tokens=max_tokens,
    )
    msg = response.choices[0].message if response.choices else None
    out = (getattr(msg, "content", None) or "").strip()
    logger.info("[llm:complete_chat] OUT response_len=%d", len(out))
    return out


async def stream_chat(messages: list[dict[str, Any]], model: str, max_tokens: int = 1024) -> AsyncIterator[str]:
    """Stream a chat completion, yielding content deltas."""
    chat_messages = to_chat_messages(messages)
    logger.info("[llm:stream_chat] IN  model=%s messages=%d", model, len(chat_messages))
    stream = await _get_client().chat.completions.create(
        model=model,
        messages=chat_messages,
        max_tokens=max_tokens,
        stream=True,
    )
    total = 0
    async for chunk in stream:
        if not chunk.choices:
            continue
        delta = getattr(chunk.choices[0].delta, "content", None)
        if delta:
            total += len(delta)
            yield delta
    logger.info("[llm:stream_chat] OUT streamed_len=%d", total)
