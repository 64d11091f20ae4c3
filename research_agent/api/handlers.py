"""
API handlers: run the research pipeline, then the answering model, and map
results/errors to HTTP.

Responsibility: Bridge HTTP types and the agent. The agent modules stay free of
FastAPI types; conversation history is read from and written to the session store here.
"""

import asyncio
import json
import logging
from collections.abc import AsyncIterator
from typing import Any

from fastapi import HTTPException

from research_agent.agent.graph import ToolExecutionResult, execute_tool_call
from research_agent.agent.llm import complete_chat, stream_chat
from research_agent.agent.stream import DATA, QueueDataStream, RecordingDataStream
from research_agent.core.config import ANSWER_MAX_TOKENS, OPENAI_LLM_MODEL
from research_agent.core.domain import append_domain_instructions
from research_agent.core.errors import ServiceUnavailableError
from research_agent.core.session_store import append_message, get_history
from research_agent.schemas.query import QueryRequest, QueryResponse

logger = logging.getLogger(__name__)

ANSWER_SYSTEM_PROMPT = (
    "You are a helpful research assistant. Answer in the language of the user. "
    "When research results are provided, ground your answer in them and cite sources "
    "with the given markers formatted as [n](url). Never invent sources or URLs."
)


def build_conversation(history: list[dict[str, Any]], question: str) -> list[dict[str, Any]]:
    """Stored history plus the new user message."""
    conversation = [
        {"role": m.get("role"), "content": m.get("content") or ""}
        for m in history
        if m.get("role") in ("user", "assistant")
    ]
    conversation.append({"role": "user", "content": question})
    return conversation


def build_answer_messages(
    conversation: list[dict[str, Any]],
    tool_result: ToolExecutionResult,
) -> list[dict[str, Any]]:
    system = append_domain_instructions(ANSWER_SYSTEM_PROMPT)
    return [{"role": "system", "content": system}, *conversation, *tool_result.tool_call_messages]


def _tool_name(kind: str, payload: dict[str, Any]) -> str | None:
    if kind != DATA:
        return None
    return (payload.get("data") or {}).get("toolName")


def _clean_question(body: QueryRequest) -> str:
    question = body.question.strip()
    if not question:
        raise HTTPException(status_code=400, detail="question must not be blank.")
    return question


async def handle_query(body: QueryRequest) -> QueryResponse:
    """Research (unless search_mode is off), answer, and store the turn."""
    question = _clean_question(body)
    model = body.model or OPENAI_LLM_MODEL
    conversation = build_conversation(get_history(body.session_id), question)
    data_stream = RecordingDataStream()

    tool_result = await execute_tool_call(conversation, data_stream, model, body.search_mode)
    try:
        answer = await complete_chat(build_answer_messages(conversation, tool_result), model, ANSWER_MAX_TOKENS)
    except ServiceUnavailableError as e:
        raise HTTPException(status_code=503, detail=e.message) from e

    tools_used = [name for kind, payload in data_stream.events if (name := _tool_name(kind, payload))]
    append_message(body.session_id, "user", question)
    append_message(body.session_id, "assistant", answer)
    logger.info("[handlers:handle_query] OUT tools_used=%s answer_len=%d", tools_used, len(answer))
    return QueryResponse(answer=answer, tools_used=tools_used, annotation=tool_result.tool_call_data_annotation)


def _sse(event: str, data: Any) -> str:
    return f"event: {event}\ndata: {json.dumps(data, ensure_ascii=False)}\n\n"


async def stream_query(body: QueryRequest) -> AsyncIterator[str]:
    """
    Yield Server-Sent Events: tool_call (each progress write, in order),
    annotation, answer_delta, done; or error.
    """
    question = _clean_question(body)
    model = body.model or OPENAI_LLM_MODEL
    conversation = build_conversation(get_history(body.session_id), question)
    append_message(body.session_id, "user", question)

    data_stream = QueueDataStream()
    task = asyncio.create_task(execute_tool_call(conversation, data_stream, model, body.search_mode))
    task.add_done_callback(lambda _: data_stream.close())
    tools_used: list[str] = []
    try:
        async for kind, payload in data_stream:
            name = _tool_name(kind, payload)
            if name:
                tools_used.append(name)
            yield _sse("tool_call", {"kind": kind, "payload": payload})
        tool_result = await task
        if tool_result.tool_call_data_annotation is not None:
            yield _sse("annotation", tool_result.tool_call_data_annotation)

        parts: list[str] = []
        async for delta in stream_chat(build_answer_messages(conversation, tool_result), model, ANSWER_MAX_TOKENS):
            parts.append(delta)
            yield _sse("answer_delta", {"content": delta})
        answer = "".join(parts).strip()
        append_message(body.session_id, "assistant", answer)
        yield _sse("done", {"answer": answer, "tools_used": tools_used})
    except Exception as e:
        logger.exception("[handlers:stream_query] stream failed")
        yield _sse("error", {"message": str(e)})
    finally:
        if not task.done():
            task.cancel()
