"""
API route aggregator: register endpoints; no logic, only delegate to handlers.
"""

import logging

from fastapi import APIRouter, HTTPException
from fastapi.responses import StreamingResponse

from research_agent.api.handlers import handle_query, stream_query
from research_agent.core.session_store import clear_history
from research_agent.schemas.query import QueryRequest, QueryResponse

logger = logging.getLogger(__name__)
router = APIRouter()


# --- System ---

@router.get("/", tags=["system"])
def root():
    return {"status": "Research assistant backend running"}


@router.get("/health", tags=["system"])
def health():
    return {"ok": True}


# --- Query ---

@router.post(
    "/query",
    response_model=QueryResponse,
    tags=["query"],
    summary="Ask the research assistant (sync)",
    description="Plans and runs web research (unless search_mode is false), then answers with cited sources. 400 on invalid input, 503 when the model is not configured, 500 on failure.",
)
async def post_query(body: QueryRequest) -> QueryResponse:
    logger.info("[api:post_query] IN  question=%r session_id=%s search_mode=%s", body.question, body.session_id, body.search_mode)
    try:
        return await handle_query(body)
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except Exception as e:
        logger.exception("Research query failed")
        raise HTTPException(status_code=500, detail=str(e)) from e


@router.post(
    "/query/stream",
    tags=["query"],
    summary="Ask the research assistant (SSE stream)",
    description="Streams tool progress and the answer via Server-Sent Events. Events: tool_call, annotation, answer_delta, done, error.",
)
async def post_query_stream(body: QueryRequest) -> StreamingResponse:
    logger.info("[api:post_query_stream] IN  question=%r session_id=%s", body.question, body.session_id)
    if not body.question.strip():
        raise HTTPException(status_code=400, detail="question must not be blank.")
    return StreamingResponse(
        stream_query(body),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )


# --- Sessions ---

@router.delete("/sessions/{session_id}", tags=["sessions"], summary="Clear a session's conversation history")
def delete_session(session_id: str) -> dict:
    return {"cleared": clear_history(session_id)}
