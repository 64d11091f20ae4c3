"""Schemas for the query endpoints."""

from typing import Any

from pydantic import BaseModel, Field


class QueryRequest(BaseModel):
    """Request body for POST /query and POST /query/stream. History is stored server-side by session_id."""

    question: str = Field(..., min_length=1, description="User message for the research assistant.")
    session_id: str = Field(..., min_length=1, description="Session ID; conversation history is stored on the server for this session.")
    model: str | None = Field(None, description="Model identifier for planning and answering. Defaults to OPENAI_LLM_MODEL.")
    search_mode: bool = Field(True, description="When false, the assistant answers without external research.")


class QueryResponse(BaseModel):
    """Response for POST /query."""

    answer: str = Field(..., description="Final answer from the assistant.")
    tools_used: list[str] = Field(default_factory=list, description="Research tools called, in call order (e.g. search, retrieve).")
    annotation: dict[str, Any] | None = Field(
        None,
        description="Side-channel payload: plan, executed steps and sources (or the fallback search result).",
    )
