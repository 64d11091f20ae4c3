"""
Schemas for research tools: validated parameters, results, executed steps and sources.

Parameter models are what the planner's free-form parameters must satisfy before
a tool runs. Result models give each tool's payload a known shape so the
summarizer never has to guess (search/retrieve -> SearchResults, videoSearch -> VideoResults).
"""

from dataclasses import dataclass, field
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from research_agent.core.domain import normalise_domain_list

ToolName = Literal["search", "retrieve", "videoSearch"]
TOOL_NAMES: tuple[str, ...] = ("search", "retrieve", "videoSearch")

SEARCH_DEPTHS = frozenset({"basic", "advanced"})


# --- Parameters ---


class SearchParameters(BaseModel):
    """Parameters accepted by the web search tool."""

    model_config = ConfigDict(str_strip_whitespace=True)

    query: str = Field(..., min_length=1, description="Search query.")
    max_results: int | None = Field(None, ge=1)
    search_depth: Literal["basic", "advanced"] | None = None
    include_domains: list[str] | None = None
    exclude_domains: list[str] | None = None

    @field_validator("search_depth", mode="before")
    @classmethod
    def _unknown_depth_is_absent(cls, value: Any) -> Any:
        if isinstance(value, str) and value.strip().lower() in SEARCH_DEPTHS:
            return value.strip().lower()
        return None

    @field_validator("include_domains", "exclude_domains", mode="before")
    @classmethod
    def _normalise_domains(cls, value: Any) -> Any:
        if value is None:
            return None
        return normalise_domain_list(value) or None


class RetrieveParameters(BaseModel):
    """Parameters accepted by the URL retrieval tool."""

    model_config = ConfigDict(str_strip_whitespace=True)

    url: str = Field(..., min_length=1, description="URL shared by the user.")

    @field_validator("url")
    @classmethod
    def _ensure_scheme(cls, value: str) -> str:
        if "://" not in value:
            return "https://" + value
        return value


class VideoSearchParameters(BaseModel):
    """Parameters accepted by the video search tool."""

    model_config = ConfigDict(str_strip_whitespace=True)

    query: str = Field(..., min_length=1)
    max_results: int | None = Field(None, ge=1)


ToolParameters = SearchParameters | RetrieveParameters | VideoSearchParameters


@dataclass(frozen=True)
class ParsedInvocation:
    """A planner invocation whose parameters passed its tool's schema."""

    id: str
    tool: ToolName
    description: str
    parameters: ToolParameters

    def parameters_dict(self) -> dict[str, Any]:
        return self.parameters.model_dump(exclude_none=True)


# --- Results ---


class SearchResultItem(BaseModel):
    title: str = ""
    url: str
    content: str = ""


class SearchResults(BaseModel):
    """Result of search and retrieve."""

    query: str = ""
    results: list[SearchResultItem] = Field(default_factory=list)


class VideoItem(BaseModel):
    title: str = ""
    link: str
    snippet: str | None = None


class VideoResults(BaseModel):
    """Result of videoSearch."""

    query: str = ""
    videos: list[VideoItem] = Field(default_factory=list)


ToolResult = SearchResults | VideoResults


# --- Execution records ---


@dataclass(frozen=True)
class ExecutedStep:
    """Outcome of running one invocation: result on success, error message on failure."""

    id: str
    tool: ToolName
    description: str
    parameters: dict[str, Any]
    result: ToolResult | None = None
    error: str | None = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "tool": self.tool,
            "description": self.description,
            "parameters": self.parameters,
            "result": self.result.model_dump() if self.result is not None else None,
        }
        if self.error is not None:
            payload["error"] = self.error
        return payload


@dataclass(frozen=True)
class SourceReference:
    marker: str
    url: str
    title: str | None
    step_id: str

    def to_payload(self) -> dict[str, Any]:
        return {"marker": self.marker, "url": self.url, "title": self.title, "stepId": self.step_id}


@dataclass(frozen=True)
class ExecutionSummary:
    summary: str
    sources: list[SourceReference] = field(default_factory=list)
