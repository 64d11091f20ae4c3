"""
LangGraph research pipeline: planning → executing → summarizing, with a
single-search fallback.

Planning errors, plans with no runnable invocation and unexpected execution
errors all route to fallback_search. A plan that deliberately asks for no tools
also ends in the fallback search. The graph is compiled per request so the
request's data stream is bound to the nodes.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Literal, TypedDict

from langgraph.graph import END, StateGraph

from research_agent.agent.execution import execute_planned_tools, run_invocation
from research_agent.agent.localization import detect_language, get_localization
from research_agent.agent.planner import build_tool_plan, get_last_user_text
from research_agent.agent.responder import (
    build_pipeline_annotation,
    build_responder_messages,
    resolve_final_instruction,
)
from research_agent.agent.stream import DataStreamWriter
from research_agent.agent.summary import build_execution_summary
from research_agent.schemas.plan import ToolPlan
from research_agent.schemas.tools import ExecutedStep, ParsedInvocation, SearchParameters

logger = logging.getLogger(__name__)

FALLBACK_STEP_ID = "fallback-search"


@dataclass
class ToolExecutionResult:
    tool_call_data_annotation: dict[str, Any] | None = None
    tool_call_messages: list[dict[str, Any]] = field(default_factory=list)

    @classmethod
    def empty(cls) -> "ToolExecutionResult":
        return cls(tool_call_data_annotation=None, tool_call_messages=[])


class ResearchState(TypedDict):
    messages: list  # conversation, list of {"role": ..., "content": str | list of parts}
    model: str
    language: str
    plan: ToolPlan | None
    steps: list[ExecutedStep] | None
    result: ToolExecutionResult | None


def _route_after_planning(state: ResearchState) -> Literal["executing", "fallback_search"]:
    next_node = "executing" if state.get("plan") is not None else "fallback_search"
    logger.info("[graph:route_after_planning] -> %s", next_node)
    return next_node


def _route_after_executing(state: ResearchState) -> Literal["summarizing", "fallback_search"]:
    next_node = "summarizing" if state.get("steps") else "fallback_search"
    logger.info("[graph:route_after_executing] steps=%d -> %s", len(state.get("steps") or []), next_node)
    return next_node


def _summarizing(state: ResearchState) -> dict:
    """Summarize executed steps and assemble the responder messages."""
    plan = state["plan"]
    steps = state.get("steps") or []
    loc = get_localization(state.get("language"))
    summary = build_execution_summary(steps, loc)
    instruction = resolve_final_instruction(plan, loc)
    messages = build_responder_messages(plan=plan, steps=steps, summary=summary, instruction=instruction, loc=loc)
    annotation = build_pipeline_annotation(plan, steps, summary, instruction)
    logger.info("[graph:summarizing] OUT sources=%d messages=%d", len(summary.sources), len(messages))
    return {"result": ToolExecutionResult(tool_call_data_annotation=annotation, tool_call_messages=messages)}


async def fallback_search(
    messages: list[dict[str, Any]],
    data_stream: DataStreamWriter,
    language: str | None = None,
) -> ToolExecutionResult:
    """
    One web search for the last user message. Empty result when there is no
    user text or the search itself fails.
    """
    query = get_last_user_text(messages)
    if not query.strip():
        logger.info("[graph:fallback_search] no user text; skipping search")
        return ToolExecutionResult.empty()

    loc = get_localization(language or detect_language(query))
    parsed = ParsedInvocation(
        id=FALLBACK_STEP_ID,
        tool="search",
        description=loc.fallback_search_description(query.strip()),
        parameters=SearchParameters(query=query),
    )
    step, result_annotation = await run_invocation(parsed, data_stream)
    if step.error is not None:
        logger.warning("[graph:fallback_search] search failed: %s", step.error)
        return ToolExecutionResult.empty()

    summary = build_execution_summary([step], loc)
    tool_call_messages = build_responder_messages(
        plan=None,
        steps=[step],
        summary=summary,
        instruction=loc.fallback_instruction,
        loc=loc,
    )
    annotation = {"role": "data", "content": {"type": "tool_call", "data": result_annotation["data"]}}
    logger.info("[graph:fallback_search] OUT sources=%d", len(summary.sources))
    return ToolExecutionResult(tool_call_data_annotation=annotation, tool_call_messages=tool_call_messages)


def build_graph(data_stream: DataStreamWriter):
    """
    Build and compile the research graph bound to one request's data stream.
    planning → (executing | fallback_search); executing → (summarizing | fallback_search) → END.
    """

    async def _planning(state: ResearchState) -> dict:
        try:
            plan = await build_tool_plan(state["messages"], state["model"])
        except Exception:
            logger.exception("[graph:planning] planner failed; using fallback search")
            return {"plan": None}
        return {"plan": plan}

    async def _executing(state: ResearchState) -> dict:
        try:
            steps = await execute_planned_tools(state["plan"], data_stream)
        except Exception:
            logger.exception("[graph:executing] execution failed; using fallback search")
            return {"steps": None}
        return {"steps": steps}

    async def _fallback(state: ResearchState) -> dict:
        result = await fallback_search(state["messages"], data_stream, state.get("language"))
        return {"result": result}

    graph = StateGraph(ResearchState)

    graph.add_node("planning", _planning)
    graph.add_node("executing", _executing)
    graph.add_node("summarizing", _summarizing)
    graph.add_node("fallback_search", _fallback)

    graph.set_entry_point("planning")
    graph.add_conditional_edges("planning", _route_after_planning)
    graph.add_conditional_edges("executing", _route_after_executing)
    graph.add_edge("summarizing", END)
    graph.add_edge("fallback_search", END)

    return graph.compile()


async def execute_tool_call(
    messages: list[dict[str, Any]],
    data_stream: DataStreamWriter,
    model: str,
    search_mode: bool,
) -> ToolExecutionResult:
    """
    Run the research pipeline for one conversation turn. Returns the
    side-channel annotation and the messages to append for the answering model
    (both empty when search mode is off or nothing could be researched).
    """
    if not search_mode:
        logger.info("[execute_tool_call] search mode disabled")
        return ToolExecutionResult.empty()

    language = detect_language(get_last_user_text(messages))
    logger.info("[execute_tool_call] START messages=%d model=%s language=%s", len(messages), model, language)
    initial: ResearchState = {
        "messages": messages,
        "model": model,
        "language": language,
        "plan": None,
        "steps": None,
        "result": None,
    }
    final = await build_graph(data_stream).ainvoke(initial)
    result = final.get("result") or ToolExecutionResult.empty()
    logger.info(
        "[execute_tool_call] END annotation=%s messages=%d",
        result.tool_call_data_annotation is not None,
        len(result.tool_call_messages),
    )
    return result
