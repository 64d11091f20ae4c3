"""
Planned tool execution: validate each invocation's parameters, run the tool,
and report progress on the data stream.

Invocations run strictly one after another so citation markers and progress
events follow plan order. A failing tool is recorded on its ExecutedStep and
never aborts its siblings.
"""

import json
import logging
import uuid
from typing import Any

from pydantic import ValidationError

from research_agent.agent.stream import DataStreamWriter
from research_agent.agent.tools import retrieve, search, video_search
from research_agent.schemas.plan import ToolInvocation, ToolPlan
from research_agent.schemas.tools import (
    TOOL_NAMES,
    ExecutedStep,
    ParsedInvocation,
    RetrieveParameters,
    SearchParameters,
    ToolResult,
    VideoSearchParameters,
)

logger = logging.getLogger(__name__)

_PARAMETER_SCHEMAS = {
    "search": SearchParameters,
    "retrieve": RetrieveParameters,
    "videoSearch": VideoSearchParameters,
}


def parse_invocation_parameters(invocation: ToolInvocation) -> ParsedInvocation | None:
    """Validate an invocation against its tool's schema; None (logged) when it does not fit."""
    schema = _PARAMETER_SCHEMAS.get(invocation.tool)
    if schema is None:
        return None
    try:
        parameters = schema.model_validate(invocation.parameters)
    except ValidationError as e:
        logger.warning(
            "[execution:parse_invocation_parameters] dropped invocation=%r errors=%s",
            invocation.model_dump(),
            e.errors(include_url=False),
        )
        return None
    return ParsedInvocation(
        id=invocation.id,
        tool=invocation.tool,
        description=invocation.description,
        parameters=parameters,
    )


async def run_tool(parsed: ParsedInvocation) -> ToolResult:
    params = parsed.parameters
    if isinstance(params, SearchParameters):
        return await search(
            params.query,
            params.max_results,
            params.search_depth,
            params.include_domains,
            params.exclude_domains,
        )
    if isinstance(params, RetrieveParameters):
        return await retrieve(params.url)
    return await video_search(params.query, params.max_results)


async def run_invocation(
    parsed: ParsedInvocation,
    data_stream: DataStreamWriter,
) -> tuple[ExecutedStep, dict[str, Any]]:
    """
    Run one validated invocation between a 'call' and a 'result' progress event
    sharing one toolCallId. Returns the executed step and the result event.
    """
    args = parsed.parameters_dict()
    call_annotation = {
        "type": "tool_call",
        "data": {
            "state": "call",
            "toolCallId": f"call_{uuid.uuid4().hex}",
            "toolName": parsed.tool,
            "args": json.dumps(args, ensure_ascii=False),
            "description": parsed.description,
        },
    }
    data_stream.write_data(call_annotation)
    logger.info("[execution:run_invocation] IN  id=%s tool=%s args=%s", parsed.id, parsed.tool, args)

    try:
        result = await run_tool(parsed)
    except Exception as e:
        message = str(e) or "Unknown tool execution error"
        logger.warning("[execution:run_invocation] id=%s tool=%s failed: %s", parsed.id, parsed.tool, message)
        result_annotation = {
            "type": "tool_call",
            "data": {**call_annotation["data"], "state": "result", "error": message},
        }
        data_stream.write_message_annotation(result_annotation)
        step = ExecutedStep(
            id=parsed.id,
            tool=parsed.tool,
            description=parsed.description,
            parameters=args,
            result=None,
            error=message,
        )
        return step, result_annotation

    result_annotation = {
        "type": "tool_call",
        "data": {
            **call_annotation["data"],
            "result": json.dumps(result.model_dump(), ensure_ascii=False),
            "state": "result",
        },
    }
    data_stream.write_message_annotation(result_annotation)
    logger.info("[execution:run_invocation] OUT id=%s tool=%s ok", parsed.id, parsed.tool)
    step = ExecutedStep(
        id=parsed.id,
        tool=parsed.tool,
        description=parsed.description,
        parameters=args,
        result=result,
    )
    return step, result_annotation


async def execute_planned_tools(plan: ToolPlan, data_stream: DataStreamWriter) -> list[ExecutedStep] | None:
    """
    Run the plan's real tool invocations in order. None when nothing was
    runnable (no tool invocations, or every one failed validation).
    """
    invocations = [inv for inv in plan.tool_invocations if inv.tool in TOOL_NAMES]
    logger.info("[execution:execute_planned_tools] IN  candidates=%d", len(invocations))
    if not invocations:
        return None

    steps: list[ExecutedStep] = []
    for invocation in invocations:
        parsed = parse_invocation_parameters(invocation)
        if parsed is None:
            continue
        step, _ = await run_invocation(parsed, data_stream)
        steps.append(step)

    logger.info(
        "[execution:execute_planned_tools] OUT steps=%d failed=%d",
        len(steps),
        sum(1 for s in steps if s.error is not None),
    )
    return steps or None
