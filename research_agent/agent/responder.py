"""
Responder messages: what the answering model receives after tool execution.

Three messages in order: plan/execution overview, the research summary with its
source directory, and the final instruction (cite markers, or admit that no
sources were found). Also builds the side-channel payload the UI stores.
"""

import json
from typing import Any

from research_agent.agent.localization import Localization
from research_agent.schemas.plan import DEFAULT_FINAL_RESPONSE_INSTRUCTION, ToolPlan
from research_agent.schemas.tools import ExecutedStep, ExecutionSummary

PIPELINE_TOOL_CALL_ID = "agent_pipeline"


def resolve_final_instruction(plan: ToolPlan | None, loc: Localization) -> str:
    """The planner's instruction, or the localized default when it was never customized."""
    instruction = (plan.final_response_instruction if plan else "").strip()
    if not instruction or instruction == DEFAULT_FINAL_RESPONSE_INSTRUCTION:
        return loc.default_final_instruction
    return instruction


def build_overview(plan: ToolPlan | None, steps: list[ExecutedStep], loc: Localization) -> str:
    lines = [loc.overview_heading, "", loc.plan_heading]
    if plan is not None and plan.plan:
        lines.extend(f"{i}. {s.step}: {s.detail}" for i, s in enumerate(plan.plan, start=1))
    else:
        lines.append(loc.no_plan)
    lines.extend(["", loc.executed_steps_heading])
    for step in steps:
        status = loc.status_failed if step.error is not None else loc.status_success
        lines.append(f"- [{step.id}] {step.tool}: {step.description} ({status})")
    return "\n".join(lines)


def build_final_instruction(instruction: str, summary: ExecutionSummary, loc: Localization) -> str:
    if not summary.sources:
        return f"{instruction}\n\n{loc.no_sources_caveat}"
    markers = ", ".join(s.marker for s in summary.sources)
    return f"{instruction}\n\n{loc.use_sources_instruction(markers)}"


def build_responder_messages(
    *,
    plan: ToolPlan | None,
    steps: list[ExecutedStep],
    summary: ExecutionSummary,
    instruction: str,
    loc: Localization,
) -> list[dict[str, Any]]:
    return [
        {"role": "assistant", "content": build_overview(plan, steps, loc)},
        {"role": "assistant", "content": summary.summary},
        {"role": "user", "content": build_final_instruction(instruction, summary, loc)},
    ]


def build_pipeline_annotation(
    plan: ToolPlan,
    steps: list[ExecutedStep],
    summary: ExecutionSummary,
    instruction: str,
) -> dict[str, Any]:
    """Side-channel payload bundling plan, invocations, instruction, steps and sources."""
    result = {
        "plan": [s.model_dump() for s in plan.plan],
        "toolInvocations": [inv.model_dump() for inv in plan.tool_invocations],
        "finalResponseInstruction": instruction,
        "steps": [s.to_payload() for s in steps],
        "sources": [s.to_payload() for s in summary.sources],
    }
    return {
        "role": "data",
        "content": {
            "type": "tool_call",
            "data": {
                "state": "result",
                "toolCallId": PIPELINE_TOOL_CALL_ID,
                "toolName": "agent",
                "result": json.dumps(result, ensure_ascii=False),
            },
        },
    }
