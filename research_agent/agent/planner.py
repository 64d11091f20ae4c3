"""
Research planner: ask the model for a multi-step tool plan, then normalize it.

build_tool_plan() lets model/validation errors propagate; the orchestrator
decides whether to fall back. normalize_tool_plan() is pure and idempotent.
"""

import logging
import re
from typing import Any

from research_agent.agent.llm import generate_object
from research_agent.core.config import MAX_TOOL_INVOCATIONS
from research_agent.core.domain import append_domain_instructions
from research_agent.schemas.plan import (
    DEFAULT_FINAL_RESPONSE_INSTRUCTION,
    PlanStep,
    ToolInvocation,
    ToolPlan,
)

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")

PLANNER_SYSTEM_PROMPT = f"""You are a senior research planner that prepares multi-step tool usage for another model.
You must think carefully before deciding whether tools are needed.
Tools available:
- search: run a web search. Provide a clear query and optional parameters (max_results, search_depth "basic" or "advanced", include_domains, exclude_domains).
- retrieve: extract content from a single user-provided URL. Only use it when the user explicitly shared the URL.
- videoSearch: find relevant videos. Only use when the request is clearly about videos or multimedia.

Return at most {MAX_TOOL_INVOCATIONS} tool invocations. If no tool is helpful, return an empty list.
Never invent URLs. When referencing text from previous tools later, ensure you recorded the step id so the responder can cite it.
Always match the language of the user in plan steps, descriptions and instructions.
"""


async def build_tool_plan(messages: list[dict[str, Any]], model: str) -> ToolPlan:
    """Issue one structured-generation request and return the normalized plan."""
    logger.info("[planner:build_tool_plan] IN  messages=%d model=%s", len(messages), model)
    raw_plan = await generate_object(
        system=append_domain_instructions(PLANNER_SYSTEM_PROMPT),
        messages=messages,
        schema=ToolPlan,
        model=model,
    )
    plan = normalize_tool_plan(raw_plan)
    logger.info(
        "[planner:build_tool_plan] OUT plan_steps=%d invocations=%s",
        len(plan.plan),
        [(inv.id, inv.tool) for inv in plan.tool_invocations],
    )
    return plan


def get_last_user_text(messages: list[dict[str, Any]]) -> str:
    """Text of the most recent user message; for typed parts only 'text' parts count."""
    for message in reversed(messages):
        if message.get("role") != "user":
            continue
        content = message.get("content")
        if isinstance(content, str):
            return content
        if isinstance(content, list):
            texts = [
                part.get("text") or ""
                for part in content
                if isinstance(part, dict) and part.get("type") == "text"
            ]
            texts = [t for t in texts if t]
            if texts:
                return "\n".join(texts)
    return ""


def normalize_tool_plan(plan: ToolPlan) -> ToolPlan:
    """
    Trim text fields, drop empty plan steps, give every invocation a unique
    whitespace-free id, strip null parameters, drop invocations without a
    description (unless tool is 'none') and default the final instruction.
    """
    steps = [PlanStep(step=s.step.strip(), detail=s.detail.strip()) for s in plan.plan]
    steps = [s for s in steps if s.step and s.detail]

    used_ids: set[str] = set()
    invocations: list[ToolInvocation] = []
    for index, invocation in enumerate(plan.tool_invocations, start=1):
        normalized = ToolInvocation(
            id=_unique_invocation_id(invocation.id, index, used_ids),
            tool=invocation.tool,
            description=invocation.description.strip(),
            parameters={k: v for k, v in (invocation.parameters or {}).items() if v is not None},
        )
        if normalized.description or normalized.tool == "none":
            invocations.append(normalized)

    instruction = (plan.final_response_instruction or "").strip()
    return ToolPlan(
        plan=steps,
        tool_invocations=invocations,
        final_response_instruction=instruction or DEFAULT_FINAL_RESPONSE_INSTRUCTION,
    )


def _unique_invocation_id(raw_id: str, index: int, used_ids: set[str]) -> str:
    trimmed = (raw_id or "").strip()
    base = _WHITESPACE.sub("-", trimmed) if trimmed else f"step-{index}"
    candidate = base
    occurrence = 1
    while candidate in used_ids:
        occurrence += 1
        candidate = f"{base}-{occurrence}"
    used_ids.add(candidate)
    return candidate
