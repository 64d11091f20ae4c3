"""Schemas for the research planner's structured output."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from research_agent.core.config import MAX_PLAN_STEPS, MAX_TOOL_INVOCATIONS

DEFAULT_FINAL_RESPONSE_INSTRUCTION = "Respond to the original user request using the collected information."

PlannedToolName = Literal["search", "retrieve", "videoSearch", "none"]


class PlanStep(BaseModel):
    """One natural-language step of the research plan."""

    step: str = Field("", description="Short natural language step description.")
    detail: str = Field("", description="Reasoning for the step. Match the language of the user.")

    @field_validator("step", "detail", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class ToolInvocation(BaseModel):
    """One concrete tool call proposed by the planner."""

    id: str = Field(
        "",
        description='A short identifier for the step. Use kebab-case verbs such as "initial-search".',
    )
    tool: PlannedToolName = Field(..., description="Which tool to use for this step.")
    description: str = Field(
        "",
        description="Explain why the tool is needed and what you are hoping to learn. Match the language of the user.",
    )
    parameters: dict[str, Any] = Field(
        default_factory=dict,
        description="Parameters for the tool. Leave empty when not needed.",
    )

    @field_validator("id", "description", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("parameters", mode="before")
    @classmethod
    def _non_dict_to_empty(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else {}


class ToolPlan(BaseModel):
    """Planner output: high-level plan, tool invocations, and how to frame the final answer."""

    model_config = ConfigDict(populate_by_name=True)

    plan: list[PlanStep] = Field(
        default_factory=list,
        max_length=MAX_PLAN_STEPS,
        description="High level plan before executing tools.",
    )
    tool_invocations: list[ToolInvocation] = Field(
        default_factory=list,
        alias="toolInvocations",
        max_length=MAX_TOOL_INVOCATIONS,
        description="Concrete tool calls to execute.",
    )
    final_response_instruction: str = Field(
        DEFAULT_FINAL_RESPONSE_INSTRUCTION,
        alias="finalResponseInstruction",
        description="Instruction for how the final answer should be framed. Use the user language.",
    )

    @field_validator("plan", "tool_invocations", mode="before")
    @classmethod
    def _none_to_list(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("final_response_instruction", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value
