# models.py
# Data contracts for the plan -> guardrail -> execute pipeline.
# Pure schema and validation, no business logic.

from datetime import datetime, timezone
from typing import Annotated, Any, Iterator, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


Role = Literal["system", "user", "assistant"]


class Message(BaseModel):
    """One role-tagged chat message exchanged with a model provider."""

    role: Role
    content: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def system(cls, content: str) -> "Message":
        return cls(role="system", content=content)

    @classmethod
    def user(cls, content: str) -> "Message":
        return cls(role="user", content=content)

    @classmethod
    def assistant(cls, content: str) -> "Message":
        return cls(role="assistant", content=content)

    def to_chat(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


# ---------------------------------------------------------------------------
# Plan steps
# ---------------------------------------------------------------------------


class ToolCall(BaseModel):
    """Invoke a registered tool with JSON parameters."""

    model_config = ConfigDict(frozen=True)

    type: Literal["tool_call"] = "tool_call"
    tool_name: str = Field(..., description="Tool name; must exist in the tool registry.")
    parameters: Any = Field(default_factory=dict, description="Tool arguments.")


class Reasoning(BaseModel):
    """A thought recorded in the plan. Never touches a tool."""

    model_config = ConfigDict(frozen=True)

    type: Literal["reasoning"] = "reasoning"
    text: str


class Response(BaseModel):
    """Final answer text for the user."""

    model_config = ConfigDict(frozen=True)

    type: Literal["response"] = "response"
    text: str


Step = Annotated[Union[ToolCall, Reasoning, Response], Field(discriminator="type")]


class Plan(BaseModel):
    """A complete plan emitted by the planning model. Step order is execution order."""

    model_config = ConfigDict(frozen=True)

    reasoning: str = Field(..., description="The model's rationale for the plan.")
    steps: tuple[Step, ...] = Field(default_factory=tuple)

    def tool_calls(self) -> Iterator[ToolCall]:
        for step in self.steps:
            if isinstance(step, ToolCall):
                yield step


# ---------------------------------------------------------------------------
# Tool metadata
# ---------------------------------------------------------------------------


class ToolInfo(BaseModel):
    """Descriptive metadata for one registered tool."""

    name: str
    description: str
    parameters_schema: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_tool(cls, tool: Any) -> "ToolInfo":
        return cls(
            name=tool.name,
            description=tool.description,
            parameters_schema=tool.parameters_schema(),
        )


# ---------------------------------------------------------------------------
# Execution results
# ---------------------------------------------------------------------------


class StepResult(BaseModel):
    """Immutable log entry produced after each executed step."""

    model_config = ConfigDict(frozen=True)

    step_type: str = Field(..., description="'tool_call:<name>', 'reasoning' or 'response'.")
    success: bool
    output: str = Field(default="", description="Text or JSON-serialized tool output.")


class ExecutionResult(BaseModel):
    """Terminal artifact of one executor run."""

    model_config = ConfigDict(frozen=True)

    success: bool
    final_response: str
    step_results: list[StepResult] = Field(default_factory=list)
