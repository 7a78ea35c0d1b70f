# executor.py
# Runs a validated Plan step by step against the tool registry.
#
# Strictly sequential and fail-fast: the first failed step ends the run and
# later steps are never attempted. No retries happen here.

import json

from tool_agent import display
from tool_agent.errors import ExecutionError, ToolExecutionError, ToolNotFoundError
from tool_agent.memory import MemoryStore
from tool_agent.models import (
    ExecutionResult,
    Plan,
    Reasoning,
    Response,
    StepResult,
    ToolCall,
    ToolInfo,
)
from tool_agent.tools import ToolRegistry


class Executor:
    def __init__(self, registry: ToolRegistry, memory: MemoryStore) -> None:
        self.registry = registry
        self.memory = memory

    def list_tools(self) -> list[ToolInfo]:
        return self.registry.list_tools()

    # ------------------------------------------------------------------
    # Single step
    # ------------------------------------------------------------------

    def _run_tool(self, call: ToolCall) -> StepResult:
        step_type = f"tool_call:{call.tool_name}"
        tool = self.registry.get(call.tool_name)
        if tool is None:
            display.tool_not_found(call.tool_name)
            return StepResult(
                step_type=step_type,
                success=False,
                output=str(ToolNotFoundError(call.tool_name)),
            )

        try:
            value = tool.execute(call.parameters)
            output = json.dumps(value)
        except ToolExecutionError as exc:
            return StepResult(step_type=step_type, success=False, output=str(exc))
        except Exception as exc:
            # Any other exception counts as this tool's failure.
            error = ToolExecutionError(call.tool_name, f"{type(exc).__name__}: {exc}")
            return StepResult(step_type=step_type, success=False, output=str(error))

        return StepResult(step_type=step_type, success=True, output=output)

    def _remember(self, content: str) -> None:
        try:
            self.memory.append("assistant", content)
        except Exception as exc:
            raise ExecutionError(f"Failed to write to conversation storage: {exc}") from exc

    # ------------------------------------------------------------------
    # Plan
    # ------------------------------------------------------------------

    def execute_plan(self, plan: Plan) -> ExecutionResult:
        """
        Execute every step in order and return the accumulated results.

        The final response is the last Response step's text; when the plan
        has none, it is the step outputs joined by newlines. On failure it
        names the failing step, and only the steps attempted so far are
        returned.
        """
        results: list[StepResult] = []
        final_response: str | None = None
        total = len(plan.steps)

        display.execution_start(total)

        for index, step in enumerate(plan.steps):
            if isinstance(step, ToolCall):
                display.step_start(index, total, f"tool_call:{step.tool_name}")
                result = self._run_tool(step)
            elif isinstance(step, Reasoning):
                display.step_start(index, total, "reasoning")
                result = StepResult(step_type="reasoning", success=True, output=step.text)
            elif isinstance(step, Response):
                display.step_start(index, total, "response")
                result = StepResult(step_type="response", success=True, output=step.text)
                final_response = step.text
            else:
                raise ExecutionError(f"Unsupported step type: {type(step).__name__}")

            display.step_finished(result)
            results.append(result)
            self._remember(f"[{result.step_type}] {result.output}")

            if not result.success:
                failure = f"Execution halted at step {index + 1}: {result.output}"
                self._remember(failure)
                outcome = ExecutionResult(
                    success=False, final_response=failure, step_results=results
                )
                display.execution_summary(outcome)
                return outcome

        if final_response is None:
            final_response = "\n".join(r.output for r in results)

        self._remember(final_response)
        outcome = ExecutionResult(success=True, final_response=final_response, step_results=results)
        display.execution_summary(outcome)
        return outcome
