# planner.py
# Turns a goal plus the available tools into a structured Plan.
#
# Flow:
#   system prompt (+ rules) → model call → JSON extraction → parse
#   → (optional, separate) tool-existence validation

import json

from pydantic import ValidationError

from tool_agent import display
from tool_agent.errors import AgentError, PlanningError
from tool_agent.models import Message, Plan, ToolCall, ToolInfo
from tool_agent.providers import ModelProvider
from tool_agent.rules import PlanningContext, RuleEngine
from tool_agent.tools import ToolRegistry


# ---------------------------------------------------------------------------
# System prompt
# ---------------------------------------------------------------------------

PLAN_FORMAT_PROMPT = """\
You are an AI planning assistant. Your job is to break down user goals into \
executable steps. You must respond with a valid JSON object following this exact format:

{
  "reasoning": "Your explanation of the plan",
  "steps": [
    {"type": "tool_call", "tool_name": "tool_name", "parameters": {...}},
    {"type": "reasoning", "text": "explanation"},
    {"type": "response", "text": "final response to user"}
  ]
}

"""

NO_TOOLS_PROMPT = "No tools are available. You can only use reasoning and response steps.\n\n"

GUIDELINES_PROMPT = """
Guidelines:
1. Break complex goals into simple, sequential steps
2. Use tool_call steps to invoke tools with proper parameters
3. Use reasoning steps to explain your thought process
4. End with a response step that answers the user's question
5. Ensure all tool names match exactly the available tools
6. Validate that parameters match the tool's schema

Remember: Respond ONLY with valid JSON. Do not include any other text.\
"""


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def validate_plan(plan: Plan, registry: ToolRegistry) -> None:
    """
    Raise PlanningError on the first ToolCall naming a tool the registry lacks.

    Independent of plan generation; callers may run it on any Plan.
    """
    for step in plan.steps:
        if isinstance(step, ToolCall) and step.tool_name not in registry:
            available = ", ".join(sorted(registry.names()))
            raise PlanningError(
                f"Plan references unknown tool '{step.tool_name}'. "
                f"Available tools: {available}"
            )


# ---------------------------------------------------------------------------
# Planner
# ---------------------------------------------------------------------------


class Planner:
    """
    Builds the planning prompt, queries the model and parses its answer.

    Example:
        planner = Planner(provider)
        plan = planner.generate_plan("What is 15 + 27?", registry.list_tools())
        planner.validate_plan(plan, registry)
    """

    def __init__(self, provider: ModelProvider, rules: RuleEngine | None = None) -> None:
        self.provider = provider
        self.rules = rules

    # ------------------------------------------------------------------
    # Prompt construction
    # ------------------------------------------------------------------

    def build_system_prompt(self, tools: list[ToolInfo]) -> str:
        parts = [PLAN_FORMAT_PROMPT]
        if not tools:
            parts.append(NO_TOOLS_PROMPT)
        else:
            parts.append("Available tools:\n\n")
            for tool in tools:
                parts.append(f"- **{tool.name}**: {tool.description}\n")
                parts.append(
                    f"  Parameters schema: {json.dumps(tool.parameters_schema, indent=2)}\n\n"
                )
        parts.append(GUIDELINES_PROMPT)
        return "".join(parts)

    def shape_prompt(self, prompt: str) -> str:
        """Run the rule engine over a fresh context seeded with `prompt`."""
        if self.rules is None or len(self.rules) == 0:
            return prompt

        context = PlanningContext(system_prompt=prompt)
        self.rules.apply_all(context)

        if not context.constraints:
            return context.system_prompt
        bullets = "\n".join(f"- {c}" for c in context.constraints)
        return f"{context.system_prompt}\n\nConstraints:\n{bullets}"

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    def generate_plan(self, goal: str, tools: list[ToolInfo]) -> Plan:
        system_prompt = self.shape_prompt(self.build_system_prompt(tools))
        messages = [Message.system(system_prompt), Message.user(goal)]

        display.calling_model(len(tools))
        try:
            response = self.provider.send(messages)
        except AgentError as exc:
            raise PlanningError(f"Model call failed: {exc}") from exc

        plan = self.parse_plan(response)
        display.plan_parsed(plan)
        return plan

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    @staticmethod
    def extract_json(response: str) -> str:
        """
        Best-effort slice of the JSON object in a model response.

        Text that starts with '{' is taken as is. Otherwise everything from
        the first '{' to the last '}' is returned. Braces in prose around the
        JSON can produce a wrong slice; the parse step then reports it.
        """
        trimmed = response.strip()
        if trimmed.startswith("{"):
            return trimmed

        start = trimmed.find("{")
        end = trimmed.rfind("}")
        if start != -1 and end > start:
            return trimmed[start : end + 1]

        raise PlanningError(f"Could not find valid JSON in response: {response}")

    def parse_plan(self, response: str) -> Plan:
        json_text = self.extract_json(response)
        try:
            return Plan.model_validate_json(json_text)
        except ValidationError as exc:
            raise PlanningError(
                f"Failed to parse plan JSON: {exc}. Response was: {json_text}"
            ) from exc

    def validate_plan(self, plan: Plan, registry: ToolRegistry) -> None:
        validate_plan(plan, registry)
