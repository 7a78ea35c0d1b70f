# agent.py
# Pipeline harness. Owns the control flow and wiring; every collaborator
# (model provider, tools, guardrails, memory, rules) is injected.
#
# Control flow:
#   goal → memory → planner (rules + model) → tool-existence check
#   → guardrail chain → executor → ExecutionResult
#
# All terminal output is delegated to display.py.

from tool_agent import display
from tool_agent.config import AgentConfig
from tool_agent.errors import AgentError
from tool_agent.executor import Executor
from tool_agent.guardrails import GuardrailRegistry, build_guardrails
from tool_agent.memory import InMemoryStore, MemoryStore
from tool_agent.models import ExecutionResult
from tool_agent.planner import Planner, validate_plan
from tool_agent.providers import ModelProvider, create_provider
from tool_agent.rules import ResponseLengthRule, RuleEngine, ToneRule
from tool_agent.tools import ToolRegistry, default_registry


class Agent:
    """
    Runs one plan per goal: plan, validate, guard, execute.

    Example:
        agent = Agent.from_config(load_config())
        result = agent.run("What is 15 + 27?")
        print(result.final_response)
    """

    def __init__(
        self,
        provider: ModelProvider,
        tools: ToolRegistry | None = None,
        guardrails: GuardrailRegistry | None = None,
        memory: MemoryStore | None = None,
        rules: RuleEngine | None = None,
    ) -> None:
        self.tools = tools if tools is not None else ToolRegistry()
        self.guardrails = guardrails if guardrails is not None else GuardrailRegistry()
        self.memory = memory if memory is not None else InMemoryStore()
        self.planner = Planner(provider, rules)
        # One store shared by the harness and the executor.
        self.executor = Executor(self.tools, self.memory)

    @classmethod
    def from_config(cls, config: AgentConfig, provider: ModelProvider | None = None) -> "Agent":
        if config.quiet:
            display.console.quiet = True

        rules = RuleEngine()
        if config.tone is not None:
            rules.add_rule(ToneRule(config.tone))
        if config.max_response_words is not None:
            rules.add_rule(ResponseLengthRule(config.max_response_words))

        agent = cls(
            provider=provider or create_provider(config.llm),
            tools=default_registry(config.tools),
            guardrails=build_guardrails(
                config.guardrails, config.allowed_paths, config.rate_limit
            ),
            memory=InMemoryStore(config.memory.max_messages),
            rules=rules,
        )
        display.banner(
            config.llm.provider,
            config.llm.model,
            sorted(agent.tools.names()),
            agent.guardrails.names(),
        )
        return agent

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def run(self, goal: str) -> ExecutionResult:
        """
        Full pipeline entry point.

        Planning errors and guardrail violations are raised before any tool
        runs. Tool failures do not raise; they come back as an unsuccessful
        ExecutionResult.
        """
        display.goal_received(goal)
        self.memory.append("user", goal)

        try:
            plan = self.planner.generate_plan(goal, self.executor.list_tools())
            validate_plan(plan, self.tools)
            self.guardrails.validate_all(plan)
            result = self.executor.execute_plan(plan)
        except AgentError as exc:
            display.halt(str(exc))
            raise

        if result.success:
            display.final_result(result.final_response)
        else:
            display.halt(result.final_response)
        return result
