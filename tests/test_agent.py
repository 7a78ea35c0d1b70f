import json

import pytest

from tool_agent import display
from tool_agent.agent import Agent
from tool_agent.config import AgentConfig
from tool_agent.errors import GuardrailViolation, PlanningError
from tool_agent.guardrails import FilePathGuardrail, GuardrailRegistry
from tool_agent.memory import InMemoryStore
from tool_agent.rules import Tone
from tool_agent.tools import Calculator, FileReader, ToolRegistry


def plan_json(*steps, reasoning="plan"):
    return json.dumps({"reasoning": reasoning, "steps": list(steps)})


ADD_PLAN = plan_json(
    {"type": "tool_call", "tool_name": "calculator", "parameters": {"operation": "add", "a": 15, "b": 27}},
    {"type": "response", "text": "15 + 27 = 42"},
)


def test_end_to_end_run(scripted_provider):
    memory = InMemoryStore()
    agent = Agent(scripted_provider(ADD_PLAN), tools=ToolRegistry([Calculator()]), memory=memory)

    result = agent.run("What is 15 + 27?")

    assert result.success is True
    assert result.final_response == "15 + 27 = 42"
    messages = memory.recent(10)
    assert (messages[0].role, messages[0].content) == ("user", "What is 15 + 27?")
    assert messages[-1].content == "15 + 27 = 42"


def test_tool_failure_is_returned_not_raised(scripted_provider):
    provider = scripted_provider(plan_json(
        {"type": "tool_call", "tool_name": "calculator", "parameters": {"operation": "divide", "a": 1, "b": 0}},
    ))
    result = Agent(provider, tools=ToolRegistry([Calculator()])).run("divide by zero")
    assert result.success is False
    assert "Division by zero" in result.final_response


def test_unknown_tool_aborts_before_execution(scripted_provider):
    provider = scripted_provider(plan_json({"type": "tool_call", "tool_name": "teleporter", "parameters": {}}))
    memory = InMemoryStore()
    agent = Agent(provider, tools=ToolRegistry([Calculator()]), memory=memory)

    with pytest.raises(PlanningError, match="unknown tool 'teleporter'"):
        agent.run("beam me up")

    assert [m.role for m in memory.recent(10)] == ["user"]


def test_guardrail_veto_runs_no_tools(scripted_provider, tmp_path):
    provider = scripted_provider(plan_json(
        {"type": "tool_call", "tool_name": "file_reader", "parameters": {"file_path": "/etc/passwd"}},
        {"type": "response", "text": "here it is"},
    ))
    memory = InMemoryStore()
    agent = Agent(
        provider,
        tools=ToolRegistry([FileReader()]),
        guardrails=GuardrailRegistry([FilePathGuardrail([tmp_path])]),
        memory=memory,
    )

    with pytest.raises(GuardrailViolation, match="File path not allowed: /etc/passwd"):
        agent.run("Show me /etc/passwd")

    assert [m.content for m in memory.recent(10)] == ["Show me /etc/passwd"]


def test_unparseable_model_output(scripted_provider):
    agent = Agent(scripted_provider("I cannot help with that."))
    with pytest.raises(PlanningError, match="Could not find valid JSON"):
        agent.run("anything")


def test_from_config_wires_rules_tools_and_guardrails(scripted_provider, tmp_path):
    config = AgentConfig(
        tools=["calculator"],
        guardrails=["file_path", "rate_limit"],
        allowed_paths=[tmp_path],
        rate_limit=5,
        tone=Tone.TECHNICAL,
        max_response_words=30,
    )
    provider = scripted_provider(ADD_PLAN)

    agent = Agent.from_config(config, provider=provider)
    result = agent.run("What is 15 + 27?")

    assert result.success is True
    assert agent.tools.names() == ["calculator"]
    assert agent.guardrails.names() == ["file_path", "rate_limit"]
    system_prompt = provider.calls[0][0].content
    assert Tone.TECHNICAL.guidance in system_prompt
    assert "- Keep responses under 30 words" in system_prompt
    assert "web_search" not in system_prompt


def test_from_config_quiet_silences_console(scripted_provider, monkeypatch):
    monkeypatch.setattr(display.console, "quiet", False)

    Agent.from_config(AgentConfig(quiet=True), provider=scripted_provider())

    assert display.console.quiet is True
