import os
from unittest.mock import patch

import pytest

from tool_agent.errors import ConfigError, ToolExecutionError
from tool_agent.tools import (
    Calculator,
    FileReader,
    Tool,
    ToolRegistry,
    WebSearch,
    default_registry,
)

# ---------------------------------------------------------------------------
# Calculator
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "operation, a, b, expected",
    [("add", 15, 27, 42), ("subtract", 10, 4, 6), ("multiply", 6, 7, 42), ("divide", 42, 3, 14)],
)
def test_calculator_operations(operation, a, b, expected):
    result = Calculator().execute({"operation": operation, "a": a, "b": b})
    assert result == {"result": expected, "operation": operation, "a": a, "b": b}


def test_calculator_division_by_zero():
    with pytest.raises(ToolExecutionError) as info:
        Calculator().execute({"operation": "divide", "a": 1, "b": 0})
    assert str(info.value) == "Tool execution failed: calculator - Division by zero"


def test_calculator_unknown_operation():
    with pytest.raises(ToolExecutionError, match="Unknown operation: modulo"):
        Calculator().execute({"operation": "modulo", "a": 1, "b": 2})


@pytest.mark.parametrize(
    "params",
    [{"operation": "add", "a": 1}, {"operation": "add", "a": "1", "b": 2}, {"operation": "add", "a": True, "b": 2}, "not a dict"],
)
def test_calculator_rejects_bad_parameters(params):
    with pytest.raises(ToolExecutionError, match="Missing or invalid"):
        Calculator().execute(params)


# ---------------------------------------------------------------------------
# File reader
# ---------------------------------------------------------------------------

def test_file_reader_reads_utf8(tmp_path):
    target = tmp_path / "notes.txt"
    target.write_text("héllo", encoding="utf-8")
    result = FileReader().execute({"file_path": str(target)})
    assert result == {"file_path": str(target), "contents": "héllo", "size": 5}


def test_file_reader_missing_file(tmp_path):
    missing = tmp_path / "nope.txt"
    with pytest.raises(ToolExecutionError, match="File not found"):
        FileReader().execute({"file_path": str(missing)})


def test_file_reader_directory_is_a_failure(tmp_path):
    with pytest.raises(ToolExecutionError) as info:
        FileReader().execute({"file_path": str(tmp_path)})
    assert info.value.tool_name == "file_reader"


@pytest.mark.skipif(os.name != "posix" or os.geteuid() == 0, reason="needs an unprivileged POSIX user")
def test_file_reader_permission_denied(tmp_path):
    target = tmp_path / "secret.txt"
    target.write_text("x")
    target.chmod(0)
    with pytest.raises(ToolExecutionError, match="Permission denied"):
        FileReader().execute({"file_path": str(target)})


def test_file_reader_requires_path():
    with pytest.raises(ToolExecutionError, match="'file_path'"):
        FileReader().execute({})


# ---------------------------------------------------------------------------
# Web search (ddgs is patched; no network)
# ---------------------------------------------------------------------------

@patch("ddgs.DDGS")
def test_web_search_success(mock_ddgs_cls):
    mock_ddgs_cls.return_value.text.return_value = [
        {"title": "Result 1", "body": "Body 1", "href": "http://1.com"}
    ]

    result = WebSearch(max_results=2).execute({"query": "  test  "})

    assert result == {
        "query": "test",
        "results": [{"title": "Result 1", "url": "http://1.com", "snippet": "Body 1"}],
        "total_results": 1,
    }
    mock_ddgs_cls.return_value.text.assert_called_once_with("test", max_results=2)


@patch("ddgs.DDGS")
def test_web_search_empty_query(mock_ddgs_cls):
    with pytest.raises(ToolExecutionError, match="'query'"):
        WebSearch().execute({"query": "   "})
    mock_ddgs_cls.assert_not_called()


@patch("ddgs.DDGS")
def test_web_search_no_results(mock_ddgs_cls):
    mock_ddgs_cls.return_value.text.return_value = []
    result = WebSearch().execute({"query": "ghost"})
    assert result["total_results"] == 0


@patch("ddgs.DDGS")
def test_web_search_exception(mock_ddgs_cls):
    mock_ddgs_cls.return_value.text.side_effect = Exception("Network timeout")
    with pytest.raises(ToolExecutionError, match="Search failed: Network timeout"):
        WebSearch().execute({"query": "crash"})


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

class Echo(Tool):
    name = "echo"
    description = "Echoes its parameters"

    def __init__(self, tag="first"):
        self.tag = tag

    def parameters_schema(self):
        return {"type": "object"}

    def execute(self, params):
        return {"tag": self.tag, "params": params}


def test_registry_lookup_and_listing():
    registry = ToolRegistry([Echo(), Calculator()])
    assert "echo" in registry
    assert "missing" not in registry
    assert registry.get("missing") is None
    assert len(registry) == 2
    assert {info.name for info in registry.list_tools()} == {"echo", "calculator"}


def test_registry_last_registration_wins():
    registry = ToolRegistry()
    registry.register(Echo("first"))
    registry.register(Echo("second"))
    assert len(registry) == 1
    assert registry.get("echo").tag == "second"


def test_empty_registry_lists_nothing():
    assert ToolRegistry().list_tools() == []


def test_default_registry_all_and_subset():
    assert sorted(default_registry().names()) == ["calculator", "file_reader", "web_search"]
    assert default_registry(["calculator"]).names() == ["calculator"]


def test_default_registry_unknown_tool():
    with pytest.raises(ConfigError, match="Unknown tool"):
        default_registry(["teleporter"])
