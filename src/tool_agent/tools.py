# tools.py
# Tool contract, registry, and the builtin tool implementations.
# The executor looks tools up by name and never imports concrete tools.

from abc import ABC, abstractmethod
from typing import Any, Iterable

from tool_agent.errors import ConfigError, ToolExecutionError
from tool_agent.models import ToolInfo


# ---------------------------------------------------------------------------
# Contract
# ---------------------------------------------------------------------------


class Tool(ABC):
    """
    A named, schema-described capability the executor can invoke.

    Subclasses set `name` and `description` and implement
    `parameters_schema()` and `execute()`. A failing call raises
    ToolExecutionError; it must not abort the process.
    """

    name: str = ""
    description: str = ""

    @abstractmethod
    def parameters_schema(self) -> dict[str, Any]:
        """JSON Schema object describing the accepted parameters."""

    @abstractmethod
    def execute(self, params: Any) -> Any:
        """Run the tool and return a JSON-serializable result."""

    def fail(self, reason: str) -> ToolExecutionError:
        return ToolExecutionError(self.name, reason)


class ToolRegistry:
    """Name-keyed lookup table. Registering an existing name replaces it."""

    def __init__(self, tools: Iterable[Tool] = ()) -> None:
        self._tools: dict[str, Tool] = {}
        for tool in tools:
            self.register(tool)

    def register(self, tool: Tool) -> None:
        self._tools[tool.name] = tool

    def get(self, name: str) -> Tool | None:
        return self._tools.get(name)

    def list_tools(self) -> list[ToolInfo]:
        return [ToolInfo.from_tool(tool) for tool in self._tools.values()]

    def names(self) -> list[str]:
        return list(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)


# ---------------------------------------------------------------------------
# Parameter helpers
# ---------------------------------------------------------------------------


def _require_str(tool: Tool, params: Any, key: str) -> str:
    value = params.get(key) if isinstance(params, dict) else None
    if not isinstance(value, str):
        raise tool.fail(f"Missing or invalid '{key}' parameter")
    return value


def _require_number(tool: Tool, params: Any, key: str) -> float:
    value = params.get(key) if isinstance(params, dict) else None
    # bool is an int subclass; JSON true/false is not an operand.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise tool.fail(f"Missing or invalid '{key}' parameter")
    return float(value)


# ---------------------------------------------------------------------------
# Builtin tools
# ---------------------------------------------------------------------------


class Calculator(Tool):
    name = "calculator"
    description = "Performs arithmetic operations (add, subtract, multiply, divide)"

    OPERATIONS = ("add", "subtract", "multiply", "divide")

    def parameters_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "operation": {
                    "type": "string",
                    "enum": list(self.OPERATIONS),
                    "description": "The arithmetic operation to perform",
                },
                "a": {"type": "number", "description": "The first operand"},
                "b": {"type": "number", "description": "The second operand"},
            },
            "required": ["operation", "a", "b"],
        }

    def execute(self, params: Any) -> Any:
        operation = _require_str(self, params, "operation")
        a = _require_number(self, params, "a")
        b = _require_number(self, params, "b")

        if operation == "add":
            result = a + b
        elif operation == "subtract":
            result = a - b
        elif operation == "multiply":
            result = a * b
        elif operation == "divide":
            if b == 0:
                raise self.fail("Division by zero")
            result = a / b
        else:
            raise self.fail(f"Unknown operation: {operation}")

        return {"result": result, "operation": operation, "a": a, "b": b}


class FileReader(Tool):
    name = "file_reader"
    description = "Reads the contents of a file from the filesystem"

    def parameters_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "file_path": {"type": "string", "description": "The path to the file to read"},
            },
            "required": ["file_path"],
        }

    def execute(self, params: Any) -> Any:
        file_path = _require_str(self, params, "file_path")
        try:
            with open(file_path, encoding="utf-8") as fh:
                contents = fh.read()
        except FileNotFoundError:
            raise self.fail(f"File not found: {file_path}")
        except PermissionError:
            raise self.fail(f"Permission denied: {file_path}")
        except (OSError, UnicodeDecodeError) as exc:
            raise self.fail(f"Failed to read file {file_path}: {exc}") from exc

        return {"file_path": file_path, "contents": contents, "size": len(contents)}


class WebSearch(Tool):
    name = "web_search"
    description = "Searches the web and returns the top results (title, url, snippet)"

    def __init__(self, max_results: int = 4) -> None:
        self.max_results = max_results

    def parameters_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "The search query"},
            },
            "required": ["query"],
        }

    def execute(self, params: Any) -> Any:
        from ddgs import DDGS

        query = _require_str(self, params, "query").strip()
        if not query:
            raise self.fail("Missing or invalid 'query' parameter")

        try:
            # Coerce the generator to a list to ensure actual execution
            hits = list(DDGS().text(query, max_results=self.max_results))
        except Exception as exc:
            raise self.fail(f"Search failed: {exc}") from exc

        results = [
            {
                "title": hit.get("title", "No Title"),
                "url": hit.get("href", ""),
                "snippet": hit.get("body", ""),
            }
            for hit in hits
        ]
        return {"query": query, "results": results, "total_results": len(results)}


BUILTIN_TOOLS: dict[str, type[Tool]] = {
    Calculator.name: Calculator,
    FileReader.name: FileReader,
    WebSearch.name: WebSearch,
}


def default_registry(names: Iterable[str] | None = None) -> ToolRegistry:
    """Registry of builtin tools, restricted to `names` when any are given."""
    selected = list(names or BUILTIN_TOOLS)
    unknown = [name for name in selected if name not in BUILTIN_TOOLS]
    if unknown:
        raise ConfigError(
            f"Unknown tool(s): {', '.join(unknown)}. "
            f"Available tools: {', '.join(BUILTIN_TOOLS)}"
        )
    return ToolRegistry(BUILTIN_TOOLS[name]() for name in selected)
