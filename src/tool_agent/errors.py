# errors.py
# Exception taxonomy for the agent pipeline.
#
# Planning errors and guardrail violations abort a run before any tool has
# executed. Tool errors are recorded by the executor as failed steps.


class AgentError(Exception):
    """Base class for every error raised by tool_agent."""

    prefix = "Agent error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.prefix}: {self.message}"


class ConfigError(AgentError):
    """Raised when configuration is missing or invalid."""

    prefix = "Configuration error"


class ProviderError(AgentError):
    """Raised by a model provider. `retryable` marks transient failures."""

    prefix = "LLM provider error"

    def __init__(
        self, message: str, status_code: int | None = None, retryable: bool = False
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.retryable = retryable


class PlanningError(AgentError):
    """Raised when a plan cannot be generated, parsed or validated."""

    prefix = "Planning error"


class GuardrailViolation(AgentError):
    """Raised when a guardrail vetoes a plan. This is a policy decision, not a fault."""

    prefix = "Guardrail violation"

    def __init__(self, message: str, guardrail: str = "") -> None:
        super().__init__(message)
        self.guardrail = guardrail


class ToolExecutionError(AgentError):
    """Raised by a tool when it cannot complete a call."""

    prefix = "Tool execution failed"

    def __init__(self, tool_name: str, reason: str) -> None:
        super().__init__(reason)
        self.tool_name = tool_name
        self.reason = reason

    def __str__(self) -> str:
        return f"{self.prefix}: {self.tool_name} - {self.reason}"


class ToolNotFoundError(AgentError):
    """Raised when a step names a tool absent from the registry."""

    prefix = "Tool not found"

    def __init__(self, tool_name: str) -> None:
        super().__init__(tool_name)
        self.tool_name = tool_name


class ExecutionError(AgentError):
    """Raised when the executor itself cannot continue (not a tool failure)."""

    prefix = "Execution error"
