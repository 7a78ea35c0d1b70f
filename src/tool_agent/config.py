# config.py
# Environment-driven configuration. A .env file is honoured via python-dotenv.
#
# Every knob has a default so an empty environment still yields a usable
# config, except the API key for hosted providers.

import os
from pathlib import Path
from typing import Mapping

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field, ValidationError

from tool_agent.errors import ConfigError
from tool_agent.rules import Tone

ENV_PREFIX = "TOOL_AGENT_"


class LLMConfig(BaseModel):
    provider: str = "openrouter"
    model: str = "anthropic/claude-3.5-haiku"
    api_key: str | None = None
    base_url: str | None = None
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(default=2000, gt=0)
    timeout: float = Field(default=60.0, gt=0)
    max_attempts: int = Field(default=3, ge=0)


class MemoryConfig(BaseModel):
    max_messages: int = Field(default=50, gt=0)


class AgentConfig(BaseModel):
    llm: LLMConfig = Field(default_factory=LLMConfig)
    memory: MemoryConfig = Field(default_factory=MemoryConfig)
    tools: list[str] = Field(default_factory=list, description="Empty means all builtin tools.")
    guardrails: list[str] = Field(default_factory=list)
    allowed_paths: list[Path] = Field(
        default_factory=lambda: [Path("/tmp"), Path.cwd()],
        description="Roots the file_path guardrail accepts.",
    )
    rate_limit: int = Field(default=100, gt=0, description="Tool calls per minute.")
    tone: Tone | None = None
    max_response_words: int | None = Field(default=None, gt=0)
    quiet: bool = Field(default=False, description="Silence terminal output.")


def _split(value: str | None, sep: str = ",") -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(sep) if item.strip()]


def load_config(environ: Mapping[str, str] | None = None) -> AgentConfig:
    """
    Build an AgentConfig from environment variables.

    When `environ` is omitted, a .env file found from the working directory
    is loaded first and os.environ is read. Pass a mapping to load from
    anything else (tests, embedding).
    """
    if environ is None:
        load_dotenv(find_dotenv(usecwd=True))
        environ = os.environ

    def get(name: str) -> str | None:
        value = environ.get(ENV_PREFIX + name)
        return value if value not in (None, "") else None

    llm: dict = {
        "api_key": get("API_KEY")
        or environ.get("OPENROUTER_API_KEY")
        or environ.get("OPENAI_API_KEY"),
    }
    for key, name in (
        ("provider", "PROVIDER"),
        ("model", "MODEL"),
        ("base_url", "BASE_URL"),
        ("temperature", "TEMPERATURE"),
        ("max_tokens", "MAX_TOKENS"),
        ("timeout", "TIMEOUT"),
        ("max_attempts", "MAX_ATTEMPTS"),
    ):
        if get(name) is not None:
            llm[key] = get(name)

    data: dict = {
        "llm": llm,
        "tools": _split(get("TOOLS")),
        "guardrails": _split(get("GUARDRAILS")),
    }
    if get("MAX_MESSAGES") is not None:
        data["memory"] = {"max_messages": get("MAX_MESSAGES")}
    if get("ALLOWED_PATHS") is not None:
        data["allowed_paths"] = _split(get("ALLOWED_PATHS"), os.pathsep)
    if get("RATE_LIMIT") is not None:
        data["rate_limit"] = get("RATE_LIMIT")
    if get("TONE") is not None:
        data["tone"] = get("TONE").lower()
    if get("MAX_RESPONSE_WORDS") is not None:
        data["max_response_words"] = get("MAX_RESPONSE_WORDS")
    if get("QUIET") is not None:
        data["quiet"] = get("QUIET")

    try:
        return AgentConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
