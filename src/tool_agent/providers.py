# providers.py
# Model backends. The planner only sees the ModelProvider protocol:
# an ordered list of messages in, one text completion out.
#
# Retries live here, never in the planner or executor.

import time
from typing import Callable, Protocol, TypeVar

import httpx
from openai import APIConnectionError, APIStatusError, APITimeoutError, OpenAI

from tool_agent.config import LLMConfig
from tool_agent.errors import ConfigError, ProviderError
from tool_agent.models import Message

T = TypeVar("T")

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
OLLAMA_BASE_URL = "http://localhost:11434"
ANTHROPIC_BASE_URL = "https://api.anthropic.com/v1"
ANTHROPIC_VERSION = "2023-06-01"


class ModelProvider(Protocol):
    def send(self, messages: list[Message]) -> str: ...


# ---------------------------------------------------------------------------
# Retry
# ---------------------------------------------------------------------------


def with_retry(
    operation: Callable[[], T],
    max_attempts: int = 3,
    initial_delay: float = 1.0,
    sleep: Callable[[float], None] | None = None,
) -> T:
    """
    Call `operation` until it succeeds, doubling the delay between attempts.

    Only ProviderErrors flagged retryable (timeouts, connection failures,
    HTTP 5xx) are retried. Anything else is raised on the first attempt.
    """
    if max_attempts <= 0:
        max_attempts = 3
    sleep = sleep or time.sleep

    delay = initial_delay
    attempt = 0
    while True:
        attempt += 1
        try:
            return operation()
        except ProviderError as exc:
            if not exc.retryable or attempt >= max_attempts:
                raise
        sleep(delay)
        delay *= 2


def _status_error(status_code: int, detail: str) -> ProviderError:
    return ProviderError(
        f"HTTP {status_code} error: {detail}",
        status_code=status_code,
        retryable=status_code >= 500,
    )


# ---------------------------------------------------------------------------
# OpenAI-compatible chat completions (OpenAI, OpenRouter)
# ---------------------------------------------------------------------------


class OpenAIProvider:
    def __init__(self, config: LLMConfig, client: OpenAI | None = None) -> None:
        self.config = config
        # with_retry owns retries.
        self._client = client or OpenAI(
            base_url=config.base_url,
            api_key=config.api_key,
            timeout=config.timeout,
            max_retries=0,
        )

    def _complete(self, messages: list[Message]) -> str:
        try:
            response = self._client.chat.completions.create(
                model=self.config.model,
                messages=[m.to_chat() for m in messages],
                temperature=self.config.temperature,
                max_tokens=self.config.max_tokens,
            )
        except APITimeoutError as exc:
            raise ProviderError(f"Request timeout: {exc}", retryable=True) from exc
        except APIConnectionError as exc:
            raise ProviderError(f"Connection error: {exc}", retryable=True) from exc
        except APIStatusError as exc:
            raise _status_error(exc.status_code, exc.message) from exc

        if not response.choices or not response.choices[0].message.content:
            raise ProviderError("Empty response from model")
        return response.choices[0].message.content.strip()

    def send(self, messages: list[Message]) -> str:
        return with_retry(lambda: self._complete(messages), self.config.max_attempts)


# ---------------------------------------------------------------------------
# Plain HTTP backends (Ollama, Anthropic)
# ---------------------------------------------------------------------------


def _post_json(
    client: httpx.Client, path: str, payload: dict, backend: str, headers: dict | None = None
) -> dict:
    try:
        response = client.post(path, json=payload, headers=headers)
        response.raise_for_status()
        return response.json()
    except httpx.TimeoutException as exc:
        raise ProviderError(f"Request timeout: {exc}", retryable=True) from exc
    except httpx.HTTPStatusError as exc:
        raise _status_error(exc.response.status_code, exc.response.text) from exc
    except httpx.TransportError as exc:
        raise ProviderError(f"Connection error: {exc}", retryable=True) from exc
    except ValueError as exc:
        raise ProviderError(f"Invalid JSON from {backend}: {exc}") from exc


class OllamaProvider:
    def __init__(self, config: LLMConfig, client: httpx.Client | None = None) -> None:
        self.config = config
        self._client = client or httpx.Client(
            base_url=config.base_url or OLLAMA_BASE_URL,
            timeout=config.timeout,
        )

    def _complete(self, messages: list[Message]) -> str:
        payload = {
            "model": self.config.model,
            "messages": [m.to_chat() for m in messages],
            "stream": False,
            "options": {
                "temperature": self.config.temperature,
                "num_predict": self.config.max_tokens,
            },
        }
        data = _post_json(self._client, "/api/chat", payload, "Ollama")

        content = (data.get("message") or {}).get("content", "")
        if not content:
            raise ProviderError("Empty response from model")
        return content.strip()

    def send(self, messages: list[Message]) -> str:
        return with_retry(lambda: self._complete(messages), self.config.max_attempts)


class AnthropicProvider:
    """
    Anthropic Messages API over httpx.

    System messages are joined into the top-level `system` field; the
    remaining messages are sent in order.
    """

    def __init__(self, config: LLMConfig, client: httpx.Client | None = None) -> None:
        self.config = config
        self._client = client or httpx.Client(
            base_url=config.base_url or ANTHROPIC_BASE_URL,
            timeout=config.timeout,
        )

    def _payload(self, messages: list[Message]) -> dict:
        system = "\n\n".join(m.content for m in messages if m.role == "system")
        payload = {
            "model": self.config.model,
            "messages": [m.to_chat() for m in messages if m.role != "system"],
            "temperature": self.config.temperature,
            "max_tokens": self.config.max_tokens,
        }
        if system:
            payload["system"] = system
        return payload

    def _complete(self, messages: list[Message]) -> str:
        headers = {
            "x-api-key": self.config.api_key or "",
            "anthropic-version": ANTHROPIC_VERSION,
        }
        data = _post_json(self._client, "/messages", self._payload(messages), "Anthropic", headers)

        texts = [
            block.get("text", "")
            for block in data.get("content") or []
            if block.get("type") == "text"
        ]
        if not texts or not texts[0]:
            raise ProviderError("Anthropic response contained no content")
        return texts[0].strip()

    def send(self, messages: list[Message]) -> str:
        return with_retry(lambda: self._complete(messages), self.config.max_attempts)


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


def create_provider(config: LLMConfig) -> ModelProvider:
    if config.provider in ("openai", "openrouter", "anthropic") and not config.api_key:
        raise ConfigError(f"An API key is required for the '{config.provider}' provider")
    if config.provider == "openai":
        return OpenAIProvider(config)
    if config.provider == "openrouter":
        if config.base_url is None:
            config = config.model_copy(update={"base_url": OPENROUTER_BASE_URL})
        return OpenAIProvider(config)
    if config.provider == "anthropic":
        return AnthropicProvider(config)
    if config.provider == "ollama":
        return OllamaProvider(config)
    raise ConfigError(
        f"Unknown LLM provider: '{config.provider}'. "
        "Supported providers: openai, openrouter, anthropic, ollama"
    )
