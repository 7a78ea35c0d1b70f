# guardrails.py
# Pre-execution policy checks. A guardrail either approves a plan or raises
# GuardrailViolation; the registry stops at the first veto.
#
# Guardrails run after planning and before any tool executes, so a veto
# leaves no side effects behind (except rate-limit quota, see below).

import os
import threading
import time
from abc import ABC, abstractmethod
from collections import deque
from pathlib import Path
from typing import Callable, Iterable

from tool_agent import display
from tool_agent.errors import ConfigError, GuardrailViolation
from tool_agent.models import Plan


class Guardrail(ABC):
    name: str = ""

    @abstractmethod
    def validate(self, plan: Plan) -> None:
        """Return if the plan is acceptable, raise GuardrailViolation otherwise."""

    def violation(self, message: str) -> GuardrailViolation:
        return GuardrailViolation(message, guardrail=self.name)


class GuardrailRegistry:
    """Ordered chain of guardrails. An empty chain approves every plan."""

    def __init__(self, guardrails: Iterable[Guardrail] = ()) -> None:
        self._guardrails: list[Guardrail] = list(guardrails)

    def register(self, guardrail: Guardrail) -> None:
        self._guardrails.append(guardrail)

    def names(self) -> list[str]:
        return [g.name for g in self._guardrails]

    def validate_all(self, plan: Plan) -> None:
        if not self._guardrails:
            return

        display.guardrails_start(len(self._guardrails))
        for guardrail in self._guardrails:
            try:
                guardrail.validate(plan)
            except GuardrailViolation as exc:
                display.guardrail_fail(guardrail.name, exc.message)
                raise
            display.guardrail_pass(guardrail.name)

    def __len__(self) -> int:
        return len(self._guardrails)


# ---------------------------------------------------------------------------
# File path guardrail
# ---------------------------------------------------------------------------


def _canonical(path: Path) -> Path:
    """Resolve symlinks and '..' as far as the filesystem allows."""
    try:
        return path.resolve(strict=False)
    except (OSError, RuntimeError):
        return path


def _literal(path: Path) -> Path:
    return Path(os.path.normpath(path))


class FilePathGuardrail(Guardrail):
    """
    Confines file-access tools to a set of allowed root directories.

    Both the target and each root are compared canonically and literally,
    so a target that does not exist yet can still match a root by prefix.
    """

    name = "file_path"

    def __init__(
        self,
        allowed_paths: Iterable[str | Path],
        tool_names: Iterable[str] = ("file_reader",),
    ) -> None:
        self.allowed_paths = [Path(p) for p in allowed_paths]
        self.tool_names = frozenset(tool_names)

    def _extract_path(self, tool_name: str, parameters: object) -> Path:
        value = parameters.get("file_path") if isinstance(parameters, dict) else None
        if not isinstance(value, str) or not value:
            raise self.violation(f"{tool_name} tool call missing 'file_path' parameter")
        return Path(value)

    def is_allowed(self, path: Path) -> bool:
        target = _canonical(path)
        literal = _literal(path)
        for allowed in self.allowed_paths:
            if target.is_relative_to(_canonical(allowed)):
                return True
            # A relative root like "." has no parts, so ".." must be excluded.
            if ".." not in literal.parts and literal.is_relative_to(_literal(allowed)):
                return True
        return False

    def validate(self, plan: Plan) -> None:
        for call in plan.tool_calls():
            if call.tool_name not in self.tool_names:
                continue
            path = self._extract_path(call.tool_name, call.parameters)
            if not self.is_allowed(path):
                allowed = [str(p) for p in self.allowed_paths]
                raise self.violation(f"File path not allowed: {path}. Allowed paths: {allowed}")


# ---------------------------------------------------------------------------
# Rate limit guardrail
# ---------------------------------------------------------------------------


class RateLimitGuardrail(Guardrail):
    """
    Sliding-window ceiling on tool calls per minute.

    Validation reserves quota: an accepted plan's tool calls are committed
    to the window even if the plan is never executed. The whole
    purge-check-commit sequence runs under one lock so concurrent
    validations cannot both claim the last slots.
    """

    name = "rate_limit"

    def __init__(
        self,
        max_calls_per_minute: int,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_calls_per_minute = max_calls_per_minute
        self.window_seconds = window_seconds
        self._clock = clock
        self._history: deque[float] = deque()
        self._lock = threading.Lock()

    def _purge(self, now: float) -> None:
        cutoff = now - self.window_seconds
        while self._history and self._history[0] <= cutoff:
            self._history.popleft()

    def current_call_count(self) -> int:
        with self._lock:
            self._purge(self._clock())
            return len(self._history)

    def validate(self, plan: Plan) -> None:
        requested = sum(1 for _ in plan.tool_calls())
        with self._lock:
            now = self._clock()
            self._purge(now)
            current = len(self._history)
            if current + requested > self.max_calls_per_minute:
                remaining = max(self.max_calls_per_minute - current, 0)
                raise self.violation(
                    f"Rate limit exceeded: plan contains {requested} tool calls, "
                    f"but only {remaining} calls remaining in current minute "
                    f"(limit: {self.max_calls_per_minute} per minute, current: {current})"
                )
            self._history.extend([now] * requested)


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


def build_guardrails(
    names: Iterable[str],
    allowed_paths: Iterable[str | Path] = (),
    rate_limit: int = 100,
) -> GuardrailRegistry:
    """Registry holding the named guardrails, in the order given."""
    registry = GuardrailRegistry()
    for name in names:
        if name == FilePathGuardrail.name:
            registry.register(FilePathGuardrail(allowed_paths))
        elif name == RateLimitGuardrail.name:
            registry.register(RateLimitGuardrail(rate_limit))
        else:
            raise ConfigError(
                f"Unknown guardrail: '{name}'. Supported guardrails: file_path, rate_limit"
            )
    return registry
