# display.py
# All terminal output for the agent pipeline.
#
# This module owns presentation entirely. The planner, guardrails, executor
# and agent never format strings for the terminal; they call named
# functions here. Swap this file to change the entire UI.
#
# Colour language:
#   cyan    routing / model calls
#   yellow  guardrail checkpoints
#   green   success / confirmed
#   red     failures, halts, vetoes
#   magenta step execution internals
#
# TOOL_AGENT_QUIET=1 silences all output; from a .env file it applies once
# Agent.from_config has loaded the configuration.

import json
import os

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from tool_agent.models import ExecutionResult, Plan, Reasoning, Response, StepResult, ToolCall

console = Console(quiet=os.getenv("TOOL_AGENT_QUIET") == "1")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _label(tag: str, color: str) -> Text:
    t = Text()
    t.append(f" {tag} ", style=f"bold white on {color}")
    return t


def _mono(value: str, max_len: int = 120) -> str:
    """Truncate and escape untrusted text for use inside markup."""
    if len(value) > max_len:
        value = value[:max_len] + "…"
    return escape(value)


# ---------------------------------------------------------------------------
# Pipeline entry
# ---------------------------------------------------------------------------


def banner(provider: str, model: str, tools: list[str], guardrails: list[str]) -> None:
    console.print()
    console.print(
        Panel.fit(
            "[bold cyan]Tool Agent[/bold cyan]\n"
            "[dim]Plan → Guardrails → Execute[/dim]\n\n"
            f"[dim]Provider   :[/dim] [white]{provider}[/white]\n"
            f"[dim]Model      :[/dim] [white]{model}[/white]\n"
            f"[dim]Tools      :[/dim] [white]{', '.join(tools) or 'none'}[/white]\n"
            f"[dim]Guardrails :[/dim] [white]{', '.join(guardrails) or 'none'}[/white]",
            border_style="cyan",
            padding=(1, 4),
        )
    )


def goal_received(goal: str) -> None:
    console.print()
    console.print(Rule("[cyan]NEW GOAL[/cyan]", style="cyan"))
    console.print(
        Panel(
            f"[white]{escape(goal)}[/white]",
            title=_label("GOAL", "cyan"),
            border_style="cyan",
            padding=(0, 2),
        )
    )


def calling_model(tool_count: int) -> None:
    console.print()
    console.print(
        _label("PLANNER", "cyan"),
        f"[cyan] → Requesting plan from model ({tool_count} tool(s) available)…[/cyan]",
    )


# ---------------------------------------------------------------------------
# Plan display
# ---------------------------------------------------------------------------


def _describe_step(step) -> tuple[str, str]:
    if isinstance(step, ToolCall):
        return f"tool_call:{step.tool_name}", _mono(json.dumps(step.parameters), 60)
    if isinstance(step, Reasoning):
        return "reasoning", _mono(step.text, 60)
    if isinstance(step, Response):
        return "response", _mono(step.text, 60)
    return type(step).__name__, ""


def plan_parsed(plan: Plan) -> None:
    console.print()
    table = Table(
        box=box.SIMPLE_HEAVY,
        border_style="cyan",
        show_header=True,
        header_style="bold cyan",
        padding=(0, 1),
    )
    table.add_column("#", justify="center", width=4)
    table.add_column("Step", style="bold white", width=24)
    table.add_column("Detail", style="dim white")

    for index, step in enumerate(plan.steps, start=1):
        label, detail = _describe_step(step)
        table.add_row(str(index), escape(label), detail)

    console.print(
        Panel(
            table,
            title=_label("PLANNER: PLAN PARSED", "cyan"),
            subtitle=f"[dim]{_mono(plan.reasoning, 100)}[/dim]",
            border_style="cyan",
            padding=(0, 1),
        )
    )


# ---------------------------------------------------------------------------
# Guardrails
# ---------------------------------------------------------------------------


def guardrails_start(count: int) -> None:
    console.print()
    console.print(
        _label("GUARDRAILS", "yellow"),
        f"[yellow] → Validating plan against {count} guardrail(s)…[/yellow]",
    )


def guardrail_pass(name: str) -> None:
    console.print(f"  [bold green]✓[/bold green] [yellow]{name}[/yellow]")


def guardrail_fail(name: str, reason: str) -> None:
    console.print()
    console.print(
        Panel(
            f"[bold red]Plan rejected by '{name}'.[/bold red]\n\n[white]{escape(reason)}[/white]",
            title=_label("GUARDRAIL: FAIL ✗", "red"),
            border_style="red",
            padding=(0, 2),
        )
    )


# ---------------------------------------------------------------------------
# Execution loop
# ---------------------------------------------------------------------------


def execution_start(total: int) -> None:
    console.print()
    console.print(Rule(f"[cyan]EXECUTION — {total} step(s)[/cyan]", style="cyan"))


def step_start(index: int, total: int, label: str) -> None:
    console.print(f"[bold cyan]  STEP [{index + 1}/{total}][/bold cyan]  [white]{escape(label)}[/white]")


def step_finished(result: StepResult) -> None:
    if result.success:
        console.print(f"  [magenta]Output[/magenta]   [white]{_mono(result.output, 140)}[/white]")
    else:
        console.print(f"  [bold red]✗ Failed[/bold red] [white]{_mono(result.output, 140)}[/white]")


def tool_not_found(tool_name: str) -> None:
    console.print(
        Panel(
            f"[bold red]Tool [white]{escape(repr(tool_name))}[/white] is not registered.[/bold red]\n"
            "[dim]The plan requested a tool outside the registry. Halting.[/dim]",
            title=_label("TOOL NOT FOUND ✗", "red"),
            border_style="red",
            padding=(0, 2),
        )
    )


def execution_summary(result: ExecutionResult) -> None:
    console.print()
    table = Table(
        box=box.SIMPLE_HEAVY,
        border_style="dim",
        show_header=True,
        header_style="bold dim",
        padding=(0, 1),
    )
    table.add_column("#", justify="center", width=4)
    table.add_column("Step", width=24)
    table.add_column("OK", justify="center", width=4)
    table.add_column("Output", style="dim white")

    for index, step in enumerate(result.step_results, start=1):
        ok = "[bold green]✓[/bold green]" if step.success else "[bold red]✗[/bold red]"
        table.add_row(str(index), escape(step.step_type), ok, _mono(step.output, 60))

    console.print(
        Panel(
            table,
            title="[dim]EXECUTION SUMMARY[/dim]",
            border_style="dim",
            padding=(0, 1),
        )
    )


# ---------------------------------------------------------------------------
# Final result
# ---------------------------------------------------------------------------


def final_result(result: str) -> None:
    console.print()
    console.print(
        Panel(
            f"[white]{escape(result)}[/white]",
            title=_label("RESULT", "green"),
            border_style="green",
            padding=(1, 2),
        )
    )
    console.print()


def halt(reason: str) -> None:
    console.print()
    console.print(
        Panel(
            f"[bold white]{escape(reason)}[/bold white]",
            title=_label("HALT", "red"),
            border_style="red",
            padding=(0, 2),
        )
    )
    console.print()
