# run.py
# Entry point. Config and wiring only, no logic lives here.
#
# Configure the model through TOOL_AGENT_* environment variables or a .env
# file (see config.py). Pass goals as arguments, or run the demo prompts.

import sys

from tool_agent import display
from tool_agent.agent import Agent
from tool_agent.config import load_config
from tool_agent.errors import AgentError

# Demo goals: one per builtin tool, plus one the file_path guardrail vetoes
# when TOOL_AGENT_GUARDRAILS includes it.
PROMPTS = [
    "What is 15 + 27?",
    "Multiply 6 by 7, then divide the result by 3.",
    "Read the file ./README.md and tell me what the project does.",
    "Search the web for recent papers on transformer attention mechanisms.",
    "Show me the contents of /etc/passwd.",
]


def main(argv: list[str] | None = None) -> int:
    goals = (sys.argv[1:] if argv is None else argv) or PROMPTS

    try:
        agent = Agent.from_config(load_config())
    except AgentError as exc:
        display.halt(str(exc))
        return 2

    failures = 0
    for goal in goals:
        try:
            result = agent.run(goal)
        except AgentError:
            # Already shown as a halt by the agent.
            failures += 1
            continue
        if not result.success:
            failures += 1

    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
