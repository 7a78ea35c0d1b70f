import os

# Keep the rich console silent while tests run; display reads this at import.
os.environ.setdefault("TOOL_AGENT_QUIET", "1")

import pytest

from tool_agent.models import Message


class ScriptedProvider:
    """Model provider returning canned responses in order and recording each call."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls: list[list[Message]] = []

    def send(self, messages):
        self.calls.append(list(messages))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def scripted_provider():
    return ScriptedProvider
