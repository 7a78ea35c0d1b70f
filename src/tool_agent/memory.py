# memory.py
# Conversation storage. The executor only appends; nothing in the planning
# path reads it back.

from typing import Protocol

from tool_agent.models import Message, Role


class MemoryStore(Protocol):
    def append(self, role: Role, content: str) -> None: ...

    def recent(self, limit: int) -> list[Message]: ...

    def clear(self) -> None: ...


class InMemoryStore:
    """List-backed store. Keeps at most `max_messages`, dropping the oldest."""

    def __init__(self, max_messages: int | None = None) -> None:
        self.max_messages = max_messages
        self._messages: list[Message] = []

    def append(self, role: Role, content: str) -> None:
        self._messages.append(Message(role=role, content=content))
        if self.max_messages is not None and len(self._messages) > self.max_messages:
            del self._messages[: len(self._messages) - self.max_messages]

    def recent(self, limit: int) -> list[Message]:
        """Last `limit` messages, oldest first."""
        if limit <= 0:
            return []
        return list(self._messages[-limit:])

    def clear(self) -> None:
        self._messages.clear()

    def __len__(self) -> int:
        return len(self._messages)
