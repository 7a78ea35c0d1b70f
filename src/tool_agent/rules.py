# rules.py
# Priority-ordered mutators of the planning context.
#
# Rules run in-process, before the planner calls the model. They have no
# I/O and no error path.

from abc import ABC, abstractmethod
from enum import Enum

from pydantic import BaseModel, Field


class PlanningContext(BaseModel):
    """Scratch state for one planning pass. Mutated in place by each rule."""

    system_prompt: str
    constraints: list[str] = Field(default_factory=list)
    metadata: dict[str, str] = Field(default_factory=dict)

    def add_constraint(self, constraint: str) -> None:
        self.constraints.append(constraint)

    def set_metadata(self, key: str, value: str) -> None:
        self.metadata[key] = value

    def get_metadata(self, key: str) -> str | None:
        return self.metadata.get(key)


class Rule(ABC):
    name: str = ""
    priority: int = 100

    @abstractmethod
    def apply(self, context: PlanningContext) -> None: ...


class RuleEngine:
    """Applies registered rules lowest priority first; ties keep registration order."""

    def __init__(self) -> None:
        self._rules: list[Rule] = []

    def add_rule(self, rule: Rule) -> None:
        self._rules.append(rule)

    def apply_all(self, context: PlanningContext) -> None:
        # sorted() is stable.
        for rule in sorted(self._rules, key=lambda r: r.priority):
            rule.apply(context)

    def __len__(self) -> int:
        return len(self._rules)


# ---------------------------------------------------------------------------
# Builtin rules
# ---------------------------------------------------------------------------


class Tone(str, Enum):
    FORMAL = "formal"
    CASUAL = "casual"
    TECHNICAL = "technical"

    @property
    def guidance(self) -> str:
        return _TONE_GUIDANCE[self]


_TONE_GUIDANCE = {
    Tone.FORMAL: "Use a formal, professional tone. Be polite and respectful.",
    Tone.CASUAL: "Use a casual, conversational tone. Be friendly and approachable.",
    Tone.TECHNICAL: "Use a technical tone with precise terminology. Be accurate and detailed.",
}


class ToneRule(Rule):
    name = "tone"
    priority = 50

    def __init__(self, tone: Tone) -> None:
        self.tone = Tone(tone)

    def apply(self, context: PlanningContext) -> None:
        context.system_prompt += "\n\n" + self.tone.guidance


class ResponseLengthRule(Rule):
    name = "response_length"
    priority = 100

    def __init__(self, max_words: int) -> None:
        self.max_words = max_words

    def apply(self, context: PlanningContext) -> None:
        context.add_constraint(f"Keep responses under {self.max_words} words")
