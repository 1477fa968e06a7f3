# =============================================================================
# Review Input & Plan — Question, AgentKind, ExecutionPlan
# =============================================================================
#
# Question mirrors the normalised spreadsheet row handed over by the upload
# layer. Wire keys are camelCase (optionA, rightOption, finalExplanation)
# and snake_case names are accepted too. Instances are frozen: the review
# core reads a question, never rewrites it.
# =============================================================================

from __future__ import annotations

import enum
import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

OPTION_LETTERS = ("A", "B", "C", "D")

# Currency, percentage and quantity markers
_NUMERIC_MARKERS = re.compile(r"\$|million|thousand|percent|%")


class AgentKind(str, enum.Enum):
    """
    Identifiers of the specialist agents the orchestrator can schedule.

    Values are the names the orchestrator prompt advertises to the model.
    """

    ANSWER_VERIFIER = "answer_verifier"
    CONFLICT_ANALYZER = "conflict_analyzer"
    DIFFICULTY_RATER = "difficulty_rater"
    UNIT_CHECKER = "unit_checker"
    EXPLANATION_CRITIC = "explanation_critic"
    MEMORY_TRICK_GENERATOR = "memory_trick_generator"
    CALCULATION_CHECKER = "calculation_checker"


class Question(BaseModel):
    """One multiple-choice exam question under review."""

    code: str = ""
    chapter: str = ""
    unit: str = ""
    question: str = Field(..., min_length=1)
    option_a: str = ""
    option_b: str = ""
    option_c: str = ""
    option_d: str = ""

    # Answer columns: set by hand, produced by an earlier AI pass, and the
    # value currently published
    manual_answer: str = Field(default="", alias="rightOption")
    ai_answer: str = ""
    final_answer: str = ""

    final_explanation: str = ""
    feedback: str = ""  # legacy explanation column
    difficulty: str = ""
    category: str = ""
    queries: str = ""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    @property
    def explanation(self) -> str:
        return self.final_explanation or self.feedback

    @property
    def reference_answer(self) -> str:
        """The answer the data currently treats as correct."""
        return self.final_answer or self.manual_answer

    def option(self, letter: str) -> str:
        """Text of option A-D, or "" for anything else."""
        return {
            "A": self.option_a,
            "B": self.option_b,
            "C": self.option_c,
            "D": self.option_d,
        }.get(letter.strip().upper(), "")

    def options_line(self) -> str:
        return (
            f"A) {self.option_a}  B) {self.option_b}  "
            f"C) {self.option_c}  D) {self.option_d}"
        )

    def looks_numerical(self) -> bool:
        return bool(_NUMERIC_MARKERS.search(self.question))


class ExecutionPlan(BaseModel):
    """
    Which agents the orchestrator wants for one question.

    The agent set is advisory: the pipeline adds the conflict analyzer and
    calculation checker on its own triggers.
    """

    agents: frozenset[AgentKind] = Field(default_factory=frozenset)
    rationale: str = Field(default="", alias="reasoning")
    has_answer_conflict: bool = False
    is_numerical: bool = False

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    @field_validator("agents", mode="before")
    @classmethod
    def known_agents_only(cls, value: Any) -> Any:
        # Models sometimes invent agents or list the orchestrator itself
        if isinstance(value, (list, tuple, set, frozenset)):
            known = {kind.value for kind in AgentKind}
            return frozenset(
                name for name in (
                    v.value if isinstance(v, AgentKind) else str(v).strip()
                    for v in value
                )
                if name in known
            )
        return value

    def includes(self, kind: AgentKind) -> bool:
        return kind in self.agents

    @property
    def agent_names(self) -> list[str]:
        return sorted(kind.value for kind in self.agents)
