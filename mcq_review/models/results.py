# =============================================================================
# Agent Results & Review Result
# =============================================================================
#
# One result model per agent kind. Each is validated straight from the JSON
# record the model returned (camelCase keys, unknown keys ignored), so a
# response missing the agent's key field fails validation and is treated
# like any other unusable output: it triggers the fallback hop.
#
# Every kind also defines degraded(): the fixed low-confidence result an
# agent returns when all of its attempts fail. Degraded results carry a
# failure_reason, so synthesis can treat "no usable signal" and "agent did
# not run" the same way.
# =============================================================================

from __future__ import annotations

from typing import Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

from mcq_review.models.question import AgentKind, ExecutionPlan, Question


def _lower(value: Any) -> Any:
    return value.strip().lower() if isinstance(value, str) else value


def _text_list(value: Any) -> Any:
    # Thresholds come back as numbers as often as strings
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value if item is not None]
    if isinstance(value, str):
        return [value] if value.strip() else []
    return value


class AgentResult(BaseModel):
    """Common base: wire format settings and the failure marker."""

    kind: ClassVar[AgentKind]

    failure_reason: str | None = None

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    @field_validator("*", mode="before")
    @classmethod
    def null_to_default(cls, value: Any, info: ValidationInfo) -> Any:
        # Models send null for fields that do not apply; key fields stay required
        if value is not None or info.field_name is None:
            return value
        field = cls.model_fields[info.field_name]
        if field.is_required():
            return value
        return field.get_default(call_default_factory=True)

    @property
    def is_degraded(self) -> bool:
        return self.failure_reason is not None

    @classmethod
    def degraded(cls, question: Question, reason: str) -> AgentResult:
        """Fixed result returned when every attempt of the agent failed."""
        raise NotImplementedError

    def summary_line(self) -> str:
        """One human-readable line for the review log."""
        raise NotImplementedError


# ---------------------------------------------------------------------------
# Stage 1
# ---------------------------------------------------------------------------


class AnswerVerification(AgentResult):
    kind: ClassVar[AgentKind] = AgentKind.ANSWER_VERIFIER

    correct_answer: str
    confidence: str = "low"
    reasoning: str = ""
    manual_answer_correct: bool | None = None
    ai_answer_correct: bool | None = None
    # both_correct / both_wrong / manual_correct / ai_correct / uncertain
    verdict: str
    needs_human_review: bool = False
    human_review_reason: str = ""

    @field_validator("confidence", "verdict", mode="before")
    @classmethod
    def normalise_labels(cls, value: Any) -> Any:
        return _lower(value)

    @field_validator("correct_answer", mode="before")
    @classmethod
    def normalise_letter(cls, value: Any) -> Any:
        return value.strip().upper() if isinstance(value, str) else value

    @classmethod
    def degraded(cls, question: Question, reason: str) -> AnswerVerification:
        return cls(
            correct_answer="?",
            confidence="low",
            verdict="uncertain",
            needs_human_review=True,
            human_review_reason=f"Agent failed: {reason}",
            failure_reason=reason,
        )

    def summary_line(self) -> str:
        return (
            f"✅ Answer Verifier: {self.correct_answer} "
            f"({self.confidence} confidence) — {self.verdict}"
        )


class DifficultyRating(AgentResult):
    kind: ClassVar[AgentKind] = AgentKind.DIFFICULTY_RATER

    difficulty: str
    reasoning: str = ""
    current_rating_correct: bool = True
    suggested_change: str = "keep"

    @classmethod
    def degraded(cls, question: Question, reason: str) -> DifficultyRating:
        return cls(
            difficulty=question.difficulty or "Medium",
            reasoning="Agent failed",
            current_rating_correct=True,
            suggested_change="keep",
            failure_reason=reason,
        )

    def summary_line(self) -> str:
        return f"📊 Difficulty Rater: {self.difficulty} ({self.suggested_change})"


class UnitPlacement(AgentResult):
    kind: ClassVar[AgentKind] = AgentKind.UNIT_CHECKER

    belongs_in_unit: bool
    confidence: str = "low"
    reasoning: str = ""
    suggested_unit: str = ""
    # "Static Question" or "Year-Dependent"
    question_type: str = "Static Question"
    year_dependent_reason: str = ""

    @field_validator("confidence", mode="before")
    @classmethod
    def normalise_labels(cls, value: Any) -> Any:
        return _lower(value)

    @classmethod
    def degraded(cls, question: Question, reason: str) -> UnitPlacement:
        return cls(
            belongs_in_unit=True,
            confidence="low",
            reasoning="Agent failed",
            suggested_unit=question.unit,
            question_type="Static Question",
            failure_reason=reason,
        )

    def summary_line(self) -> str:
        if self.belongs_in_unit:
            return "📂 Unit Checker: ✓ correct unit"
        return f"📂 Unit Checker: ✗ wrong unit → {self.suggested_unit}"


# ---------------------------------------------------------------------------
# Stage 2
# ---------------------------------------------------------------------------


class ConflictResolution(AgentResult):
    kind: ClassVar[AgentKind] = AgentKind.CONFLICT_ANALYZER

    # manual_correct / ai_correct / both_wrong / genuinely_ambiguous
    resolution: str
    final_recommended_answer: str = ""
    # data_entry_error / outdated_law / ai_hallucination /
    # ambiguous_question / unclear
    conflict_type: str = "unclear"
    explanation: str = ""
    escalate_to_human: bool = False
    escalation_reason: str = ""

    @field_validator("resolution", "conflict_type", mode="before")
    @classmethod
    def normalise_labels(cls, value: Any) -> Any:
        return _lower(value)

    @field_validator("final_recommended_answer", mode="before")
    @classmethod
    def normalise_letter(cls, value: Any) -> Any:
        return value.strip().upper() if isinstance(value, str) else value

    @classmethod
    def degraded(cls, question: Question, reason: str) -> ConflictResolution:
        return cls(
            resolution="genuinely_ambiguous",
            final_recommended_answer="?",
            conflict_type="unclear",
            escalate_to_human=True,
            escalation_reason=reason,
            failure_reason=reason,
        )

    def summary_line(self) -> str:
        return f"⚡ Conflict Analyzer: {self.resolution} — {self.conflict_type}"


class ExplanationCritique(AgentResult):
    kind: ClassVar[AgentKind] = AgentKind.EXPLANATION_CRITIC

    # Excellent / Good / Needs Improvement / Poor, plus Missing and Unknown
    quality: str
    score: float = 0
    strengths: str = ""
    missing_elements: list[str] = Field(default_factory=list)
    improvement_suggestion: str = ""
    needs_calculation: bool = False
    calculation_note: str = ""

    @field_validator("missing_elements", mode="before")
    @classmethod
    def coerce_text_list(cls, value: Any) -> Any:
        return _text_list(value)

    @classmethod
    def missing(cls) -> ExplanationCritique:
        """Result for a question that has no explanation at all."""
        return cls(
            quality="Missing",
            score=0,
            missing_elements=["Full explanation needed"],
            improvement_suggestion=(
                "No explanation exists — needs to be written from scratch"
            ),
            needs_calculation=False,
        )

    @classmethod
    def degraded(cls, question: Question, reason: str) -> ExplanationCritique:
        return cls(
            quality="Unknown",
            score=0,
            improvement_suggestion="Agent failed — manual review needed",
            failure_reason=reason,
        )

    def summary_line(self) -> str:
        return f"📝 Explanation Critic: {self.quality} ({self.score:g}/10)"


class MemoryAid(AgentResult):
    kind: ClassVar[AgentKind] = AgentKind.MEMORY_TRICK_GENERATOR

    memory_trick: str
    # acronym / rhyme / story / visual / association
    mnemonic_type: str = Field(default="none", alias="type")
    key_concept_summary: str = ""

    @classmethod
    def degraded(cls, question: Question, reason: str) -> MemoryAid:
        return cls(
            memory_trick="",
            mnemonic_type="none",
            key_concept_summary="",
            failure_reason=reason,
        )

    def summary_line(self) -> str:
        return f"💡 Memory Trick: [{self.mnemonic_type}] {self.memory_trick}"


class CalculationCheck(AgentResult):
    kind: ClassVar[AgentKind] = AgentKind.CALCULATION_CHECKER

    requires_calculation: bool
    calculation_steps: str = ""
    thresholds_involved: list[str] = Field(default_factory=list)
    formula_used: str = ""

    @field_validator("thresholds_involved", mode="before")
    @classmethod
    def coerce_text_list(cls, value: Any) -> Any:
        return _text_list(value)

    @classmethod
    def degraded(cls, question: Question, reason: str) -> CalculationCheck:
        return cls(
            requires_calculation=False,
            calculation_steps="",
            thresholds_involved=[],
            formula_used="",
            failure_reason=reason,
        )

    def summary_line(self) -> str:
        if self.requires_calculation:
            return "🔢 Calculation Checker: Calculation needed"
        return "🔢 Calculation Checker: No calculation needed"


# ---------------------------------------------------------------------------
# Review Result
# ---------------------------------------------------------------------------


class ReviewResult(BaseModel):
    """
    Synthesis of every agent result for one question.

    status="error" means the review itself failed; agent fields are then
    all None and query_summary names the system error.
    """

    code: str = ""
    status: Literal["done", "error"]
    needs_human: bool
    has_conflict: bool
    final_answer: str
    query_summary: str
    elapsed_seconds: float = 0.0
    log: list[str] = Field(default_factory=list)
    plan: ExecutionPlan | None = None
    agents_run: list[AgentKind] = Field(default_factory=list)

    answer_verification: AnswerVerification | None = None
    conflict_resolution: ConflictResolution | None = None
    difficulty_rating: DifficultyRating | None = None
    unit_placement: UnitPlacement | None = None
    explanation_critique: ExplanationCritique | None = None
    memory_aid: MemoryAid | None = None
    calculation_check: CalculationCheck | None = None

    # Display fields
    difficulty: str = ""
    difficulty_changed: bool = False

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )
