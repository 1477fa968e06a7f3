# =============================================================================
# Review Pipeline — LangGraph Coordinator for One Question
# =============================================================================
#
# GRAPH TOPOLOGY:
#   START ──▶ plan ──▶ stage1 ──▶ stage2 ──▶ synthesise ──▶ END
#
#   plan        orchestrator produces the ExecutionPlan
#   stage1      answer verifier, difficulty rater, unit checker
#               (asyncio.gather, each gated by plan membership)
#   stage2      conflict analyzer, explanation critic, memory trick
#               generator, calculation checker (asyncio.gather, each gated
#               by plan membership OR its forced trigger)
#   synthesise  merge all results into one ReviewResult
#
# DESIGN DECISION: Stage barrier as a graph edge.
# The conflict analyzer needs the verifier's conclusion, so stage2 is a
# separate node that only starts once every stage1 agent has settled.
# Agents never raise, so a failing agent cannot abort its stage.
#
# DESIGN DECISION: Explicit inclusion predicates.
# Each conditional agent has one function deciding whether it runs,
# evaluated once per stage. The plan's agent set is advisory.
#
# DESIGN DECISION: Plain TypedDict state, graph compiled once at module
# level, no checkpointer (state holds the client and log sink objects).
#
# Batches are strictly sequential, with a pause between questions to stay
# under upstream rate limits.
# =============================================================================

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, replace
from typing import AsyncIterator, Callable, Sequence

from langgraph.graph import END, START, StateGraph
from typing_extensions import TypedDict

from mcq_review.agents.answer import analyse_conflict, verify_answer
from mcq_review.agents.classification import check_unit, rate_difficulty
from mcq_review.agents.explanation import check_calculation, critique_explanation
from mcq_review.agents.memory import generate_memory_trick
from mcq_review.agents.orchestrator import orchestrate
from mcq_review.config import settings
from mcq_review.errors import ReviewSystemError
from mcq_review.models.question import (
    OPTION_LETTERS,
    AgentKind,
    ExecutionPlan,
    Question,
)
from mcq_review.models.results import (
    AnswerVerification,
    CalculationCheck,
    ConflictResolution,
    DifficultyRating,
    ExplanationCritique,
    MemoryAid,
    ReviewResult,
    UnitPlacement,
)
from mcq_review.services.inference import InferenceBackend, get_inference_client
from mcq_review.services.log_sink import LogSink

logger = logging.getLogger(__name__)

# Explanation qualities that earn an improvement notice
_WEAK_EXPLANATION = {"needs improvement", "poor", "missing"}


# ---------------------------------------------------------------------------
# State
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AgentResults:
    """Results gathered so far. None means the agent did not run."""

    answer_verification: AnswerVerification | None = None
    difficulty_rating: DifficultyRating | None = None
    unit_placement: UnitPlacement | None = None
    conflict_resolution: ConflictResolution | None = None
    explanation_critique: ExplanationCritique | None = None
    memory_aid: MemoryAid | None = None
    calculation_check: CalculationCheck | None = None

    def agents_run(self) -> list[AgentKind]:
        results = (
            self.answer_verification,
            self.difficulty_rating,
            self.unit_placement,
            self.conflict_resolution,
            self.explanation_critique,
            self.memory_aid,
            self.calculation_check,
        )
        return [r.kind for r in results if r is not None]


class ReviewState(TypedDict, total=False):
    """State flowing through the review graph."""

    # --- Input ---
    question: Question
    client: InferenceBackend
    log: LogSink
    started_at: float

    # --- Intermediate ---
    plan: ExecutionPlan
    results: AgentResults

    # --- Output ---
    review: ReviewResult


# ---------------------------------------------------------------------------
# Inclusion Predicates
# ---------------------------------------------------------------------------


def answers_disagree(
    question: Question,
    verification: AnswerVerification | None,
) -> bool:
    """Recorded answers differ, or the verifier could not decide."""
    return (
        question.manual_answer != question.ai_answer
        or question.manual_answer != question.final_answer
        or (verification is not None and verification.verdict == "uncertain")
    )


def wants_conflict_analysis(
    plan: ExecutionPlan,
    question: Question,
    verification: AnswerVerification | None,
) -> bool:
    # Structurally requires the verifier's output
    if verification is None:
        return False
    return (
        plan.includes(AgentKind.CONFLICT_ANALYZER)
        or plan.has_answer_conflict
        or answers_disagree(question, verification)
    )


def wants_calculation_check(plan: ExecutionPlan) -> bool:
    return plan.includes(AgentKind.CALCULATION_CHECKER) or plan.is_numerical


async def _skipped() -> None:
    return None


# ---------------------------------------------------------------------------
# Node Functions
# ---------------------------------------------------------------------------


async def plan_node(state: ReviewState) -> dict:
    plan = await orchestrate(state["question"], state["client"], state["log"])
    return {"plan": plan}


async def stage_one_node(state: ReviewState) -> dict:
    """Independent agents, run concurrently."""
    question, client, log = state["question"], state["client"], state["log"]
    plan = state["plan"]

    verification, difficulty, unit = await asyncio.gather(
        verify_answer(question, client, log)
        if plan.includes(AgentKind.ANSWER_VERIFIER) else _skipped(),
        rate_difficulty(question, client, log)
        if plan.includes(AgentKind.DIFFICULTY_RATER) else _skipped(),
        check_unit(question, client, log)
        if plan.includes(AgentKind.UNIT_CHECKER) else _skipped(),
    )

    return {
        "results": AgentResults(
            answer_verification=verification,
            difficulty_rating=difficulty,
            unit_placement=unit,
        ),
    }


async def stage_two_node(state: ReviewState) -> dict:
    """Dependent and conditional agents, run concurrently after stage 1."""
    question, client, log = state["question"], state["client"], state["log"]
    plan = state["plan"]
    results = state["results"]
    verification = results.answer_verification

    conflict, critique, memory, calculation = await asyncio.gather(
        analyse_conflict(question, verification, client, log)
        if wants_conflict_analysis(plan, question, verification)
        else _skipped(),
        critique_explanation(question, client, log)
        if plan.includes(AgentKind.EXPLANATION_CRITIC) else _skipped(),
        generate_memory_trick(question, client, log)
        if plan.includes(AgentKind.MEMORY_TRICK_GENERATOR) else _skipped(),
        check_calculation(question, client, log)
        if wants_calculation_check(plan) else _skipped(),
    )

    return {
        "results": replace(
            results,
            conflict_resolution=conflict,
            explanation_critique=critique,
            memory_aid=memory,
            calculation_check=calculation,
        ),
    }


async def synthesise_node(state: ReviewState) -> dict:
    review = synthesise(
        question=state["question"],
        plan=state["plan"],
        results=state["results"],
        log=state["log"],
        elapsed=time.monotonic() - state["started_at"],
    )
    return {"review": review}


# ---------------------------------------------------------------------------
# Synthesis
# ---------------------------------------------------------------------------


def synthesise(
    question: Question,
    plan: ExecutionPlan,
    results: AgentResults,
    log: LogSink,
    elapsed: float,
) -> ReviewResult:
    """Merge agent results into the final verdict. Deterministic."""
    verification = results.answer_verification
    conflict = results.conflict_resolution
    difficulty = results.difficulty_rating
    unit = results.unit_placement
    critique = results.explanation_critique
    calculation = results.calculation_check

    final_answer = (
        _option_letter(conflict.final_recommended_answer if conflict else "")
        or _option_letter(verification.correct_answer if verification else "")
        or question.final_answer
        or question.manual_answer
    )

    needs_human = bool(
        (verification is not None and (
            verification.needs_human_review
            or verification.confidence == "low"
            or verification.verdict == "uncertain"
        ))
        or (conflict is not None and conflict.escalate_to_human)
    )

    has_conflict = answers_disagree(question, verification)

    parts: list[str] = []
    if needs_human:
        reason = (
            (verification.human_review_reason if verification else "")
            or (conflict.escalation_reason if conflict else "")
            or "Uncertain answer"
        )
        parts.append(f"⚠ HUMAN REVIEW NEEDED: {reason}")
    if conflict is not None and has_conflict:
        parts.append(
            f"Answer conflict: {conflict.conflict_type} — {conflict.explanation}"
        )
    if difficulty is not None and not difficulty.current_rating_correct:
        parts.append(f"Difficulty: change to {difficulty.difficulty}")
    if unit is not None and not unit.belongs_in_unit:
        parts.append(f'Unit mismatch: move to "{unit.suggested_unit}"')
    if critique is not None and critique.quality.strip().lower() in _WEAK_EXPLANATION:
        parts.append(f"Explanation: {critique.improvement_suggestion}")
    if calculation is not None and calculation.requires_calculation:
        parts.append(f"Add calculation: {calculation.calculation_steps}")
    if not parts:
        parts.append("Kept as is — all checks passed")

    agents_run = results.agents_run()
    log.append(f"✓ Complete in {elapsed:.1f}s — {len(agents_run)} agents ran")

    return ReviewResult(
        code=question.code,
        status="done",
        needs_human=needs_human,
        has_conflict=has_conflict,
        final_answer=final_answer,
        query_summary=" | ".join(parts),
        elapsed_seconds=round(elapsed, 1),
        log=log.lines,
        plan=plan,
        agents_run=agents_run,
        answer_verification=verification,
        conflict_resolution=conflict,
        difficulty_rating=difficulty,
        unit_placement=unit,
        explanation_critique=critique,
        memory_aid=results.memory_aid,
        calculation_check=calculation,
        difficulty=difficulty.difficulty if difficulty else question.difficulty,
        difficulty_changed=(
            difficulty is not None and not difficulty.current_rating_correct
        ),
    )


def _option_letter(value: str) -> str:
    """Return value if it names an option, else "" (degraded results use "?")."""
    letter = value.strip().upper()
    return letter if letter in OPTION_LETTERS else ""


# ---------------------------------------------------------------------------
# Graph Assembly
# ---------------------------------------------------------------------------

_builder = StateGraph(ReviewState)
_builder.add_node("plan", plan_node)
_builder.add_node("stage1", stage_one_node)
_builder.add_node("stage2", stage_two_node)
_builder.add_node("synthesise", synthesise_node)

_builder.add_edge(START, "plan")
_builder.add_edge("plan", "stage1")
_builder.add_edge("stage1", "stage2")
_builder.add_edge("stage2", "synthesise")
_builder.add_edge("synthesise", END)

graph = _builder.compile()


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def review_question(
    question: Question,
    *,
    client: InferenceBackend | None = None,
    log: LogSink | None = None,
) -> ReviewResult:
    """
    Review one question end to end.

    Never raises an Exception: a failure outside every agent's own
    fallback produces a ReviewResult with status="error" that asks for
    human review.

    Args:
        question: The question to review.
        client: Inference backend override (tests, alternative catalogs).
        log: Log sink to append progress lines to. Pass one with a
            listener to stream lines while the review runs.
    """
    if client is None:
        client = get_inference_client()
    if log is None:
        log = LogSink()
    started_at = time.monotonic()

    try:
        return await _run_graph(question, client, log, started_at)
    except ReviewSystemError as e:
        log.append(f"💥 System error: {e}")
        return ReviewResult(
            code=question.code,
            status="error",
            needs_human=True,
            has_conflict=False,
            final_answer=question.reference_answer,
            query_summary=f"⚠ SYSTEM ERROR — needs human review: {e}",
            elapsed_seconds=round(time.monotonic() - started_at, 1),
            log=log.lines,
            difficulty=question.difficulty,
        )


async def _run_graph(
    question: Question,
    client: InferenceBackend,
    log: LogSink,
    started_at: float,
) -> ReviewResult:
    logger.info("Reviewing question %s", question.code or "(no code)")
    try:
        final_state = await graph.ainvoke({
            "question": question,
            "client": client,
            "log": log,
            "started_at": started_at,
        })
    except Exception as e:
        logger.exception("Review pipeline failed for question %s", question.code)
        raise ReviewSystemError(str(e) or type(e).__name__) from e
    return final_state["review"]


async def iter_reviews(
    questions: Sequence[Question],
    *,
    client: InferenceBackend | None = None,
    pause_seconds: float | None = None,
    log_factory: Callable[[int], LogSink] | None = None,
) -> AsyncIterator[tuple[int, ReviewResult]]:
    """
    Review questions one after another, yielding (index, result).

    Each question's pipeline completes before the next starts. A failed
    question yields an error result and the batch continues.
    """
    if client is None:
        client = get_inference_client()
    pause = settings.batch_pause_seconds if pause_seconds is None else pause_seconds

    for index, question in enumerate(questions):
        log = log_factory(index) if log_factory is not None else LogSink()
        result = await review_question(question, client=client, log=log)
        yield index, result

        if index < len(questions) - 1 and pause > 0:
            await asyncio.sleep(pause)


async def review_batch(
    questions: Sequence[Question],
    *,
    client: InferenceBackend | None = None,
    pause_seconds: float | None = None,
    log_factory: Callable[[int], LogSink] | None = None,
) -> list[ReviewResult]:
    """Review a batch; result i belongs to questions[i]."""
    return [
        result
        async for _, result in iter_reviews(
            questions,
            client=client,
            pause_seconds=pause_seconds,
            log_factory=log_factory,
        )
    ]
