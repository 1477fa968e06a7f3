# =============================================================================
# Orchestrator — Per-Question Execution Plan
# =============================================================================
#
# Reads one question and decides which specialist agents should review it,
# plus two flags the pipeline uses to force conditional agents in:
#   hasAnswerConflict → conflict_analyzer
#   isNumerical       → calculation_checker
#
# DESIGN DECISION: No fallback hop for planning.
# Planning is a single fast-tier call. If it fails in any expected way
# (credential, transport, unusable output) the rule-based default plan is
# just as good as a second model's plan and costs nothing.
# =============================================================================

from __future__ import annotations

import logging

from mcq_review.agents.base import Route, call_with_fallback
from mcq_review.errors import ConfigError, ParseError, TransportError
from mcq_review.models.question import AgentKind, ExecutionPlan, Question
from mcq_review.services.inference import InferenceBackend
from mcq_review.services.log_sink import LogSink

logger = logging.getLogger(__name__)

PLANNER_ROUTE = Route("groq", "fast")

# Agents scheduled when the orchestrator cannot produce a plan
DEFAULT_AGENTS = frozenset({
    AgentKind.ANSWER_VERIFIER,
    AgentKind.DIFFICULTY_RATER,
    AgentKind.UNIT_CHECKER,
    AgentKind.EXPLANATION_CRITIC,
    AgentKind.MEMORY_TRICK_GENERATOR,
})


_PLAN_PROMPT = """You are an orchestrator for an EA (Enrolled Agent) exam MCQ review system.
Analyze this question and decide which specialist agents to invoke.

Question: {q.question}
Options: {options}
Current Answer: {q.manual_answer} | AI Column Answer: {q.ai_answer} | Final: {q.final_answer}
Chapter: {q.chapter} | Unit: {q.unit}
Has explanation: {has_explanation}
Difficulty set: {difficulty}

Available agents:
- answer_verifier: Verifies correct answer using tax law knowledge (always needed)
- conflict_analyzer: Analyzes when manual answer != AI answer (needed if they differ)
- difficulty_rater: Rates Easy/Medium/Hard (always needed)
- unit_checker: Checks if question belongs to stated unit (always needed)
- explanation_critic: Reviews explanation quality (needed if explanation exists)
- memory_trick_generator: Creates memory tricks/mnemonics (always needed)
- calculation_checker: Checks if calculation steps needed (needed for numerical questions)

Respond ONLY with JSON:
{{
  "agents": ["answer_verifier", "difficulty_rater", ...],
  "reasoning": "brief reason for this selection",
  "hasAnswerConflict": true/false,
  "isNumerical": true/false
}}"""


def default_plan(question: Question) -> ExecutionPlan:
    """Rule-based plan used whenever the orchestrator call fails."""
    return ExecutionPlan(
        agents=DEFAULT_AGENTS,
        rationale="Default full review",
        has_answer_conflict=question.manual_answer != question.ai_answer,
        is_numerical=question.looks_numerical(),
    )


async def orchestrate(
    question: Question,
    client: InferenceBackend,
    log: LogSink,
) -> ExecutionPlan:
    """
    Produce the execution plan for one question.

    Expected failures fall back to default_plan(). Anything else
    propagates: it is a bug, and the pipeline reports it as a system error.
    """
    log.append(f"🎯 Orchestrator: Analyzing question {question.code}...")

    prompt = _PLAN_PROMPT.format(
        q=question,
        options=question.options_line(),
        has_explanation="yes" if question.explanation else "no",
        difficulty=question.difficulty or "not set",
    )

    try:
        plan, _ = await call_with_fallback(
            client,
            [{"role": "user", "content": prompt}],
            ExecutionPlan,
            PLANNER_ROUTE,
            None,
        )
    except (ConfigError, TransportError, ParseError) as e:
        log.warn(f"Orchestrator fallback to default plan: {e}")
        return default_plan(question)

    log.append(
        f"🎯 Orchestrator plan: [{', '.join(plan.agent_names)}] — "
        f"{plan.rationale}"
    )
    return plan
