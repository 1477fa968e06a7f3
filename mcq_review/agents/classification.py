# =============================================================================
# Classification Agents — Difficulty Rater and Unit Checker (Stage 1)
# =============================================================================
#
# Both are cheap single-concept judgments, so they run on the fast tier and
# fall back to the fast tier of the other provider.
# =============================================================================

from __future__ import annotations

from mcq_review.agents.base import AgentSpec, Route, run_agent
from mcq_review.models.question import Question
from mcq_review.models.results import DifficultyRating, UnitPlacement
from mcq_review.services.inference import InferenceBackend
from mcq_review.services.log_sink import LogSink

DIFFICULTY_RATER = AgentSpec(
    label="📊 Difficulty Rater",
    start_message="Assessing difficulty level...",
    result_type=DifficultyRating,
    primary=Route("groq", "fast"),
    secondary=Route("openrouter", "fast"),
)

UNIT_CHECKER = AgentSpec(
    label="📂 Unit Checker",
    start_message="Verifying unit placement...",
    result_type=UnitPlacement,
    primary=Route("groq", "fast"),
    secondary=Route("openrouter", "fast"),
)


_DIFFICULTY_PROMPT = """You are an EA exam difficulty assessment specialist.
Rate the difficulty of this multiple choice question for the IRS Enrolled Agent exam.

Question: {q.question}
{options}
Explanation: {explanation}

Difficulty criteria:
- Easy: Direct recall, single concept, clear distractors
- Medium: Requires understanding of a rule + application, some tricky distractors
- Hard: Multi-step reasoning, exception to a rule, or easily confused similar concepts

Current difficulty set: {difficulty}

Respond ONLY with JSON:
{{
  "difficulty": "Easy/Medium/Hard",
  "reasoning": "one sentence why",
  "currentRatingCorrect": true/false,
  "suggestedChange": "keep/change to Easy/change to Medium/change to Hard"
}}"""


_UNIT_PROMPT = """You are an EA exam curriculum specialist. Check if this question is in the right unit.

Chapter: {q.chapter}
Unit: {q.unit}
Question: {q.question}
Options: {options}

The EA exam covers: Part 1 (Individual), Part 2 (Business), Part 3 (Representation).
Common units: Individual Income, Business Taxation, Partnerships, Corporations,
Estate & Gift, Exempt Organizations, IRS Procedures, Representation, etc.

Does this question belong in the stated unit? If not, which unit better fits?

Respond ONLY with JSON:
{{
  "belongsInUnit": true/false,
  "confidence": "high/medium/low",
  "reasoning": "why it does or doesn't belong",
  "suggestedUnit": "same unit or better unit name",
  "questionType": "Static Question/Year-Dependent",
  "yearDependentReason": "if year-dependent, what changes year to year"
}}"""


async def rate_difficulty(
    question: Question,
    client: InferenceBackend,
    log: LogSink,
) -> DifficultyRating:
    prompt = _DIFFICULTY_PROMPT.format(
        q=question,
        options=question.options_line(),
        explanation=question.explanation or "none",
        difficulty=question.difficulty or "not set",
    )
    return await run_agent(DIFFICULTY_RATER, question, prompt, client, log)


async def check_unit(
    question: Question,
    client: InferenceBackend,
    log: LogSink,
) -> UnitPlacement:
    prompt = _UNIT_PROMPT.format(q=question, options=question.options_line())
    return await run_agent(UNIT_CHECKER, question, prompt, client, log)
