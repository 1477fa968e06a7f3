# =============================================================================
# Answer Agents — Verifier (Stage 1) and Conflict Analyzer (Stage 2)
# =============================================================================
#
# The verifier decides which option is correct and how its decision relates
# to the recorded answers. The conflict analyzer runs when the recorded
# answers disagree (or the verifier is unsure) and needs the verifier's
# conclusion as input, which is what forces it into Stage 2.
#
# Routes:
#   verifier  groq/reason ──▶ openrouter/smart
#   conflict  groq/smart  ──▶ openrouter/smart
# =============================================================================

from __future__ import annotations

import logging

from mcq_review.agents.base import AgentSpec, Route, run_agent
from mcq_review.models.question import Question
from mcq_review.models.results import AnswerVerification, ConflictResolution
from mcq_review.services.inference import InferenceBackend
from mcq_review.services.log_sink import LogSink

logger = logging.getLogger(__name__)


ANSWER_VERIFIER = AgentSpec(
    label="✅ Answer Verifier",
    start_message="Checking correct answer...",
    result_type=AnswerVerification,
    primary=Route("groq", "reason"),
    secondary=Route("openrouter", "smart"),
)

CONFLICT_ANALYZER = AgentSpec(
    label="⚡ Conflict Analyzer",
    start_message="Investigating answer discrepancy...",
    result_type=ConflictResolution,
    primary=Route("groq", "smart"),
    secondary=Route("openrouter", "smart"),
)


_VERIFIER_PROMPT = """You are an IRS Enrolled Agent exam expert specializing in answer verification.
Your ONLY job: determine the correct answer to this multiple-choice tax question.

Question: {q.question}
A) {q.option_a}
B) {q.option_b}
C) {q.option_c}
D) {q.option_d}

Current manual answer: {q.manual_answer}
AI-generated answer in data: {q.ai_answer}
Final answer in data: {q.final_answer}

Analyze each option against current IRS/tax law. Be precise and cite the rule.

Respond ONLY with JSON:
{{
  "correctAnswer": "A/B/C/D",
  "confidence": "high/medium/low",
  "reasoning": "specific IRS rule or tax code basis",
  "manualAnswerCorrect": true/false,
  "aiAnswerCorrect": true/false,
  "verdict": "both_correct/both_wrong/manual_correct/ai_correct/uncertain",
  "needsHumanReview": true/false,
  "humanReviewReason": "reason if needsHumanReview is true"
}}"""


_CONFLICT_PROMPT = """You are a conflict resolution specialist for EA exam MCQ answers.
There is a discrepancy between answers. Analyze and resolve it.

Question: {q.question}
{options}

Manual answer in data: {q.manual_answer}
AI column answer in data: {q.ai_answer}
Final answer in data: {q.final_answer}
Answer Verifier concluded: {v.correct_answer} ({v.verdict})

Look at each answer carefully. Consider:
1. Is the manual answer based on old tax law?
2. Is the AI answer hallucinated?
3. Could there be a typo/data entry error?
4. Is this a genuinely ambiguous question?

Respond ONLY with JSON:
{{
  "resolution": "manual_correct/ai_correct/both_wrong/genuinely_ambiguous",
  "finalRecommendedAnswer": "A/B/C/D",
  "conflictType": "data_entry_error/outdated_law/ai_hallucination/ambiguous_question/unclear",
  "explanation": "clear explanation of why this conflict exists and how to resolve",
  "escalateToHuman": true/false,
  "escalationReason": "reason if escalating"
}}"""


async def verify_answer(
    question: Question,
    client: InferenceBackend,
    log: LogSink,
) -> AnswerVerification:
    """Determine the correct option and classify the recorded answers."""
    prompt = _VERIFIER_PROMPT.format(q=question)
    return await run_agent(ANSWER_VERIFIER, question, prompt, client, log)


async def analyse_conflict(
    question: Question,
    verification: AnswerVerification,
    client: InferenceBackend,
    log: LogSink,
) -> ConflictResolution:
    """Explain and resolve a disagreement between the recorded answers."""
    prompt = _CONFLICT_PROMPT.format(
        q=question, v=verification, options=question.options_line(),
    )
    return await run_agent(CONFLICT_ANALYZER, question, prompt, client, log)
