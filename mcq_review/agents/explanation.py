# =============================================================================
# Explanation Agents — Explanation Critic and Calculation Checker (Stage 2)
# =============================================================================
#
# The critic short-circuits when a question has no explanation: the result
# is a fixed "Missing" critique and no inference call is made.
# =============================================================================

from __future__ import annotations

from mcq_review.agents.base import AgentSpec, Route, run_agent
from mcq_review.models.question import Question
from mcq_review.models.results import CalculationCheck, ExplanationCritique
from mcq_review.services.inference import InferenceBackend
from mcq_review.services.log_sink import LogSink

EXPLANATION_CRITIC = AgentSpec(
    label="📝 Explanation Critic",
    start_message="Reviewing explanation quality...",
    result_type=ExplanationCritique,
    primary=Route("groq", "smart"),
    secondary=Route("openrouter", "smart"),
)

CALCULATION_CHECKER = AgentSpec(
    label="🔢 Calculation Checker",
    start_message="Checking if calculation steps needed...",
    result_type=CalculationCheck,
    primary=Route("groq", "fast"),
    secondary=Route("openrouter", "fast"),
)


_CRITIC_PROMPT = """You are an EA exam explanation quality specialist.
Review this explanation for a multiple-choice tax question.

Question: {q.question}
Correct Answer: {q.reference_answer}
Options: {options}

Current Explanation:
{explanation}

Evaluate:
1. Does it explain WHY the correct answer is right?
2. Does it explain WHY each wrong option is wrong?
3. Is it clear for exam prep (not too technical, not too vague)?
4. Does it cite the relevant IRS form, code section, or rule?
5. Would a student understand this without prior knowledge?

Respond ONLY with JSON:
{{
  "quality": "Excellent/Good/Needs Improvement/Poor",
  "score": 1-10,
  "strengths": "what is good about it",
  "missingElements": ["list", "of", "missing", "things"],
  "improvementSuggestion": "specific actionable suggestion",
  "needsCalculation": true/false,
  "calculationNote": "what calculation to add if needsCalculation is true"
}}"""


_CALCULATION_PROMPT = """You are an EA exam calculation specialist.
Determine if this question requires calculation steps to be shown in the explanation.

Question: {q.question}
Options: {options}
Correct Answer: {q.reference_answer}
Current Explanation: {explanation}

Does this question involve any numbers, thresholds, percentages, or formulas?
If yes, should the explanation show step-by-step calculation?

Respond ONLY with JSON:
{{
  "requiresCalculation": true/false,
  "calculationSteps": "step by step calculation if required, empty string if not",
  "thresholdsInvolved": ["list of dollar/percentage thresholds relevant to this question"],
  "formulaUsed": "name of formula or rule (e.g. 'Schedule M-3 threshold: $10M assets')"
}}"""


async def critique_explanation(
    question: Question,
    client: InferenceBackend,
    log: LogSink,
) -> ExplanationCritique:
    """Grade the explanation, or flag it as missing without a model call."""
    if not question.explanation:
        log.append(f"{EXPLANATION_CRITIC.label}: {EXPLANATION_CRITIC.start_message}")
        log.append(
            f"{EXPLANATION_CRITIC.label}: No explanation found — "
            "flagging for creation"
        )
        return ExplanationCritique.missing()

    prompt = _CRITIC_PROMPT.format(
        q=question,
        options=question.options_line(),
        explanation=question.explanation,
    )
    return await run_agent(EXPLANATION_CRITIC, question, prompt, client, log)


async def check_calculation(
    question: Question,
    client: InferenceBackend,
    log: LogSink,
) -> CalculationCheck:
    prompt = _CALCULATION_PROMPT.format(
        q=question,
        options=question.options_line(),
        explanation=question.final_explanation or "none",
    )
    return await run_agent(CALCULATION_CHECKER, question, prompt, client, log)
