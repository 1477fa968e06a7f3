# =============================================================================
# Test Helpers — Scripted Inference Backend and Canned Replies
# =============================================================================
#
# StubClient stands in for the inference client. It recognises which agent
# is calling from the prompt's opening role sentence and replays scripted
# outcomes for that agent: a string is returned as the model's text, an
# exception instance is raised. Every call is recorded so tests can assert
# which agents hit the network and on which route.
# =============================================================================

from __future__ import annotations

import json

from mcq_review.errors import TransportError

# Agent key → phrase from the opening line of that agent's prompt
PROMPT_MARKERS = {
    "orchestrator": "You are an orchestrator",
    "answer_verifier": "answer verification",
    "conflict_analyzer": "conflict resolution specialist",
    "difficulty_rater": "difficulty assessment specialist",
    "unit_checker": "curriculum specialist",
    "explanation_critic": "explanation quality specialist",
    "memory_trick_generator": "memory techniques",
    "calculation_checker": "calculation specialist",
}


class StubClient:
    """Scripted InferenceBackend."""

    def __init__(self, script: dict[str, list] | None = None) -> None:
        self.script = {key: list(outcomes) for key, outcomes in (script or {}).items()}
        self.calls: list[tuple[str, str, str, float | None]] = []

    async def call(self, messages, provider, tier, temperature=None):
        key = self._agent_for(messages[-1]["content"])
        self.calls.append((key, provider, tier, temperature))

        outcomes = self.script.get(key)
        if not outcomes:
            raise TransportError(provider, 503, "no scripted response")
        outcome = outcomes.pop(0) if len(outcomes) > 1 else outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def calls_for(self, key: str) -> list[tuple[str, str, str, float | None]]:
        return [c for c in self.calls if c[0] == key]

    @staticmethod
    def _agent_for(prompt: str) -> str:
        for key, marker in PROMPT_MARKERS.items():
            if marker in prompt:
                return key
        raise AssertionError(f"Unrecognised prompt: {prompt[:60]!r}")


# ---------------------------------------------------------------------------
# Canned model replies
# ---------------------------------------------------------------------------


def plan_reply(agents, conflict=False, numerical=False) -> str:
    return json.dumps({
        "agents": list(agents),
        "reasoning": "scripted plan",
        "hasAnswerConflict": conflict,
        "isNumerical": numerical,
    })


REPLIES = {
    "answer_verifier": json.dumps({
        "correctAnswer": "B",
        "confidence": "high",
        "reasoning": "Schedule K-1 reports each partner's share.",
        "manualAnswerCorrect": True,
        "aiAnswerCorrect": True,
        "verdict": "both_correct",
        "needsHumanReview": False,
        "humanReviewReason": "",
    }),
    "conflict_analyzer": json.dumps({
        "resolution": "manual_correct",
        "finalRecommendedAnswer": "A",
        "conflictType": "ai_hallucination",
        "explanation": "The AI column picked a distractor.",
        "escalateToHuman": False,
        "escalationReason": "",
    }),
    "difficulty_rater": json.dumps({
        "difficulty": "Easy",
        "reasoning": "Direct recall.",
        "currentRatingCorrect": True,
        "suggestedChange": "keep",
    }),
    "unit_checker": json.dumps({
        "belongsInUnit": True,
        "confidence": "high",
        "reasoning": "Partnership reporting.",
        "suggestedUnit": "Partnerships",
        "questionType": "Static Question",
        "yearDependentReason": "",
    }),
    "explanation_critic": json.dumps({
        "quality": "Good",
        "score": 8,
        "strengths": "Names the form.",
        "missingElements": [],
        "improvementSuggestion": "",
        "needsCalculation": False,
        "calculationNote": "",
    }),
    "memory_trick_generator": json.dumps({
        "memoryTrick": "K-1 for Kin: each partner gets their own.",
        "type": "association",
        "keyConceptSummary": "Partners receive Schedule K-1.",
    }),
    "calculation_checker": json.dumps({
        "requiresCalculation": False,
        "calculationSteps": "",
        "thresholdsInvolved": [],
        "formulaUsed": "",
    }),
}


def full_script(**overrides) -> dict[str, list]:
    """Every agent answers successfully unless overridden."""
    script = {key: [reply] for key, reply in REPLIES.items()}
    script["orchestrator"] = [plan_reply([
        "answer_verifier", "difficulty_rater", "unit_checker",
        "explanation_critic", "memory_trick_generator",
    ])]
    for key, outcomes in overrides.items():
        script[key] = outcomes if isinstance(outcomes, list) else [outcomes]
    return script


