# =============================================================================
# Shared Test Fixtures
# =============================================================================

from __future__ import annotations

import pytest

from mcq_review.models.question import Question


@pytest.fixture
def question() -> Question:
    """A question whose recorded answers all agree."""
    return Question(
        code="E2-104",
        chapter="Ch 3",
        unit="Partnerships",
        question="Which form reports a partner's share of partnership income?",
        optionA="Form 1065",
        optionB="Schedule K-1",
        optionC="Form 1120-S",
        optionD="Schedule C",
        rightOption="B",
        aiAnswer="B",
        finalAnswer="B",
        finalExplanation="Schedule K-1 reports each partner's distributive share.",
        difficulty="Easy",
    )
