# =============================================================================
# API Request Models
# =============================================================================
#
# Questions arrive already normalised by the upload layer (one JSON object
# per spreadsheet row, camelCase keys). These wrappers only add the request
# envelope and batch-size bounds.
# =============================================================================

from pydantic import BaseModel, ConfigDict, Field

from mcq_review.models.question import Question


class ReviewRequest(BaseModel):
    """Request body for POST /review and POST /review/stream."""

    question: Question

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "question": {
                        "code": "E2-104",
                        "chapter": "Ch 3",
                        "unit": "Partnerships",
                        "question": "Which form reports a partner's share of income?",
                        "optionA": "Form 1065",
                        "optionB": "Schedule K-1",
                        "optionC": "Form 1120-S",
                        "optionD": "Schedule C",
                        "rightOption": "B",
                        "aiAnswer": "B",
                        "finalAnswer": "B",
                        "finalExplanation": "Schedule K-1 reports each partner's share.",
                        "difficulty": "Easy",
                    }
                }
            ]
        }
    )


class BatchReviewRequest(BaseModel):
    """Request body for POST /review-all."""

    questions: list[Question] = Field(
        default_factory=list,
        max_length=500,
        description="Questions to review, in order. Results keep the same indices.",
    )
