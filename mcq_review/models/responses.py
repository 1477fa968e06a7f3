# =============================================================================
# API Response Models
# =============================================================================
#
# Review results are returned as ReviewResult (models/results.py). This
# module holds the remaining response bodies and the SSE event encoding.
# =============================================================================

import json
from typing import Any

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response for GET /health — which providers can be called."""

    status: str = "ok"
    version: str
    service: str
    providers: dict[str, bool] = Field(
        description="Provider name → a usable credential is configured",
    )


def sse_event(event_type: str, **data: Any) -> str:
    """Encode one server-sent event as `data: {"type": ..., ...}`."""
    payload = {"type": event_type}
    payload.update(data)
    return f"data: {json.dumps(payload, default=str)}\n\n"
