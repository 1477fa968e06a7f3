# =============================================================================
# Structured Response Parser
# =============================================================================
#
# Model output is rarely pure JSON. Typical shapes seen in practice:
#
#   ```json
#   {"difficulty": "Easy", ...}
#   ```
#
#   <think>The rule for ... so the answer is B.</think>
#   {"correctAnswer": "B", ...}
#
#   Sure! Here is my assessment: {"quality": "Good", ...} Hope this helps.
#
# parse_structured() applies the same recovery to every response before any
# agent trusts a field: drop code fences, drop reasoning blocks, then decode
# the span from the first "{" to the last "}".
# =============================================================================

from __future__ import annotations

import json
import re
from typing import Any

from mcq_review.errors import ParseError

_FENCE_OPEN = re.compile(r"```json\n?", re.IGNORECASE)
_FENCE = re.compile(r"```\n?")
_REASONING = re.compile(r"<think>.*?</think>", re.IGNORECASE | re.DOTALL)


def strip_wrappers(text: str) -> str:
    """Remove code fences and reasoning-trace blocks from model output."""
    clean = _FENCE_OPEN.sub("", text)
    clean = _FENCE.sub("", clean)
    clean = _REASONING.sub("", clean)
    return clean.strip()


def parse_structured(text: str) -> dict[str, Any]:
    """
    Extract the single JSON object embedded in a model response.

    Raises:
        ParseError: No object span exists, it does not decode, or it
            decodes to something other than an object.
    """
    clean = strip_wrappers(text)
    start = clean.find("{")
    end = clean.rfind("}")
    if start == -1 or end == -1 or end < start:
        raise ParseError("No JSON object found in response")

    try:
        record = json.loads(clean[start:end + 1])
    except json.JSONDecodeError as e:
        raise ParseError(f"Invalid JSON in response: {e}") from e

    if not isinstance(record, dict):
        raise ParseError("Response JSON is not an object")
    return record
