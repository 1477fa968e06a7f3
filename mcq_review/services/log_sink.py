# =============================================================================
# Log Sink — Per-Review Progress Lines
# =============================================================================
#
# Every agent taking part in one review appends human-readable lines to the
# same sink. The sink is append-only; lines are independent, so concurrent
# agents within a stage may interleave freely. Stage 2 lines always follow
# every Stage 1 line because Stage 2 starts only after Stage 1 settles.
#
# An optional listener sees each line as it is appended. The HTTP adapter
# uses it to stream lines over SSE while the review is still running.
# =============================================================================

from __future__ import annotations

import logging
from typing import Callable

logger = logging.getLogger(__name__)


class LogSink:
    """Append-only ordered record of progress lines for one review."""

    def __init__(self, listener: Callable[[str], None] | None = None) -> None:
        self._lines: list[str] = []
        self._listener = listener

    def append(self, line: str) -> None:
        logger.info(line)
        self._record(line)

    def warn(self, line: str) -> None:
        """Append a warning line, prefixed so it stands out in the UI."""
        logger.warning(line)
        self._record(f"⚠ {line}")

    def _record(self, line: str) -> None:
        self._lines.append(line)
        if self._listener is not None:
            self._listener(line)

    @property
    def lines(self) -> list[str]:
        """Snapshot of the lines appended so far."""
        return list(self._lines)

    def __len__(self) -> int:
        return len(self._lines)
