# =============================================================================
# Error Taxonomy
# =============================================================================
#
#   ReviewError
#   ├── ConfigError        — missing/placeholder credential, unknown route.
#   │                        Never retried.
#   ├── TransportError     — provider call did not succeed. Triggers the
#   │                        agent's single fallback hop.
#   ├── ParseError         — model output is not a usable record. Triggers
#   │                        the agent's single fallback hop.
#   └── ReviewSystemError  — unexpected failure outside any agent. Aborts
#                            the review of one question, never the batch.
#
# Agents absorb the first three into degraded defaults. Only
# ReviewSystemError reaches the review boundary.
# =============================================================================

from __future__ import annotations


class ReviewError(Exception):
    """Base class for every error raised by the review core."""


class ConfigError(ReviewError):
    """A provider cannot be called with the current configuration."""


class TransportError(ReviewError):
    """The remote inference call failed."""

    def __init__(
        self,
        provider: str,
        status_code: int | None,
        body: str,
    ) -> None:
        self.provider = provider
        self.status_code = status_code
        self.body = body
        status = status_code if status_code is not None else "n/a"
        super().__init__(f"{provider} API error {status}: {body}")


class ParseError(ReviewError):
    """The model response could not be turned into a structured record."""


class ReviewSystemError(ReviewError):
    """Unexpected failure while coordinating a review."""
