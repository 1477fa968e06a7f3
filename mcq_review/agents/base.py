# =============================================================================
# Agent Contract — One-Hop Fallback Combinator
# =============================================================================
#
# Every specialist agent follows the same algorithm:
#
#   1. render prompt ──▶ 2. primary route ──▶ parse + validate ──▶ result
#                              │ TransportError / ParseError
#                              ▼
#                        3. secondary route ──▶ parse + validate ──▶ result
#                              │ any failure
#                              ▼
#                        4. degraded default + warning line
#
# DESIGN DECISION: One combinator for all agents.
# call_with_fallback() gives every agent the same semantics: exactly one
# extra hop, and only on transport or parse failures. A ConfigError is not
# retried.
#
# DESIGN DECISION: Agents never raise.
# run_agent() is the isolation boundary. Whatever happens inside, the
# caller gets a typed result, so a stage can gather its agents without
# one failure aborting the others.
# =============================================================================

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Generic, TypeVar

from pydantic import BaseModel, ValidationError

from mcq_review.errors import ConfigError, ParseError, TransportError
from mcq_review.models.question import Question
from mcq_review.models.results import AgentResult
from mcq_review.services.inference import InferenceBackend
from mcq_review.services.log_sink import LogSink
from mcq_review.services.parser import parse_structured

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)
R = TypeVar("R", bound=AgentResult)


# ---------------------------------------------------------------------------
# Data Structures
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Route:
    """A (provider, tier) pair, with an optional sampling temperature."""

    provider: str
    tier: str
    temperature: float | None = None

    def __str__(self) -> str:
        return f"{self.provider}/{self.tier}"


@dataclass(frozen=True)
class AgentSpec(Generic[R]):
    """Static description of one agent kind."""

    label: str           # "✅ Answer Verifier"
    start_message: str   # "Checking correct answer..."
    result_type: type[R]
    primary: Route
    secondary: Route | None = None


# ---------------------------------------------------------------------------
# Combinator
# ---------------------------------------------------------------------------


async def call_with_fallback(
    client: InferenceBackend,
    messages: list[dict[str, str]],
    result_type: type[M],
    primary: Route,
    secondary: Route | None,
) -> tuple[M, Route]:
    """
    Call the primary route, then the secondary once if the first attempt
    failed in transport or produced unusable output.

    Returns:
        The validated result and the route that produced it.

    Raises:
        ConfigError: A route cannot be called at all (not retried).
        TransportError | ParseError: The last attempt's failure.
    """
    try:
        return await _attempt(client, messages, result_type, primary), primary
    except (TransportError, ParseError) as e:
        logger.warning(
            "%s attempt on %s failed: %s", result_type.__name__, primary, e,
        )
        if secondary is None:
            raise

    # A failure here propagates as the last attempt's error
    return await _attempt(client, messages, result_type, secondary), secondary


async def _attempt(
    client: InferenceBackend,
    messages: list[dict[str, str]],
    result_type: type[M],
    route: Route,
) -> M:
    raw = await client.call(messages, route.provider, route.tier, route.temperature)
    return parse_result(raw, result_type)


def parse_result(raw: str, result_type: type[M]) -> M:
    """Parse model output and validate it into the agent's result shape."""
    record = parse_structured(raw)
    try:
        return result_type.model_validate(record)
    except ValidationError as e:
        raise ParseError(
            f"Response does not match {result_type.__name__}: "
            f"{e.error_count()} invalid field(s)"
        ) from e


async def run_agent(
    spec: AgentSpec[R],
    question: Question,
    prompt: str,
    client: InferenceBackend,
    log: LogSink,
) -> R:
    """Run one agent end to end. Never raises an Exception."""
    log.append(f"{spec.label}: {spec.start_message}")
    messages = [{"role": "user", "content": prompt}]

    try:
        result, route = await call_with_fallback(
            client, messages, spec.result_type, spec.primary, spec.secondary,
        )
    except (ConfigError, TransportError, ParseError) as e:
        log.warn(f"{spec.label} failed: {e}")
        return spec.result_type.degraded(question, str(e))
    except Exception as e:
        # Programming errors stay inside the agent like any other failure
        logger.exception("%s crashed", spec.result_type.__name__)
        log.warn(f"{spec.label} failed: {e}")
        return spec.result_type.degraded(question, str(e))

    line = result.summary_line()
    if route != spec.primary:
        line = f"{line} (fallback: {route})"
    log.append(line)
    return result
