# =============================================================================
# Review API — Single, Streamed and Batch Question Review
# =============================================================================
#
# Endpoints:
#   POST /review         — review one question, return ReviewResult JSON
#   POST /review/stream  — same, as SSE: log lines live, then the result
#   POST /review-all     — review a batch sequentially, as SSE
#
# This layer only validates requests and streams results. All review
# logic lives in agents/pipeline.py.
#
# DESIGN DECISION: Log lines streamed while the review runs.
# The review runs in a producer task. Its LogSink listener pushes each line
# onto a queue that the SSE generator drains, so the client sees agents
# report in causal order instead of all at once at the end.
#
# SSE EVENTS:
#   single: log* → result → done
#   batch:  start → (progress → log* → question-done)* → complete
# =============================================================================

from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, Awaitable, Callable

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse

from mcq_review.agents.pipeline import iter_reviews, review_question
from mcq_review.models.requests import BatchReviewRequest, ReviewRequest
from mcq_review.models.responses import sse_event
from mcq_review.models.results import ReviewResult
from mcq_review.services.inference import InferenceBackend, get_inference_client
from mcq_review.services.log_sink import LogSink

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Review"])

_SSE_HEADERS = {"Cache-Control": "no-cache", "Connection": "keep-alive"}

EventQueue = asyncio.Queue


# ---------------------------------------------------------------------------
# POST /review — one question, plain JSON
# ---------------------------------------------------------------------------


@router.post(
    "/review",
    response_model=ReviewResult,
    summary="Review one multiple-choice question",
    description=(
        "Runs the orchestrator and the selected specialist agents on one "
        "question and returns the synthesised verdict with its log."
    ),
)
async def review_endpoint(
    request: ReviewRequest,
    client: InferenceBackend = Depends(get_inference_client),
) -> ReviewResult:
    logger.info("Review request: code=%s", request.question.code)
    return await review_question(request.question, client=client)


# ---------------------------------------------------------------------------
# POST /review/stream — one question, SSE
# ---------------------------------------------------------------------------


@router.post(
    "/review/stream",
    summary="Review one question, streaming agent progress",
)
async def review_stream_endpoint(
    request: ReviewRequest,
    client: InferenceBackend = Depends(get_inference_client),
) -> StreamingResponse:
    async def produce(queue: EventQueue) -> None:
        log = LogSink(
            listener=lambda line: queue.put_nowait(
                sse_event("log", message=line),
            ),
        )
        result = await review_question(request.question, client=client, log=log)
        queue.put_nowait(sse_event("result", result=_dump(result)))
        queue.put_nowait(sse_event("done"))

    return StreamingResponse(
        _event_stream(produce),
        media_type="text/event-stream",
        headers=_SSE_HEADERS,
    )


# ---------------------------------------------------------------------------
# POST /review-all — batch, SSE
# ---------------------------------------------------------------------------


@router.post(
    "/review-all",
    summary="Review a batch of questions sequentially, streaming progress",
)
async def review_all_endpoint(
    request: BatchReviewRequest,
    client: InferenceBackend = Depends(get_inference_client),
) -> StreamingResponse:
    questions = request.questions
    if not questions:
        raise HTTPException(status_code=400, detail="No questions provided")

    logger.info("Batch review request: %d questions", len(questions))

    async def produce(queue: EventQueue) -> None:
        queue.put_nowait(sse_event("start", total=len(questions)))

        def log_factory(index: int) -> LogSink:
            # Called right before question `index` starts
            queue.put_nowait(sse_event(
                "progress",
                index=index,
                code=questions[index].code,
                question=questions[index].question[:80],
            ))
            return LogSink(
                listener=lambda line: queue.put_nowait(
                    sse_event("log", index=index, message=line),
                ),
            )

        results: list[dict] = []
        async for index, result in iter_reviews(
            questions, client=client, log_factory=log_factory,
        ):
            payload = _dump(result)
            results.append({"index": index, **payload})
            queue.put_nowait(sse_event("question-done", index=index, result=payload))

        queue.put_nowait(sse_event("complete", total=len(questions), results=results))

    return StreamingResponse(
        _event_stream(produce),
        media_type="text/event-stream",
        headers=_SSE_HEADERS,
    )


# ---------------------------------------------------------------------------
# Internal Helpers
# ---------------------------------------------------------------------------


def _dump(result: ReviewResult) -> dict:
    return result.model_dump(mode="json", by_alias=True)


async def _event_stream(
    produce: Callable[[EventQueue], Awaitable[None]],
) -> AsyncIterator[str]:
    """
    Run `produce` in a task and yield the events it queues.

    A None on the queue ends the stream. If the client disconnects, the
    generator is closed and the producer task is cancelled.
    """
    queue: EventQueue = asyncio.Queue()

    async def runner() -> None:
        try:
            await produce(queue)
        except Exception as e:
            logger.exception("Streaming review failed")
            queue.put_nowait(sse_event("error", message=str(e)))
        finally:
            queue.put_nowait(None)

    task = asyncio.create_task(runner())
    try:
        while True:
            event = await queue.get()
            if event is None:
                break
            yield event
    finally:
        if not task.done():
            task.cancel()
