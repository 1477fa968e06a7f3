# =============================================================================
# EA MCQ Review Agents
# =============================================================================
# Reviews multiple-choice exam questions with a team of specialist LLM
# agents. An orchestrator plans which agents run; a two-stage pipeline runs
# them concurrently and synthesises one verdict per question.
#
# Package structure:
#   mcq_review/
#   ├── agents/       → orchestrator, specialist agents, review pipeline
#   ├── api/          → FastAPI route handlers (review, batch review, SSE)
#   ├── models/       → Pydantic V2 schemas (question, plan, results, API)
#   └── services/     → inference client, response parser, log sink
# =============================================================================
