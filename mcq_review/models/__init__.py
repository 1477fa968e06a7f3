# =============================================================================
# Models Package — Pydantic V2 Schemas
# =============================================================================
#   - question.py: Question input, AgentKind, ExecutionPlan
#   - results.py: one result model per agent kind + ReviewResult
#   - requests.py / responses.py: HTTP request and response bodies
# =============================================================================
