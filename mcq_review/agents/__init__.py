# =============================================================================
# Agents Package — Orchestrated Multi-Agent Review
# =============================================================================
#   - orchestrator.py: plans which agents review a question
#   - answer.py: answer verifier + conflict analyzer
#   - classification.py: difficulty rater + unit checker
#   - explanation.py: explanation critic + calculation checker
#   - memory.py: memory trick generator
#   - base.py: shared agent contract and one-hop fallback combinator
#   - pipeline.py: LangGraph coordinator (plan → stage1 → stage2 → synthesise)
# =============================================================================
