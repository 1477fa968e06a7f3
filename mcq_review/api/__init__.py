# =============================================================================
# API Package — FastAPI Route Handlers
# =============================================================================
#   - review.py: single review, streamed review, streamed batch review
#   - health.py: provider credential status
# =============================================================================
