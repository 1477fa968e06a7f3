# =============================================================================
# Services Package — Infrastructure Used by the Agents
# =============================================================================
#   - inference.py: chat completions over Groq / OpenRouter (OpenAI SDK)
#   - parser.py: structured record recovery from free-form model output
#   - log_sink.py: per-review progress lines, optionally streamed
# =============================================================================
