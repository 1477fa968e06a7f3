# =============================================================================
# Memory Trick Generator (Stage 2)
# =============================================================================
#
# Builds its prompt around the answer the data currently treats as correct
# (final answer, else manual answer). Both routes sample at temperature 0.7,
# above the 0.1 the judging agents use.
# =============================================================================

from __future__ import annotations

from mcq_review.agents.base import AgentSpec, Route, run_agent
from mcq_review.models.question import Question
from mcq_review.models.results import MemoryAid
from mcq_review.services.inference import InferenceBackend
from mcq_review.services.log_sink import LogSink

MEMORY_TRICK_GENERATOR = AgentSpec(
    label="💡 Memory Trick Generator",
    start_message="Creating mnemonic...",
    result_type=MemoryAid,
    primary=Route("groq", "fast", temperature=0.7),
    secondary=Route("openrouter", "fast", temperature=0.7),
)


_MEMORY_PROMPT = """You are a creative EA exam study coach specializing in memory techniques.
Create a memorable trick to remember the answer to this tax question.

Question: {q.question}
Correct Answer: {answer}
The answer is: {answer_text}
Key concept: {q.unit}

Create a memory trick that is:
- Short (1-2 sentences max)
- Catchy or uses a rhyme/acronym/visual story
- Directly tied to the key concept
- Easy to recall under exam pressure

Respond ONLY with JSON:
{{
  "memoryTrick": "the actual memory trick",
  "type": "acronym/rhyme/story/visual/association",
  "keyConceptSummary": "one-line summary of the core concept to remember"
}}"""


async def generate_memory_trick(
    question: Question,
    client: InferenceBackend,
    log: LogSink,
) -> MemoryAid:
    answer = question.reference_answer
    prompt = _MEMORY_PROMPT.format(
        q=question, answer=answer, answer_text=question.option(answer),
    )
    return await run_agent(MEMORY_TRICK_GENERATOR, question, prompt, client, log)
