# =============================================================================
# Inference Client — Chat Completions Across Providers
# =============================================================================
#
# Issues one chat-completion request to a named (provider, tier) route and
# returns the raw response text. Both supported providers (Groq and
# OpenRouter) expose OpenAI-compatible APIs, so a single implementation on
# the OpenAI SDK with a per-provider base_url covers them.
#
# DESIGN DECISION: SDK retries disabled (max_retries=0).
# Retry policy belongs to the agents' one-hop fallback combinator. Letting
# the SDK retry underneath would multiply the number of remote calls per
# agent and hide failures from the fallback logic.
#
# DESIGN DECISION: Explicit timeout.
# A stuck remote call raises APITimeoutError, which is reported as a
# TransportError and therefore triggers the fallback hop.
#
# ARCHITECTURE:
#   InferenceBackend (Protocol)   — what agents depend on
#   └── InferenceClient           — AsyncOpenAI per provider, lazily built
#       └── call()                — resolve model, authenticate, complete
#   get_inference_client()        — lazy singleton built from settings
# =============================================================================

from __future__ import annotations

import logging
from typing import Protocol

import openai
from openai import AsyncOpenAI

from mcq_review.config import ModelCatalog, ProviderConfig, build_catalog, settings
from mcq_review.errors import ConfigError, TransportError

logger = logging.getLogger(__name__)


class InferenceBackend(Protocol):
    """Anything that can answer a chat completion for a (provider, tier)."""

    async def call(
        self,
        messages: list[dict[str, str]],
        provider: str,
        tier: str,
        temperature: float | None = None,
    ) -> str:
        """
        Run one chat completion.

        Raises:
            ConfigError: No usable credential or unknown provider/tier.
            TransportError: The remote call did not succeed.
        """
        ...


class InferenceClient:
    """
    Chat-completion client over an explicit ModelCatalog.

    Credentials are checked on every call, not at construction, so a
    missing key for one provider only affects the agents that route to it.
    """

    def __init__(
        self,
        catalog: ModelCatalog,
        temperature: float | None = None,
        max_tokens: int | None = None,
        timeout: float | None = None,
    ) -> None:
        self._catalog = catalog
        self._temperature = (
            temperature if temperature is not None else settings.llm_temperature
        )
        self._max_tokens = max_tokens or settings.llm_max_tokens
        self._timeout = timeout or settings.llm_timeout_seconds
        self._clients: dict[str, AsyncOpenAI] = {}

    @property
    def catalog(self) -> ModelCatalog:
        return self._catalog

    def resolve(self, provider: str, tier: str) -> tuple[ProviderConfig, str]:
        """Look up the provider config and model id for a route."""
        config = self._catalog.get(provider)
        if config is None:
            raise ConfigError(f"Unknown provider '{provider}'")
        model = config.models.get(tier)
        if model is None:
            raise ConfigError(f"Unknown tier '{tier}' for provider {provider}")
        if not config.has_credential:
            raise ConfigError(
                f"Missing API key for {provider}. Check your .env file."
            )
        return config, model

    async def call(
        self,
        messages: list[dict[str, str]],
        provider: str,
        tier: str,
        temperature: float | None = None,
    ) -> str:
        config, model = self.resolve(provider, tier)
        client = self._client_for(config)

        logger.debug("Calling %s/%s (model=%s)", provider, tier, model)

        try:
            response = await client.chat.completions.create(
                model=model,
                messages=messages,
                temperature=(
                    temperature if temperature is not None else self._temperature
                ),
                max_tokens=self._max_tokens,
            )
        except openai.APIStatusError as e:
            raise TransportError(
                provider, e.status_code, e.response.text,
            ) from e
        except openai.APITimeoutError as e:
            raise TransportError(
                provider, None, f"timed out after {self._timeout}s",
            ) from e
        except openai.APIError as e:
            # Connection failures and malformed responses
            raise TransportError(provider, None, str(e)) from e

        if not response.choices:
            return ""
        content = response.choices[0].message.content or ""
        return content.strip()

    def _client_for(self, config: ProviderConfig) -> AsyncOpenAI:
        client = self._clients.get(config.name)
        if client is None:
            client = AsyncOpenAI(
                api_key=config.api_key,
                base_url=config.base_url,
                default_headers=dict(config.headers) or None,
                timeout=self._timeout,
                max_retries=0,
            )
            self._clients[config.name] = client
            logger.info(
                "Initialized inference client for %s (base_url=%s)",
                config.name, config.base_url,
            )
        return client


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

# Lazy singleton — SDK clients manage their own connection pools
_client: InferenceClient | None = None


def get_inference_client() -> InferenceClient:
    """Return the process-wide client built from the configured catalog."""
    global _client
    if _client is None:
        _client = InferenceClient(build_catalog(settings))
    return _client


def provider_status(catalog: ModelCatalog) -> dict[str, bool]:
    """Map each provider to whether it has a usable credential."""
    return {name: cfg.has_credential for name, cfg in catalog.items()}
