# =============================================================================
# Application Configuration — Pydantic Settings + Model Catalog
# =============================================================================
#
# Pydantic Settings loads values in this priority order (highest first):
#   1. Environment variables (e.g., `GROQ_API_KEY=...`)
#   2. Values from the .env file
#   3. Default values defined below
#
# The model catalog is derived from settings once and passed explicitly to
# the inference client. Agents never read provider details from globals, so
# tests can hand the client a stub catalog.
#
# USAGE:
#   from mcq_review.config import settings, build_catalog
#   catalog = build_catalog(settings)
# =============================================================================

from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from types import MappingProxyType
from typing import Mapping

from pydantic_settings import BaseSettings, SettingsConfigDict

# A credential containing this marker is the unedited value from .env.example
PLACEHOLDER_MARKER = "your_"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Missing provider keys are NOT a startup error. They surface per call as
    a ConfigError inside the agent that needed the provider.
    """

    # -------------------------------------------------------------------------
    # Application
    # -------------------------------------------------------------------------
    app_name: str = "EA MCQ Review Agents"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # -------------------------------------------------------------------------
    # Providers (both expose OpenAI-compatible chat completion APIs)
    # -------------------------------------------------------------------------
    groq_api_key: str = ""
    groq_base_url: str = "https://api.groq.com/openai/v1"
    groq_models: dict[str, str] = {
        "fast": "llama-3.1-8b-instant",
        "smart": "llama-3.3-70b-versatile",
        "reason": "deepseek-r1-distill-llama-70b",
    }

    openrouter_api_key: str = ""
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    openrouter_models: dict[str, str] = {
        "fast": "meta-llama/llama-3.2-3b-instruct:free",
        "smart": "meta-llama/llama-3.1-70b-instruct:free",
        "reason": "deepseek/deepseek-r1:free",
    }
    # OpenRouter attribution headers
    openrouter_referer: str = "https://github.com/ea-mcq-review"
    openrouter_title: str = "EA MCQ Review System"

    # -------------------------------------------------------------------------
    # Inference
    # -------------------------------------------------------------------------
    # llm_timeout_seconds bounds every remote call. A timeout is reported as
    # a TransportError, so a stuck provider triggers the agent's fallback hop
    # instead of stalling the review.
    # -------------------------------------------------------------------------
    llm_temperature: float = 0.1
    llm_max_tokens: int = 1200
    llm_timeout_seconds: float = 60.0

    # -------------------------------------------------------------------------
    # Batch review
    # -------------------------------------------------------------------------
    # Pause between questions to stay under free-tier rate limits.
    # -------------------------------------------------------------------------
    batch_pause_seconds: float = 0.4

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """
    Create and cache a Settings instance.

    In tests, override with FastAPI's dependency_overrides:
        app.dependency_overrides[get_settings] = lambda: Settings(debug=True)
    """
    return Settings()


settings = get_settings()


# ---------------------------------------------------------------------------
# Model Catalog
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ProviderConfig:
    """Connection details for one provider and its tier → model mapping."""

    name: str
    base_url: str
    api_key: str
    models: Mapping[str, str]
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def has_credential(self) -> bool:
        return bool(self.api_key) and PLACEHOLDER_MARKER not in self.api_key


# Read-only provider name → ProviderConfig map
ModelCatalog = Mapping[str, ProviderConfig]


def build_catalog(config: Settings) -> ModelCatalog:
    """Freeze the provider section of the settings into a ModelCatalog."""
    providers = {
        "groq": ProviderConfig(
            name="groq",
            base_url=config.groq_base_url,
            api_key=config.groq_api_key,
            models=MappingProxyType(dict(config.groq_models)),
        ),
        "openrouter": ProviderConfig(
            name="openrouter",
            base_url=config.openrouter_base_url,
            api_key=config.openrouter_api_key,
            models=MappingProxyType(dict(config.openrouter_models)),
            headers=MappingProxyType({
                "HTTP-Referer": config.openrouter_referer,
                "X-Title": config.openrouter_title,
            }),
        ),
    }
    return MappingProxyType(providers)
