# =============================================================================
# Health API — Service and Provider Status
# =============================================================================
#
# Reports which providers have a usable credential. Missing keys are not a
# startup failure (agents fall back or degrade per call), so this endpoint
# is the place to see a misconfiguration before running a batch.
# =============================================================================

from __future__ import annotations

from fastapi import APIRouter, Depends

from mcq_review.config import Settings, build_catalog, get_settings
from mcq_review.models.responses import HealthResponse
from mcq_review.services.inference import provider_status

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
async def health(config: Settings = Depends(get_settings)) -> HealthResponse:
    return HealthResponse(
        version=config.app_version,
        service=config.app_name,
        providers=provider_status(build_catalog(config)),
    )
