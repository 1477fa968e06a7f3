# =============================================================================
# FastAPI Application Entry Point
# =============================================================================
#
# Run locally:
#   uvicorn mcq_review.main:app --reload
# =============================================================================

import logging

from fastapi import FastAPI

from mcq_review.api import health, review
from mcq_review.config import build_catalog, settings
from mcq_review.services.inference import provider_status

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
    )
    app.include_router(health.router)
    app.include_router(review.router)

    for name, configured in provider_status(build_catalog(settings)).items():
        logger.info("Provider %s: %s", name, "configured" if configured else "not set")

    return app


app = create_app()
