"""Health and readiness check routes."""

import logging

from fastapi import APIRouter

from config import settings
from errors import CatalogError
from services.carstat import get_carstat_client

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/ready")
async def ready() -> dict:
    """Lightweight readiness check — no external calls."""
    return {"status": "ok", "service": "carstat-catalog", "commit": settings.git_sha}


@router.get("/health")
async def health() -> dict:
    """Deep health check that verifies carstat API connectivity."""
    result = {"status": "ok", "service": "carstat-catalog", "commit": settings.git_sha, "upstream": "not_tested"}

    missing = settings.validate()
    if missing:
        result["upstream"] = "not_configured"
        result["upstream_missing"] = missing
        return result

    try:
        await get_carstat_client().ping()
        result["upstream"] = "connected"
    except CatalogError as e:
        logger.exception("carstat health check failed")
        result["upstream"] = "error"
        result["upstream_error"] = str(e)

    return result
