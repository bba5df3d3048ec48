"""Custom exceptions and centralized FastAPI error handlers."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class CatalogError(Exception):
    """Base exception with HTTP status code."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.status_code = status_code


class ConfigurationError(CatalogError):
    def __init__(self, message: str = "Server configuration error"):
        super().__init__(message, status_code=500)


class VehicleNotFoundError(CatalogError):
    def __init__(self, lot: str, domain: str):
        super().__init__("Vehicle not found", status_code=404)
        self.lot = lot
        self.domain = domain


class UpstreamError(CatalogError):
    """carstat API call failed; ``upstream_status`` is None for transport errors."""

    def __init__(self, message: str, upstream_status: int | None = None):
        super().__init__(message, status_code=500)
        self.upstream_status = upstream_status


def register_error_handlers(app: FastAPI) -> None:
    """Register centralized exception handlers on the FastAPI app."""

    @app.exception_handler(CatalogError)
    async def handle_catalog_error(_request: Request, exc: CatalogError):
        return JSONResponse({"error": str(exc)}, status_code=exc.status_code)

    @app.exception_handler(ValueError)
    async def handle_value_error(_request: Request, exc: ValueError):
        return JSONResponse({"error": str(exc)}, status_code=400)

    @app.exception_handler(Exception)
    async def handle_unexpected(_request: Request, exc: Exception):
        logger.exception("Unhandled error: %s", exc)
        return JSONResponse(
            {"error": "Internal server error"},
            status_code=500,
        )
