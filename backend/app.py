"""FastAPI application entry point for the vehicle auction catalog."""

import logging
import sys

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from config import settings
from errors import register_error_handlers
from services.sessions import SESSION_COOKIE, new_session_id

# Structured logging: JSON for production, human-readable for local
if settings.is_production:
    logging.basicConfig(
        level=logging.INFO,
        format='{"time":"%(asctime)s","level":"%(levelname)s","logger":"%(name)s","message":"%(message)s"}',
        stream=sys.stdout,
    )
else:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(title="Carstat Catalog", version="1.0.0")

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Browsing session: every request carries a session id for the page cache
    @app.middleware("http")
    async def attach_session(request: Request, call_next):
        session_id = request.cookies.get(SESSION_COOKIE)
        is_new = not session_id
        if is_new:
            session_id = new_session_id()
        request.state.session_id = session_id

        response: Response = await call_next(request)
        if is_new:
            response.set_cookie(
                SESSION_COOKIE,
                session_id,
                httponly=True,
                samesite="lax",
                secure=settings.is_production,
            )
        return response

    # Security headers
    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response: Response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        if settings.is_production:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response

    # Centralized error handlers
    register_error_handlers(app)

    from routes.health import router as health_router
    from routes.cars import router as cars_router
    from routes.pages import router as pages_router

    app.include_router(health_router)
    app.include_router(cars_router)
    app.include_router(pages_router)

    @app.on_event("startup")
    async def _validate_config() -> None:
        missing = settings.validate()
        if missing:
            logger.warning("Missing env vars (upstream requests will fail): %s", ", ".join(missing))

    return app


app = create_app()
