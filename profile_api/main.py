"""
User Profile Management API - Main FastAPI Application.

Entry point for the backend API server.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from profile_api.api.errors import register_exception_handlers
from profile_api.api.v1.router import api_router
from profile_api.core.config import DEFAULT_JWT_SECRET, Settings, get_settings
from profile_api.core.database import Database
from profile_api.core.logging import setup_logging
from profile_api.core.security import build_password_hasher, build_token_issuer
from profile_api.middleware.request_logging import RequestLoggingMiddleware
from profile_api.middleware.security import BodySizeLimitMiddleware, SecurityHeadersMiddleware

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Connects the credential store on startup and closes it on shutdown.
    """
    settings: Settings = app.state.settings
    logger.info(f"Starting {settings.app_name} ({settings.app_env})")
    if settings.is_production and settings.jwt_secret_key == DEFAULT_JWT_SECRET:
        logger.warning("JWT_SECRET_KEY is not set; tokens are signed with the default secret")
    await app.state.database.connect()

    yield

    logger.info(f"Shutting down {settings.app_name}")
    await app.state.database.close()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application and its long-lived collaborators.

    Args:
        settings: Configuration; defaults to the environment-derived settings.

    Returns:
        FastAPI: Configured application. The database connects in the lifespan.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="User profile management with role-based access control",
        version=VERSION,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    app.state.settings = settings
    app.state.database = Database(settings.database_url, echo=False)
    app.state.password_hasher = build_password_hasher(settings)
    app.state.token_issuer = build_token_issuer(settings)

    # Last added runs first
    app.add_middleware(BodySizeLimitMiddleware, max_body_size=settings.max_body_size)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(SecurityHeadersMiddleware)

    register_exception_handlers(app)
    app.include_router(api_router, prefix=settings.api_prefix)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "OK",
            "message": f"{settings.app_name} is running",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    return app


def build_default_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.log_level, json_output=settings.log_json)
    return create_app(settings)


app = build_default_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run("profile_api.main:app", host=settings.host, port=settings.port)
