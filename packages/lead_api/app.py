"""FastAPI Application Factory for the voice lead collection backend.

This module provides the FastAPI application factory and configuration
for the lead collection REST API.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Optional

from fastapi import FastAPI  # type: ignore[import-not-found]
from fastapi.middleware.cors import CORSMiddleware  # type: ignore[import-not-found]
from prometheus_client import make_asgi_app  # type: ignore[import-not-found]

from lead_config import LeadFlowConfig, load_config_from_yaml
from lead_core import StepEngine
from lead_runtime import SessionStatus, SessionStore

logger = logging.getLogger(__name__)


class AppState:
    """Application state container."""

    def __init__(self) -> None:
        """Initialize application state."""
        self.engine: Optional[StepEngine] = None
        self.store: Optional[SessionStore] = None
        self.config: Optional[LeadFlowConfig] = None


app_state = AppState()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application lifespan.

    Args:
        app: FastAPI application instance

    Yields:
        None during application lifetime
    """
    if app_state.store is None:
        app_state.store = SessionStore()
    if app_state.engine is None and app_state.config is not None:
        app_state.engine = StepEngine(app_state.config, app_state.store)

    logger.info("Lead collection API ready (%d steps)", _step_count())

    yield

    logger.info("Lead collection API shutting down")
    app_state.engine = None
    app_state.store = None
    app_state.config = None


def _step_count() -> int:
    return app_state.config.step_count if app_state.config is not None else 0


def create_app(
    config: Optional[LeadFlowConfig] = None,
    config_path: Optional[str] = None,
    cors_origins: Optional[list[str]] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Without a config or config path the built-in name/email/phone/interest
    flow is used.

    Args:
        config: Optional pre-loaded flow configuration
        config_path: Optional path to configuration file
        cors_origins: Optional list of allowed CORS origins

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="Voice Lead Collection",
        description="REST API for the voice-driven lead collection chat",
        version="0.1.0",
        lifespan=lifespan,
    )

    if cors_origins is None:
        cors_origins = ["*"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if config is not None:
        app_state.config = config
    elif config_path is not None:
        app_state.config = load_config_from_yaml(config_path)
    else:
        app_state.config = LeadFlowConfig()

    app_state.store = SessionStore()
    app_state.engine = StepEngine(app_state.config, app_state.store)

    _register_routes(app)

    return app


def _register_routes(app: FastAPI) -> None:
    """Register API routes.

    Args:
        app: FastAPI application instance
    """
    from .config_routes import config_router
    from .routes import router as chat_router

    app.include_router(chat_router)
    app.include_router(config_router)
    app.mount("/metrics", make_asgi_app())

    @app.get("/health")  # type: ignore[misc]
    async def health_check() -> dict[str, Any]:
        """Health check endpoint.

        Returns:
            Health status information
        """
        return {
            "status": "healthy",
            "version": "0.1.0",
            "engine_configured": app_state.engine is not None,
            "active_sessions": (
                app_state.store.count(SessionStatus.ACTIVE) if app_state.store is not None else 0
            ),
        }

    @app.get("/")  # type: ignore[misc]
    async def root() -> dict[str, Any]:
        """Root endpoint.

        Returns:
            Welcome message and API information
        """
        return {
            "message": "Welcome to the Voice Lead Collection API",
            "version": "0.1.0",
            "docs_url": "/docs",
        }


def get_app_state() -> AppState:
    """Get the application state.

    Returns:
        Current application state
    """
    return app_state
