"""
==============================================================================
Scanfuse Barcode Scanner - Application Entry Point
==============================================================================

FastAPI application with:
- RESTful scan endpoint (base64 image upload)
- Scanner preset listing
- Health probes reporting decode backend availability

Usage:
------
    # Development
    uvicorn scanfuse.main:app --reload

    # Production
    uvicorn scanfuse.main:app --host 0.0.0.0 --port 8000

==============================================================================
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from scanfuse import __version__
from scanfuse.api.router import api_router
from scanfuse.config import configure_logging, get_settings
from scanfuse.core.exceptions import register_exception_handlers
from scanfuse.scanner.backends import backend_availability
from scanfuse.schemas.common import MessageResponse


# ============================================================================
# LOGGING SETUP
# ============================================================================

settings = get_settings()
configure_logging(settings)

logger = logging.getLogger(__name__)


# ============================================================================
# APPLICATION FACTORY
# ============================================================================

class Application:
    """
    FastAPI application factory and manager.

    Handles application lifecycle including:
    - Startup and shutdown events
    - Middleware configuration
    - Router registration
    - Exception handler setup
    """

    def __init__(self):
        """Initialize the application."""
        self._settings = get_settings()
        self._app = self._create_app()

    def _create_app(self) -> FastAPI:
        """Create and configure the FastAPI application."""
        app = FastAPI(
            title=self._settings.app_name,
            version=__version__,
            description="Multi-backend barcode and 2D code scanning",
            lifespan=self._lifespan,
            docs_url="/docs",
            redoc_url="/redoc",
        )

        self._configure_middleware(app)
        register_exception_handlers(app)
        self._register_routers(app)
        self._register_root(app)

        return app

    @asynccontextmanager
    async def _lifespan(self, app: FastAPI):
        """Application lifespan manager."""
        self._startup()
        yield
        self._shutdown()

    def _startup(self) -> None:
        """Application startup tasks."""
        logger.info("=" * 60)
        logger.info(f"🚀 Starting {self._settings.app_name}")
        logger.info("=" * 60)

        for backend_id, available in backend_availability().items():
            if available:
                logger.info(f"✅ Decode backend available: {backend_id}")
            else:
                logger.warning(f"⚠️ Decode backend missing: {backend_id}")

        logger.info(f"🔧 Default preset: {self._settings.default_preset}")
        logger.info(f"📖 API Docs: http://{self._settings.host}:{self._settings.port}/docs")
        logger.info("=" * 60)

    def _shutdown(self) -> None:
        """Application shutdown tasks."""
        logger.info("🛑 Shutting down...")

    def _configure_middleware(self, app: FastAPI) -> None:
        """Configure application middleware."""
        app.add_middleware(
            CORSMiddleware,
            allow_origins=self._settings.cors_origins_list,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    def _register_routers(self, app: FastAPI) -> None:
        """Register API routers."""
        app.include_router(api_router)

    def _register_root(self, app: FastAPI) -> None:
        """Register root endpoint."""

        @app.get("/", response_model=MessageResponse)
        async def root():
            """Service banner."""
            return MessageResponse(message=f"{self._settings.app_name} {__version__}")

    @property
    def app(self) -> FastAPI:
        """Get the FastAPI application instance."""
        return self._app


# ============================================================================
# APPLICATION INSTANCE
# ============================================================================

application = Application()
app = application.app


# ============================================================================
# ENTRY POINT
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "scanfuse.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level="debug" if settings.debug else "info"
    )
