"""
Cadence Tracker Backend - FastAPI Application
"""
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cadence import __version__
from cadence.api import sessions
from cadence.core.config import settings
from cadence.core.logging import get_logger, log_request, setup_logging
from cadence.models.schemas import format_iso, utc_now
from cadence.services.store import SessionRecordStore, build_repository

logger = get_logger(__name__)

SERVICE_NAME = "Cadence Tracker API"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    setup_logging()
    logger.info("Starting Cadence Tracker Backend", version=__version__)

    owned_repository = None
    if getattr(app.state, "store", None) is None:
        owned_repository = await build_repository(settings)
        app.state.store = SessionRecordStore(owned_repository)
        logger.info("Session storage initialized", backend=settings.STORAGE_BACKEND)

    yield

    # Shutdown
    if owned_repository is not None:
        await owned_repository.close()
    logger.info("Shutting down Cadence Tracker Backend")


def create_app(store: Optional[SessionRecordStore] = None) -> FastAPI:
    """
    Build the application.

    Args:
        store: Pre-built record store; when omitted one is created from
            settings at startup
    """
    app = FastAPI(
        title=SERVICE_NAME,
        description="Walking and running cadence session tracker backend",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.store = store

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def access_log(request: Request, call_next):
        started = time.perf_counter()
        # Unhandled errors surface as 500
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            log_request(
                logger,
                method=request.method,
                path=request.url.path,
                status_code=status_code,
                duration_ms=(time.perf_counter() - started) * 1000,
            )

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        logger.exception("Unhandled error", path=request.url.path, error=str(exc))
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "Something went wrong!"},
        )

    # Include routers
    app.include_router(sessions.router, prefix="/sessions", tags=["sessions"])
    # Path used by existing tracking clients
    app.include_router(
        sessions.router, prefix="/api/cadence", tags=["cadence"], include_in_schema=False
    )

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "OK",
            "timestamp": format_iso(utc_now()),
            "service": SERVICE_NAME,
        }

    @app.get("/")
    async def index():
        """Service info and endpoint directory."""
        return {
            "message": f"Welcome to {SERVICE_NAME}",
            "version": __version__,
            "endpoints": {
                "health": "/health",
                "sessions": "/sessions",
                "getAllSessions": "/sessions",
                "createSession": "/sessions (POST)",
                "getSessionById": "/sessions/:id",
                "updateSession": "/sessions/:id (PUT)",
                "deleteSession": "/sessions/:id (DELETE)",
                "statsSummary": "/sessions/stats/summary",
                "legacy": "/api/cadence",
            },
        }

    return app


app = create_app()
