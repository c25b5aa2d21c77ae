"""
FastAPI application with assembled routers.

Initializes FastAPI app with all API routers, builds the service container
in the lifespan and configures uvicorn server.

Dependencies: fastapi, ragengine.api.routers, uvicorn
System role: API entry point with router assembly and server launch
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ragengine.application.container import ServiceContainer, build_container
from ragengine.boundary.db.create_tables import create_all_tables
from ragengine.configs import get_settings
from ragengine.core.exceptions import RagEngineError
from ragengine.models.common import ErrorResponse
from ragengine.observability.logger import configure_logging
from ragengine.observability.middleware import CorrelationMiddleware, RequestLoggingMiddleware

from .routers import (
    agent_router,
    chat_stream_router,
    documents_router,
    health_router,
    sessions_router,
)

logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    "ValidationError": 400,
    "SecurityViolation": 403,
    "ResourceNotFound": 404,
    "ConcurrencyConflict": 409,
    "PermanentExtractionFailure": 422,
    "Cancelled": 408,
    "TransientUpstream": 503,
}


def _lifespan(container: ServiceContainer | None):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan context manager.

        Builds shared services on startup (unless injected) and starts the
        memory scheduler; stops both on shutdown.
        """
        active = container
        if active is None:
            settings = get_settings()
            configure_logging(settings.log_level)
            active = build_container(settings)
        if active.settings.database.auto_create_tables:
            await create_all_tables(active.engine)

        app.state.container = active
        if active.settings.memory.enabled:
            await active.scheduler.start()
        logger.info(f"{__name__}:lifespan - services ready")

        yield

        await active.aclose()
        logger.info(f"{__name__}:lifespan - services stopped")

    return lifespan


async def rag_engine_error_handler(request: Request, exc: RagEngineError) -> JSONResponse:
    status_code = STATUS_BY_KIND.get(exc.kind, 500)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} - {exc.kind}: {exc}")
    return JSONResponse(status_code=status_code, content=ErrorResponse(**exc.to_payload()).model_dump())


def create_app(container: ServiceContainer | None = None) -> FastAPI:
    """
    Create and configure FastAPI application with routers.

    Args:
        container: Pre-built services (tests); built from settings when None

    Returns:
        FastAPI: Configured application instance with all routers registered
    """
    app = FastAPI(
        title="RAG Engine API",
        description="Grounded retrieval-augmented chat, document ingestion and tool-calling agent",
        version="0.1.0",
        lifespan=_lifespan(container),
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add observability middleware
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationMiddleware)

    app.add_exception_handler(RagEngineError, rag_engine_error_handler)

    # Register all routers with /api/v1 prefix for versioning
    app.include_router(health_router, prefix="/api/v1")
    app.include_router(sessions_router, prefix="/api/v1")
    app.include_router(documents_router, prefix="/api/v1")
    app.include_router(agent_router, prefix="/api/v1")
    app.include_router(chat_stream_router, prefix="/api/v1")

    return app


if __name__ == "__main__":
    uvicorn.run(
        "ragengine.api.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
    )
