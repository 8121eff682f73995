"""
FastAPI application with assembled routers.

Initializes FastAPI app with all API routers and configures uvicorn server.

Dependencies: fastapi, docchat.api.routers, uvicorn
System role: API entry point with router assembly and server launch
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from docchat.api.deps import ServiceCache
from docchat.configs import get_settings
from docchat.observability.logger import configure_logging
from docchat.observability.middleware import CorrelationMiddleware, RequestLoggingMiddleware
from .routers import (
    chat_stream_router,
    documents_router,
    health_router,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Creates the shared service container (record store included) at startup
    and lets in-flight chat turns finish on shutdown.
    """
    logger = logging.getLogger("uvicorn")

    # Startup
    if getattr(app.state, "services", None) is None:
        app.state.services = ServiceCache(get_settings())
    cache: ServiceCache = app.state.services
    _ = cache.store
    _ = cache.session_manager
    _ = cache.document_service
    if not cache.settings.completion.api_key:
        logger.warning("GEMINI_API_KEY is not set; completion requests will fail")
    logger.info("Service cache pre-warmed")

    yield

    # Shutdown
    await cache.session_manager.drain()
    cache.clear()
    logger.info("Service cache cleared")


def create_app(services: ServiceCache | None = None) -> FastAPI:
    """
    Create and configure FastAPI application with routers.

    Args:
        services: Optional pre-built service container (tests inject stubs)

    Returns:
        FastAPI: Configured application instance with all routers registered
    """
    app = FastAPI(
        title="DocChat API",
        description="Upload a PDF and chat with its content",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationMiddleware)

    app.include_router(health_router, prefix="/api")
    app.include_router(documents_router, prefix="/api")
    app.include_router(chat_stream_router)

    return app


def main() -> None:
    """Run the API server with uvicorn."""
    configure_logging(get_settings().log_level)
    uvicorn.run(
        "docchat.api.main:app",
        host="0.0.0.0",
        port=8000,
    )


app = create_app()


if __name__ == "__main__":
    main()
