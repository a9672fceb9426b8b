"""FastAPI application factory and lifespan management."""

import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.dependencies import get_settings, init_services, shutdown_services
from src.api.middleware.error_handler import error_handler_middleware
from src.api.middleware.logging import LoggingMiddleware
from src.api.openapi.routes import health, processing, realtime
from src.commons.settings.models import Settings
from src.commons.telemetry import configure_logging, get_logger
from src.commons.telemetry.logger import JsonFormatter, TextFormatter

_UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")

logger = get_logger(__name__)


def _log_level(settings: Settings) -> str:
    return (settings.telemetry.log_level or settings.app.log_level).upper()


def _setup_logging(settings: Settings) -> None:
    """Configure the ``src`` logger tree before uvicorn starts."""
    level = _log_level(settings)
    configure_logging(
        level=level,
        format_type=settings.telemetry.log_format,
        logger_name="src",
    )
    logging.getLogger().setLevel(level)


def _align_uvicorn_logging(settings: Settings) -> None:
    """Give uvicorn's loggers our formatter once their handlers exist."""
    level = _log_level(settings)
    formatter: logging.Formatter = (
        JsonFormatter() if settings.telemetry.log_format == "json" else TextFormatter()
    )

    for name in _UVICORN_LOGGERS:
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.setLevel(level)
        if not uvicorn_logger.handlers:
            uvicorn_logger.addHandler(logging.StreamHandler(sys.stdout))
            uvicorn_logger.propagate = False
        for handler in uvicorn_logger.handlers:
            handler.setFormatter(formatter)
            handler.setLevel(level)


_setup_logging(get_settings())


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Build the pipeline on startup; cancel runs and close clients on exit."""
    settings = get_settings()
    _align_uvicorn_logging(settings)

    await init_services(settings)
    logger.info(
        "Service started",
        extra={
            "environment": settings.app.environment,
            "moderation": settings.moderation.provider,
            "realtime": settings.realtime.provider,
        },
    )

    yield

    await shutdown_services()
    logger.info("Service stopped")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()
    docs = settings.server.docs_enabled

    app = FastAPI(
        title=settings.app.name,
        version=settings.app.version,
        description="Video sensitivity analysis pipeline with real-time progress",
        docs_url="/docs" if docs else None,
        redoc_url="/redoc" if docs else None,
        openapi_url="/openapi.json" if docs else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(LoggingMiddleware)
    app.middleware("http")(error_handler_middleware)

    # Health routes stay unprefixed for probes
    app.include_router(health.router, tags=["Health"])

    prefix = settings.server.api_prefix
    app.include_router(processing.router, prefix=prefix, tags=["Processing"])
    app.include_router(realtime.router, prefix=prefix, tags=["Realtime"])

    return app


app = create_app()
