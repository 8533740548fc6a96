import os
import logging
from logging.handlers import RotatingFileHandler

from fastapi import FastAPI, APIRouter
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
import uvicorn
from contextlib import asynccontextmanager

from app.core.exceptions import (
    ConverterError,
    converter_exception_handler,
    general_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from app.core.middleware import (
    RateLimitMiddleware,
    RequestLoggingMiddleware,
)
from app.presentation.api.v1.dependencies.converter import ConverterRuntime
from app.presentation.api.v1.routers import conversions, health, media, tools
from app.core.config import settings


def configure_logging() -> None:
    """Log to console and to a rotating file"""
    log_handlers = [logging.StreamHandler()]
    if settings.log_file:
        os.makedirs(os.path.dirname(settings.log_file) or ".", exist_ok=True)
        log_handlers.append(
            RotatingFileHandler(
                settings.log_file,
                maxBytes=5 * 1024 * 1024,
                backupCount=2,
                encoding="utf-8",
            )
        )
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper()),
        format=settings.log_format,
        datefmt=settings.log_date_format,
        handlers=log_handlers,
    )
    logging.getLogger("aiohttp").setLevel(logging.WARNING)


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management"""
    logger.info("Starting Alpha WebM Converter...")
    runtime: ConverterRuntime = app.state.runtime
    # Check for ffmpeg (and download it if needed) without blocking startup
    if app.state.ensure_ready_on_startup:
        runtime.start_ensure_ready()
    yield
    logger.info("Shutting down Alpha WebM Converter...")
    await runtime.shutdown()


def create_application(
    runtime: ConverterRuntime | None = None, *, ensure_ready_on_startup: bool = True
) -> FastAPI:
    """Create and configure FastAPI application"""

    app = FastAPI(
        title=settings.api_title,
        description=settings.api_description,
        version=settings.api_version,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.runtime = runtime or ConverterRuntime()
    app.state.ensure_ready_on_startup = ensure_ready_on_startup

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    # Add custom middleware
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        RateLimitMiddleware,
        calls=settings.max_post_requests_per_minute,
        period=60,
    )

    # Add exception handlers
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(ConverterError, converter_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    # Include API routers under versioned prefix
    api_v1 = APIRouter(prefix="/api/v1")
    api_v1.include_router(tools.router)
    api_v1.include_router(media.router)
    api_v1.include_router(conversions.router)
    api_v1.include_router(health.router)
    app.include_router(api_v1)

    return app


def run() -> None:
    configure_logging()
    dev_mode = os.getenv("DEV_MODE", "false").lower() == "true"
    uvicorn.run(
        "app.presentation.main:create_application",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=dev_mode,
    )


if __name__ == "__main__":
    run()
