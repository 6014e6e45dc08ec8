"""
FastAPI application factory
"""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging
import sentry_sdk

from app.core.config import get_settings
from app.core.database import create_supabase_admin_client, create_supabase_client
from app.core.events import NotificationBus
from app.core.logging_config import setup_logging
from app.core.services import build_services
from app.domain.exceptions import ServiceError
from app.api.v1.router import api_router

logger = logging.getLogger(__name__)


def init_sentry():
    """Initialize Sentry when a DSN is configured"""
    settings = get_settings()
    if settings.SENTRY_DSN:
        sentry_sdk.init(
            dsn=settings.SENTRY_DSN,
            environment=settings.APP_ENV,
            send_default_pii=False,
            traces_sample_rate=1.0,
        )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    settings = get_settings()

    # Startup
    setup_logging()
    app.state.supabase = create_supabase_client(settings)
    admin_client = create_supabase_admin_client(settings)

    logger.info("Initializing notification bus...")
    event_bus = NotificationBus(settings.REDIS_URL)
    await event_bus.connect()
    app.state.services = build_services(admin_client, event_bus, settings)

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down notification bus...")
    await event_bus.drain()
    await event_bus.disconnect()
    logger.info("Application shutdown complete")


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Map service exceptions to JSON error responses"""
    if exc.code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    else:
        logger.warning(f"{request.method} {request.url.path} rejected: {exc}")
    return JSONResponse(
        status_code=exc.code,
        content={"detail": exc.message, "error_code": exc.error_code},
    )


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    settings = get_settings()
    init_sentry()

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
        docs_url="/api/docs" if not settings.is_production else None,
        redoc_url="/api/redoc" if not settings.is_production else None,
    )

    # CORS Middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # GZip Middleware
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    app.add_exception_handler(ServiceError, service_error_handler)

    # Include API router
    app.include_router(api_router, prefix="/api/v1")

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "app": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "environment": settings.APP_ENV
        }

    return app
