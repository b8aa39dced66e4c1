"""Main FastAPI application for the MediaBuzz API."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.middleware.base import BaseHTTPMiddleware

from mediabuzz import __version__
from mediabuzz.api.deps import ServiceContainer
from mediabuzz.api.rate_limit import limiter
from mediabuzz.api.v1.admin import router as admin_router
from mediabuzz.api.v1.referral import router as referral_router
from mediabuzz.api.v1.users import router as users_router
from mediabuzz.api.v1.withdraw import router as withdraw_router
from mediabuzz.errors import InsufficientBalanceError, MediaBuzzError
from mediabuzz.logging_config import get_logger, setup_logging
from mediabuzz.settings import Settings, settings as default_settings
from mediabuzz.storage.db import MongoConnection
from mediabuzz.storage.store import RecordStore, build_record_store

logger = get_logger(__name__)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        # Prevent clickjacking and MIME sniffing
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        return response


def create_app(settings: Settings | None = None, store: RecordStore | None = None) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        settings: Application settings (defaults to the environment)
        store: Record store to use instead of probing the configured backends

    Returns:
        Configured FastAPI app
    """
    settings = settings or default_settings
    is_production = settings.is_production

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler."""
        setup_logging(settings)
        logger.info("app_starting", env=settings.env)

        connection = None
        record_store = store
        if record_store is None:
            connection = MongoConnection.from_settings(settings)
            record_store = build_record_store(settings, connection)

        app.state.services = ServiceContainer(settings, record_store)
        logger.info("services_initialized", backend=getattr(record_store, "backend", "custom"))

        yield

        logger.info("app_shutting_down")
        if connection is not None:
            connection.close()

    app = FastAPI(
        title="MediaBuzz API",
        description="Referral, share earnings and withdraw requests",
        version=__version__,
        docs_url=None if is_production else "/api/docs",
        redoc_url=None if is_production else "/api/redoc",
        openapi_url=None if is_production else "/api/openapi.json",
        lifespan=lifespan,
    )

    # Security Headers middleware (must be added before CORS)
    app.add_middleware(SecurityHeadersMiddleware)

    allowed_origins = [
        origin.strip()
        for origin in settings.allowed_origins.split(",")
        if origin.strip()
    ]

    # Block wildcard in production
    if is_production and "*" in allowed_origins:
        logger.error("cors_wildcard_blocked", message="Wildcard CORS not allowed in production")
        allowed_origins = []

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Accept", "X-Admin-Key"],
        max_age=3600,
    )

    # Rate limiting (shared instance from rate_limit module)
    app.state.limiter = limiter

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
        return JSONResponse(
            status_code=429,
            content={"detail": "Too many requests. Please try again later."},
        )

    @app.exception_handler(MediaBuzzError)
    async def mediabuzz_error_handler(request: Request, exc: MediaBuzzError):
        content = {"detail": exc.message}
        if isinstance(exc, InsufficientBalanceError):
            content["available"] = exc.available
            content["requested"] = exc.requested

        if exc.status_code >= 500:
            logger.error("request_failed", path=request.url.path, error=exc.message)
        return JSONResponse(status_code=exc.status_code, content=content)

    app.include_router(users_router, prefix="/api")
    app.include_router(referral_router, prefix="/api")
    app.include_router(withdraw_router, prefix="/api")
    app.include_router(admin_router, prefix="/api")

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "version": __version__,
            "env": settings.env,
        }

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "name": "MediaBuzz API",
            "version": __version__,
            "docs": "/api/docs",
        }

    return app


# Create app instance
app = create_app()
