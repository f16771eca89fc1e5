"""FastAPI application factory.

Creates the app with CORS, routers, error handlers, and OpenAPI metadata.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from services.error_handler import is_retryable
from services.exceptions import (
    ResumeBuilderError,
    AuthenticationError,
    SubscriptionRequiredError,
    UsageLimitError,
    ValidationError,
    GenerationInProgressError,
    GenerationFailedError,
    ProfileNotFoundError,
    ResumeNotFoundError,
    BackendError,
    WebhookError,
    ConfigurationError,
    ExportFailedError,
)

from .auth import get_api_key_path, get_or_create_api_key
from .dependencies import get_config, get_error_handler, get_task_manager
from .routers import (
    admin,
    auth,
    billing,
    builder,
    entitlements,
    export,
    flow,
    generation,
    profile,
    settings,
    tasks,
    usage,
    versions,
)

logger = logging.getLogger(__name__)

# Map service exceptions to HTTP status codes
EXCEPTION_STATUS_MAP = {
    AuthenticationError: 401,
    SubscriptionRequiredError: 402,
    ProfileNotFoundError: 404,
    ResumeNotFoundError: 404,
    GenerationInProgressError: 409,
    ValidationError: 422,
    UsageLimitError: 429,
    WebhookError: 400,
    GenerationFailedError: 502,
    BackendError: 502,
    ConfigurationError: 503,
    ExportFailedError: 500,
}


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        get_or_create_api_key(get_api_key_path(get_config()))
        logger.info("Resume Builder API starting (API key in %s)", get_api_key_path(get_config()))
        yield
        # Shutdown
        await get_task_manager().wait()
        get_task_manager().shutdown()

    app = FastAPI(
        title="Resume Builder API",
        description="AI-assisted résumé tailoring - REST API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS - allow localhost on any port
    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=r"https?://localhost(:\d+)?",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Mount routers under /api/v1
    prefix = "/api/v1"
    app.include_router(settings.router, prefix=prefix, tags=["Settings"])
    app.include_router(profile.router, prefix=prefix, tags=["Profile"])
    app.include_router(builder.router, prefix=prefix, tags=["Builder"])
    app.include_router(generation.router, prefix=prefix, tags=["Generation"])
    app.include_router(usage.router, prefix=prefix, tags=["Usage"])
    app.include_router(entitlements.router, prefix=prefix, tags=["Entitlements"])
    app.include_router(flow.router, prefix=prefix, tags=["Flow"])
    app.include_router(export.router, prefix=prefix, tags=["Export"])
    app.include_router(auth.router, prefix=prefix, tags=["Auth"])
    app.include_router(admin.router, prefix=prefix, tags=["Admin"])
    app.include_router(billing.router, prefix=prefix, tags=["Billing"])
    app.include_router(versions.router, prefix=prefix, tags=["Versions"])
    app.include_router(tasks.router, prefix=prefix, tags=["Tasks"])
    app.include_router(billing.webhook_router, tags=["Billing"])

    # Global exception handler for service-layer errors
    @app.exception_handler(ResumeBuilderError)
    async def resume_builder_error_handler(request: Request, exc: ResumeBuilderError):
        status_code = next(
            (code for exc_type, code in EXCEPTION_STATUS_MAP.items() if isinstance(exc, exc_type)),
            500,
        )
        report = get_error_handler().handle_error(exc, {"path": request.url.path})
        return JSONResponse(
            status_code=status_code,
            content={
                "detail": str(exc),
                "code": report.code,
                "user_message": report.user_message,
                "retryable": is_retryable(report.code),
            },
        )

    # Health check (no auth)
    @app.get("/health", tags=["System"])
    async def health():
        return {"status": "ok"}

    return app
