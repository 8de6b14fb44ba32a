"""
DevKit Backend - FastAPI Application

Main entry point for the application.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.deps import get_email_gateway, get_username_generator
from app.api.v1 import router as api_v1_router
from app.core.config import settings
from app.core.database import close_db, init_db
from app.core.exceptions import (
    ConfigurationError,
    DevKitError,
    OTPError,
    ResendCooldownError,
)
from app.core.logging_config import setup_logging


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.

    In development the tables are created directly; other environments
    use Alembic migrations. Outside development, the mail and
    text-generation collaborators are built at startup so missing
    credentials stop the process before it serves requests.
    """
    # Startup
    setup_logging()
    logger.info("Starting DevKit Backend (%s)", settings.ENVIRONMENT)
    if settings.is_development:
        await init_db()
    else:
        get_email_gateway()
        get_username_generator()
    yield
    # Shutdown
    logger.info("Shutting down DevKit Backend")
    await close_db()


# Create FastAPI application
app = FastAPI(
    title="DevKit Backend",
    description="Project setup command generator with accounts, templates and community features.",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============== Error Handlers ==============

@app.exception_handler(DevKitError)
async def devkit_error_handler(request: Request, exc: DevKitError) -> JSONResponse:
    """Render domain errors as {"error"}, plus "reason" for rejected codes."""
    content = {"error": exc.message}
    if isinstance(exc, OTPError):
        content["reason"] = exc.reason

    headers = None
    if isinstance(exc, ResendCooldownError):
        headers = {"Retry-After": str(exc.retry_after)}

    return JSONResponse(status_code=exc.status_code, content=content, headers=headers)


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError) -> JSONResponse:
    logger.error("Configuration error: %s", exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"error": "Service is not configured"},
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report the first validation problem as a 400."""
    errors = exc.errors()
    message = errors[0]["msg"] if errors else "Invalid request"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": message.removeprefix("Value error, ")},
    )


# Include API routers
app.include_router(api_v1_router, prefix="/api/v1")


@app.get("/health", tags=["Health"])
async def health_check() -> dict:
    """
    Health check endpoint.

    Returns:
        dict: Health status and environment info.
    """
    return {
        "status": "healthy",
        "environment": settings.ENVIRONMENT,
        "version": "0.1.0",
    }


@app.get("/", tags=["Root"])
async def root() -> dict:
    return {
        "message": "Welcome to DevKit Backend API",
        "docs": "/docs",
        "health": "/health",
    }
