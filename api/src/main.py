"""
FastAPI application entry point for the Posts API.

This module provides the main FastAPI application with:
- Users and posts routers
- Health and readiness endpoints
- Request logging with correlation IDs
- Error handlers rendering ``{"error", "details"}`` bodies
- MongoDB client lifecycle (startup ping, index creation, shutdown)
"""

import structlog
import uvicorn
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Dict, Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from pymongo.errors import PyMongoError

from api.src.config import get_settings, Settings
from api.src.dependencies import (
    close_mongo_client,
    ensure_indexes,
    get_database,
    get_mongo_client,
    init_mongo_client,
)
from api.src.errors import ApiError, StoreError
from api.src.middleware import RequestLoggingMiddleware
from api.src.routers import posts, users
from shared.logging import configure_logging
from shared.models import HealthStatus, ServiceInfo

logger = structlog.get_logger(__name__)

settings: Settings = get_settings()

configure_logging(
    log_level=settings.log_level,
    json_logs=settings.log_format == "json",
    service_name=settings.app_name,
    environment=settings.environment,
)


async def prepare_database() -> None:
    """
    Check MongoDB connectivity and create indexes.

    A failure is logged and swallowed so the API keeps serving; the
    repository dependencies retry index creation on later requests.
    """
    try:
        await get_mongo_client().admin.command("ping")
        logger.info("database_connected", database=settings.mongodb_database)

        await ensure_indexes(get_database())
    except (PyMongoError, StoreError) as e:
        logger.error("database_connection_failed", error=str(e))


# ============================================================================
# Lifespan Management
# ============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager for startup and shutdown events.

    Handles:
    - MongoDB client initialization
    - Connectivity check and index creation
    - Graceful shutdown and resource cleanup
    """
    logger.info(
        "application_starting",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment
    )

    init_mongo_client(settings)
    await prepare_database()

    logger.info("application_started", app_name=settings.app_name)

    try:
        yield
    finally:
        logger.info("application_shutting_down")
        await close_mongo_client()
        logger.info("application_shutdown_complete")


# ============================================================================
# FastAPI Application
# ============================================================================

app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="REST API for users and posts stored in MongoDB.",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
    debug=settings.debug,
)

# ============================================================================
# Middleware Configuration
# ============================================================================

if settings.cors_enabled:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

app.add_middleware(RequestLoggingMiddleware)

# ============================================================================
# Exception Handlers
# ============================================================================

@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    """Render API errors as ``{"error", "details"}``."""
    logger.warning(
        "api_error",
        path=request.url.path,
        status_code=exc.status_code,
        error=exc.error or exc.default_error,
        details=exc.details,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle request validation errors as 400 instead of FastAPI's 422."""
    details = [
        {
            "field": ".".join(str(part) for part in error["loc"] if part != "body"),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
    logger.warning("validation_error", path=request.url.path, errors=details)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Validation failed", "details": details}
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.error(
        "unexpected_exception",
        path=request.url.path,
        error=str(exc),
        exc_info=True
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error", "details": None}
    )

# ============================================================================
# Health and Readiness Endpoints
# ============================================================================

@app.get("/health", tags=["Health"])
async def health_check() -> Dict[str, Any]:
    """
    Health check endpoint.

    Returns basic health status without checking dependencies.
    """
    return ServiceInfo(
        service_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
        status=HealthStatus.HEALTHY,
    ).model_dump(mode="json")


@app.get("/ready", tags=["Health"])
async def readiness_check() -> JSONResponse:
    """
    Readiness check endpoint.

    Returns 200 when MongoDB answers a ping, 503 otherwise.
    """
    database_status = HealthStatus.HEALTHY
    try:
        await get_mongo_client().admin.command("ping")
    except (PyMongoError, RuntimeError) as e:
        logger.error("database_health_check_failed", error=str(e))
        database_status = HealthStatus.UNHEALTHY

    ready = database_status == HealthStatus.HEALTHY
    info = ServiceInfo(
        service_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
        status=HealthStatus.HEALTHY if ready else HealthStatus.UNHEALTHY,
        dependencies={"database": database_status},
    )

    return JSONResponse(
        status_code=status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE,
        content=info.model_dump(mode="json"),
    )

# ============================================================================
# API Router Registration
# ============================================================================

app.include_router(users.router)
app.include_router(posts.router)

# ============================================================================
# Application Entry Point
# ============================================================================

if __name__ == "__main__":
    logger.info(
        "starting_uvicorn_server",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )

    uvicorn.run(
        "api.src.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
        access_log=True,
    )
