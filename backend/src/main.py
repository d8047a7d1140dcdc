"""Seller KYC Backend - Main FastAPI Application

This module creates and configures the main FastAPI application, including:
- Seller KYC and admin review routers
- Middleware (request ID correlation, CORS)
- Exception handlers
- Health and observability endpoints
"""

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from config import get_settings
from database import init_db
from domain.kyc.errors import ErrorCode, KYCValidationError
from observability.logging_config import configure_logging
from observability.middleware import RequestIDMiddleware
from observability.router import router as observability_router
from kyc.router import router as kyc_router
from kyc.admin_router import router as kyc_admin_router

settings = get_settings()

configure_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON)

logger = logging.getLogger(__name__)

IS_PRODUCTION = settings.ENV == "production"


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Seller KYC API starting up...")
    logger.info(f"Environment: {settings.ENV}")
    logger.info(f"KYC bucket: {settings.KYC_BUCKET_NAME}")

    if settings.DATABASE_URL.startswith("sqlite"):
        init_db()
        logger.info("SQLite database tables created")

    yield

    logger.info("Seller KYC API shutting down...")


app = FastAPI(
    title="Seller KYC API",
    description="Seller onboarding, KYC document collection and admin review",
    version="0.1.0",
    docs_url=None if IS_PRODUCTION else "/docs",
    redoc_url=None if IS_PRODUCTION else "/redoc",
    openapi_url=None if IS_PRODUCTION else "/openapi.json",
    lifespan=lifespan,
)


# =============================================================================
# MIDDLEWARE CONFIGURATION
# =============================================================================

app.add_middleware(RequestIDMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """Map request validation failures to 400 with field-level details."""
    errors = exc.errors()
    logger.warning(f"Validation error on {request.method} {request.url.path}: {errors}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "validation_error",
            "message": "Request validation failed",
            "details": [
                {"loc": list(error.get("loc", [])), "msg": error.get("msg"), "type": error.get("type")}
                for error in errors
            ],
        },
    )


@app.exception_handler(KYCValidationError)
async def kyc_validation_exception_handler(
    request: Request,
    exc: KYCValidationError
) -> JSONResponse:
    """Field-level KYC rule failures (wizard re-validation on submit)."""
    logger.info(f"KYC validation failed on {request.url.path}: {sorted(exc.errors)}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": ErrorCode.VALIDATION.value,
            "message": "Please correct the highlighted fields.",
            "errors": exc.errors,
        },
    )


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(
    request: Request,
    exc: SQLAlchemyError
) -> JSONResponse:
    """Handle database errors that escape the repository."""
    logger.error(
        f"Database error on {request.method} {request.url.path}",
        exc_info=exc
    )
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={
            "error": "database_error",
            "message": "A database error occurred. Please try again later.",
        },
    )


@app.exception_handler(Exception)
async def generic_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """Catch-all. Full details are logged but not exposed to the client."""
    logger.error(
        f"Unhandled exception on {request.method} {request.url.path}",
        exc_info=exc
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_error",
            "message": "An unexpected error occurred. Please try again later.",
        },
    )


# =============================================================================
# ROUTER REGISTRATION
# =============================================================================

# Observability (health, metrics, ready)
app.include_router(observability_router)

# Seller KYC
app.include_router(kyc_router, prefix="/api/v1")

# Admin review
app.include_router(kyc_admin_router, prefix="/api/v1")


@app.get("/", include_in_schema=False)
async def root() -> dict[str, Any]:
    return {
        "name": "Seller KYC API",
        "version": "0.1.0",
        "status": "running",
        "docs": None if IS_PRODUCTION else "/docs",
    }


def create_app() -> FastAPI:
    """Application factory for tests and ASGI servers."""
    return app


if __name__ == "__main__":
    import os

    import uvicorn

    uvicorn.run(
        "main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=settings.ENV == "development",
        log_level=settings.LOG_LEVEL.lower(),
    )
