"""Translate domain exceptions into HTTP responses."""

from __future__ import annotations

import asyncpg
import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from statusboard.core.exceptions import (
    Forbidden,
    NotFound,
    StorageFailure,
    Unauthenticated,
    ValidationError,
)

logger = structlog.get_logger()

INTERNAL_ERROR_MESSAGE = "Internal server error"
UNAUTHENTICATED_MESSAGE = "Invalid or expired token"


def setup_exception_handlers(app: FastAPI) -> None:
    """Register handlers mapping the domain error taxonomy to status codes.

    Response bodies use the same ``{"detail": ...}`` shape as HTTPException.
    """

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc), "code": exc.code.value})

    @app.exception_handler(NotFound)
    async def not_found_handler(request: Request, exc: NotFound) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(Unauthenticated)
    async def unauthenticated_handler(request: Request, exc: Unauthenticated) -> JSONResponse:
        return JSONResponse(
            status_code=401,
            content={"detail": UNAUTHENTICATED_MESSAGE},
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(Forbidden)
    async def forbidden_handler(request: Request, exc: Forbidden) -> JSONResponse:
        return JSONResponse(status_code=403, content={"detail": str(exc)})

    @app.exception_handler(StorageFailure)
    async def storage_failure_handler(request: Request, exc: StorageFailure) -> JSONResponse:
        logger.error("storage_failure", path=request.url.path, error=str(exc))
        return JSONResponse(status_code=500, content={"detail": INTERNAL_ERROR_MESSAGE})

    @app.exception_handler(asyncpg.PostgresError)
    async def postgres_error_handler(
        request: Request, exc: asyncpg.PostgresError
    ) -> JSONResponse:
        logger.error(
            "database_error",
            path=request.url.path,
            error_type=type(exc).__name__,
            error=str(exc),
        )
        return JSONResponse(status_code=500, content={"detail": INTERNAL_ERROR_MESSAGE})
