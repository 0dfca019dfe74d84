"""
Error translation at the HTTP boundary.

Every error body has the shape ``{"detail": {"message", "code", "details"}}``.
"""

import logging
from typing import Any, NoReturn

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .core.exceptions import DomainException

logger = logging.getLogger(__name__)


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


def _error_body(message: str, code: str, details: Any = None) -> dict[str, Any]:
    return {"detail": {"message": message, "code": code, "details": details or {}}}


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        # Malformed input is a client error, reported as 400 like service-level validation
        return JSONResponse(
            _error_body(
                "Invalid request",
                "VALIDATION_ERROR",
                {"errors": jsonable_encoder(exc.errors())},
            ),
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            _error_body("An error occurred processing your request", "INTERNAL_ERROR"),
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
