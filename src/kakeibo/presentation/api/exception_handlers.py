"""Translate domain errors into HTTP responses.

Every error body has the same shape, ``{"detail": <message>, "code": <code>}``.
The status comes from the error code when it has a dedicated status, and
from the exception family otherwise.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from kakeibo.domain.shared.exceptions import (
    BusinessRuleViolation,
    ConcurrencyError,
    ConflictError,
    DomainException,
    EntityNotFoundError,
    ErrorCode,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Codes whose status differs from the one of their exception family
STATUS_BY_CODE: dict[ErrorCode, int] = {
    ErrorCode.SYNC_LEG_FAILED: status.HTTP_502_BAD_GATEWAY,
    ErrorCode.SYNC_FAILED: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorCode.SYNC_LEG_TIMEOUT: status.HTTP_504_GATEWAY_TIMEOUT,
    ErrorCode.INTERNAL_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

STATUS_BY_FAMILY: tuple[tuple[type[DomainException], int], ...] = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (EntityNotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (ConcurrencyError, status.HTTP_409_CONFLICT),
    (BusinessRuleViolation, status.HTTP_422_UNPROCESSABLE_ENTITY),
)


def status_for(exc: DomainException) -> int:
    for family, status_code in STATUS_BY_FAMILY:
        if isinstance(exc, family):
            return status_code
    return STATUS_BY_CODE.get(exc.code, status.HTTP_500_INTERNAL_SERVER_ERROR)


def _error_response(status_code: int, detail: str, code: ErrorCode) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": detail, "code": code.value},
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register the domain and fallback handlers on ``app``."""

    @app.exception_handler(DomainException)
    async def handle_domain_exception(
        request: Request,
        exc: DomainException,
    ) -> JSONResponse:
        status_code = status_for(exc)
        log = logger.error if status_code >= 500 else logger.warning
        log(
            "%s %s failed with %s: %s %s",
            request.method,
            request.url.path,
            exc.code.value,
            exc.message,
            exc.details,
        )
        return _error_response(status_code, exc.message, exc.code)

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "Unhandled error on %s %s",
            request.method,
            request.url.path,
            exc_info=exc,
        )
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "An internal error occurred",
            ErrorCode.INTERNAL_ERROR,
        )
