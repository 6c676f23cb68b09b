"""Shared domain exceptions and error codes.

Every domain error carries a stable ``ErrorCode`` next to its message. The
families below fix the default code of an error; concrete sync errors narrow
it (see ``kakeibo.domain.sync.exceptions``). The HTTP layer maps codes to
status codes in one place.
"""

from enum import Enum
from typing import Any, ClassVar, Optional


class ErrorCode(str, Enum):
    """Stable error codes returned to API clients; values must not change."""

    # 400
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_SYNC_CONFIG = "INVALID_SYNC_CONFIG"

    # 404
    ENTITY_NOT_FOUND = "ENTITY_NOT_FOUND"
    SYNC_RUN_NOT_FOUND = "SYNC_RUN_NOT_FOUND"
    INSTITUTION_NOT_FOUND = "INSTITUTION_NOT_FOUND"
    CONNECTOR_NOT_FOUND = "CONNECTOR_NOT_FOUND"

    # 409
    CONFLICT = "CONFLICT"
    SYNC_ALREADY_RUNNING = "SYNC_ALREADY_RUNNING"
    CONCURRENCY_CONFLICT = "CONCURRENCY_CONFLICT"

    # 422
    BUSINESS_RULE_VIOLATION = "BUSINESS_RULE_VIOLATION"
    INVALID_SYNC_TRANSITION = "INVALID_SYNC_TRANSITION"

    # 502-504
    SYNC_FAILED = "SYNC_FAILED"
    SYNC_LEG_FAILED = "SYNC_LEG_FAILED"
    SYNC_LEG_TIMEOUT = "SYNC_LEG_TIMEOUT"

    INTERNAL_ERROR = "INTERNAL_ERROR"


class DomainException(Exception):  # NOQA: N818
    """Base class of all domain errors.

    Attributes
    ----------
    message
        Text that is safe to show to end users
    code
        Stable code for programmatic handling; defaults to the class's
        ``default_code``
    details
        Extra context for logs, never sent to clients
    """

    default_code: ClassVar[ErrorCode] = ErrorCode.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[ErrorCode] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, code={self.code.value})"


class ValidationError(DomainException):
    """Input or configuration is malformed."""

    default_code = ErrorCode.VALIDATION_ERROR


class BusinessRuleViolation(DomainException):
    """A domain invariant forbids the requested change."""

    default_code = ErrorCode.BUSINESS_RULE_VIOLATION


class EntityNotFoundError(DomainException):
    default_code = ErrorCode.ENTITY_NOT_FOUND


class ConflictError(DomainException):
    """The request clashes with state that already exists."""

    default_code = ErrorCode.CONFLICT


class ConcurrencyError(DomainException):
    """Another writer changed the resource first."""

    default_code = ErrorCode.CONCURRENCY_CONFLICT

    def __init__(
        self,
        message: str = "The resource was modified by another request",
        code: Optional[ErrorCode] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code, details)
