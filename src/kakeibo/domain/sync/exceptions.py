"""Sync domain exceptions.

Exceptions raised by the synchronization bounded context: configuration
validation, run state transitions, and failures of individual sync legs.
"""

from typing import Any
from uuid import UUID

from kakeibo.domain.shared.exceptions import (
    BusinessRuleViolation,
    ConcurrencyError,
    ConflictError,
    DomainException,
    EntityNotFoundError,
    ErrorCode,
    ValidationError,
)


class InvalidSyncConfigError(ValidationError):
    """Raised when an interval or sync setting violates its constraints."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            message=message,
            code=ErrorCode.INVALID_SYNC_CONFIG,
            details=details,
        )


class InvalidSyncTransitionError(BusinessRuleViolation):
    """Raised when a sync run is asked to move to a state it cannot reach."""

    def __init__(self, run_id: UUID, current: str, action: str) -> None:
        super().__init__(
            message=f"Cannot {action} sync run in status {current}",
            code=ErrorCode.INVALID_SYNC_TRANSITION,
            details={"run_id": str(run_id), "status": current, "action": action},
        )
        self.current = current


class SyncRunNotFoundError(EntityNotFoundError):
    """Raised when a sync history entry does not exist."""

    def __init__(self, run_id: UUID | str) -> None:
        super().__init__(
            message=f"Sync history not found: {run_id}",
            code=ErrorCode.SYNC_RUN_NOT_FOUND,
            details={"run_id": str(run_id)},
        )


class InstitutionNotFoundError(EntityNotFoundError):
    """Raised when an institution is not known to the directory."""

    def __init__(self, institution_id: str) -> None:
        super().__init__(
            message=f"Institution not found: {institution_id}",
            code=ErrorCode.INSTITUTION_NOT_FOUND,
            details={"institution_id": institution_id},
        )


class ConnectorNotFoundError(EntityNotFoundError):
    """Raised when no connector handles an institution type."""

    def __init__(self, institution_type: str) -> None:
        super().__init__(
            message=f"No transaction connector for institution type: {institution_type}",
            code=ErrorCode.CONNECTOR_NOT_FOUND,
            details={"institution_type": institution_type},
        )


class SyncAlreadyRunningError(ConflictError):
    """Raised when a batch is requested while another one is running."""

    def __init__(self, run_id: UUID) -> None:
        super().__init__(
            message="A sync is already running",
            code=ErrorCode.SYNC_ALREADY_RUNNING,
            details={"run_id": str(run_id)},
        )


class SyncRunAlreadyFinishedError(ConcurrencyError):
    """Raised when a write targets a run that already reached a final state."""

    def __init__(self, run_id: UUID, status: str) -> None:
        super().__init__(
            message=f"Sync run {run_id} already finished with status {status}",
            details={"run_id": str(run_id), "status": status},
        )
        self.status = status


class SyncError(DomainException):
    """Base exception for errors raised while syncing one institution."""


class SyncLegError(SyncError):
    """Raised when fetching or ingesting data for one institution fails."""

    def __init__(self, institution_id: str, reason: str) -> None:
        super().__init__(
            message=reason,
            code=ErrorCode.SYNC_LEG_FAILED,
            details={"institution_id": institution_id},
        )
        self.institution_id = institution_id


class SyncLegTimeoutError(SyncLegError):
    """Raised when a connector does not answer within the leg timeout."""

    def __init__(self, institution_id: str, timeout_seconds: float) -> None:
        super().__init__(
            institution_id,
            f"Fetch timeout after {timeout_seconds:g}s",
        )
        self.code = ErrorCode.SYNC_LEG_TIMEOUT
        self.details["timeout_seconds"] = timeout_seconds
