"""Centralized error handling for the prediction service.

Provides a custom exception hierarchy with error codes and structured
logging integration. Only conditions the caller must act on are raised;
recoverable degradations (missing signals, synthesized locks) are reported
on the Prediction itself.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from src.shared.config.logging import get_logger

logger = get_logger(__name__)


class ErrorCode(Enum):
    """Error codes for service exceptions."""

    # Configuration errors (1xxx)
    INVALID_FACTOR_WEIGHTS = 1001
    DUPLICATE_FACTOR = 1002
    EMPTY_REGISTRY = 1003

    # Input errors (2xxx)
    SIGNAL_UNAVAILABLE = 2001

    # Lifecycle errors (3xxx)
    STALE_WRITE = 3001
    LOCK_CONFLICT = 3002

    # Verification errors (4xxx)
    VERIFICATION_NOT_READY = 4001

    # Unknown/Other
    UNKNOWN_ERROR = 9999


class KatabaticError(Exception):
    """Base exception for all service errors.

    Provides structured error information including error code and
    context for logging.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize service error.

        Args:
            message: Human-readable error message
            error_code: Structured error code
            details: Additional error context
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc)

        logger.warning(
            "katabatic_error",
            error_code=error_code.name,
            message=message,
            details=self.details,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for serialization.

        Returns:
            Dictionary representation of error
        """
        return {
            "error_code": self.error_code.name,
            "error_value": self.error_code.value,
            "message": self.message,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
        }


class FactorConfigurationError(KatabaticError):
    """Factor registry is invalid (weights, duplicates, empty)."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INVALID_FACTOR_WEIGHTS,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, error_code=error_code, details=details)


class SignalUnavailableError(KatabaticError):
    """Weather collaborator could not produce a signal (timeout, outage)."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, error_code=ErrorCode.SIGNAL_UNAVAILABLE, details=details)


class StaleWriteError(KatabaticError):
    """Optimistic version check failed when persisting a record."""

    def __init__(
        self,
        record_key: str,
        expected_version: int,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize stale write error.

        Args:
            record_key: Persistence key of the record
            expected_version: Version the writer read before modifying
            details: Additional error context
        """
        self.record_key = record_key
        self.expected_version = expected_version
        super().__init__(
            f"Stale write to {record_key} (expected version {expected_version})",
            error_code=ErrorCode.STALE_WRITE,
            details={"record_key": record_key, "expected_version": expected_version, **(details or {})},
        )


class LockConflictError(KatabaticError):
    """Lock requested outside the window that permits it."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, error_code=ErrorCode.LOCK_CONFLICT, details=details)


class VerificationWindowError(KatabaticError):
    """Verification requested before the dawn patrol window closed."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, error_code=ErrorCode.VERIFICATION_NOT_READY, details=details)
