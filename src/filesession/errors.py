"""Custom exceptions for the record store.

This module defines the exception hierarchy for storage errors, providing
structured error handling with error codes and context. Only configuration
and write failures ever reach callers of the store; every read-side problem
is reported as a missing record.
"""

from pathlib import Path
from typing import Any, Optional, Union


class RecordStoreError(Exception):
    """Base exception for all record store errors.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code
        context: Additional context information about the error
    """

    def __init__(
        self, message: str, error_code: str, context: Optional[dict[str, Any]] = None
    ) -> None:
        """Initialize record store error.

        Args:
            message: Human-readable error description
            error_code: Machine-readable error code
            context: Optional additional context information
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}


class StorageConfigurationError(RecordStoreError, ValueError):
    """Raised when a storage directory cannot be used.

    The directory either is not a directory, could not be created, or is
    not writable by the current process.
    """

    def __init__(self, path: Union[str, Path], reason: str) -> None:
        """Initialize storage configuration error.

        Args:
            path: The rejected storage directory
            reason: Why the directory was rejected
        """
        super().__init__(
            message=f"Path '{path}' is not a directory or can't write: {reason}",
            error_code="storage_configuration_invalid",
            context={"path": str(path), "reason": reason},
        )


class StorageWriteError(RecordStoreError):
    """Raised when a record could not be serialized or persisted.

    A failed write means the record is lost, so this error is never
    swallowed by the store.
    """

    def __init__(self, record_id: str, path: Union[str, Path], reason: str) -> None:
        """Initialize storage write error.

        Args:
            record_id: Identifier of the record that failed to persist
            path: Target file path
            reason: Description of the underlying failure
        """
        super().__init__(
            message=f"Failed to write record '{record_id}' to {path}: {reason}",
            error_code="storage_write_failed",
            context={"record_id": record_id, "path": str(path), "reason": reason},
        )
        self.record_id = record_id


class CorruptRecordError(RecordStoreError):
    """Raised by the codec when file content is not a valid record document."""

    def __init__(self, reason: str) -> None:
        """Initialize corrupt record error.

        Args:
            reason: Description of what made the content unreadable
        """
        super().__init__(
            message=f"Corrupt record document: {reason}",
            error_code="record_corrupt",
            context={"reason": reason},
        )
        self.reason = reason
