"""
Exception hierarchy for directory operations.

Every failure surfaced by the engine derives from DirectoryOperationError.
Validation errors additionally derive from the matching builtin OSError
subclass so callers may catch either.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class DirectoryOperationError(Exception):
    """
    Base exception for all directory operation errors.

    Attributes:
        message: Human-readable error description
        path: Offending path, when one is known
    """

    def __init__(self, message: str, path: Optional[Path] = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path

    def __str__(self) -> str:
        return self.message


# =============================================================================
# Validation
# =============================================================================

class SourceNotFoundError(DirectoryOperationError, FileNotFoundError):
    """Raised when the source directory does not exist."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"Source directory does not exist: {path}", path)


class SourceNotADirectoryError(DirectoryOperationError, NotADirectoryError):
    """Raised when the source path exists but is not a directory."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"Source path is not a directory: {path}", path)


class DestinationNotADirectoryError(DirectoryOperationError, NotADirectoryError):
    """Raised when the destination path exists but is not a directory."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"Destination path is not a directory: {path}", path)


class DestinationCreationError(DirectoryOperationError):
    """Raised when a missing destination directory cannot be created."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Could not create destination directory {path}: {reason}", path)


class OverlappingPathsError(DirectoryOperationError):
    """Raised when source and destination are the same tree or one contains the other."""

    def __init__(self, source: Path, destination: Path) -> None:
        super().__init__(
            f"Source and destination overlap: source={source}, destination={destination}",
            destination
        )
        self.source = source
        self.destination = destination


# =============================================================================
# Walk and Tasks
# =============================================================================

class WalkError(DirectoryOperationError):
    """Raised when the tree walk cannot read part of the tree."""

    def __init__(self, path: Optional[Path], reason: str) -> None:
        super().__init__(f"Failed to walk directory tree at {path}: {reason}", path)


class EntryProcessingError(DirectoryOperationError):
    """
    Raised by the barrier when an entry handler failed.

    The handler's exception is chained as __cause__ and kept in `cause`.
    """

    def __init__(self, path: Path, cause: BaseException) -> None:
        super().__init__(
            f"Failed to process entry: path=[{path}], error=[{type(cause).__name__}: {cause}]",
            path
        )
        self.cause = cause


class TaskTimeoutError(DirectoryOperationError, TimeoutError):
    """Raised by the barrier when a task does not finish within the timeout."""

    def __init__(self, path: Path, timeout: float) -> None:
        super().__init__(f"Timed out after {timeout:g}s waiting for entry: {path}", path)
        self.timeout = timeout


class ComparisonError(DirectoryOperationError):
    """Raised when two files cannot be read for comparison."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Failed to compare {path}: {reason}", path)


class OperationCancelledError(DirectoryOperationError):
    """Raised when an operation was cancelled before it completed."""

    def __init__(self, message: str = "Operation cancelled") -> None:
        super().__init__(message)
