"""
Core data models for the directory tool.

This module defines the data structures shared by the operation engine,
the worker layer and the command line:
- Operation kinds
- Walk entries (path pairs)
- Per-task results
- Worker pool configuration
- Progress and run results

All models are designed to be:
- UI-agnostic (can be used with any frontend)
- Type-hinted for IDE support
- Immutable where practical
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import Optional


# =============================================================================
# Enumerations
# =============================================================================

class OperationKind(Enum):
    """Operation applied across a directory tree."""
    COPY = auto()   # Mirror source into destination, source untouched
    MOVE = auto()   # Mirror source into destination, then remove source
    DIFF = auto()   # Report structural and content differences only

    @classmethod
    def from_string(cls, value: str) -> 'OperationKind':
        """
        Parse an operation name, ignoring case.

        Raises:
            ValueError: If the name is not a known operation
        """
        try:
            return cls[value.strip().upper()]
        except (KeyError, AttributeError):
            valid = ", ".join(kind.name for kind in cls)
            raise ValueError(f"Unknown operation: {value!r} (expected one of {valid})") from None


class OperationPhase(Enum):
    """Phase of a running operation, used for progress reporting."""
    WALKING = "walking"
    PROCESSING = "processing"
    POST_PROCESSING = "post_processing"


# =============================================================================
# Walk and Task Models
# =============================================================================

@dataclass(frozen=True)
class PathPair:
    """
    A single entry discovered by the tree walk.

    `relative_path` is the join key between the source and destination
    trees; the walk root has the relative path ".".
    """
    absolute_path: Path
    relative_path: Path

    @property
    def is_root(self) -> bool:
        return self.relative_path == Path('.')

    @property
    def display_path(self) -> str:
        """Relative path with forward slashes, as written in reports."""
        return self.relative_path.as_posix()


@dataclass
class TaskResult:
    """Outcome of processing one entry: success, or the captured failure."""
    pair: PathPair
    error: Optional[BaseException] = None
    cancelled: bool = False

    @property
    def succeeded(self) -> bool:
        return self.error is None and not self.cancelled


# =============================================================================
# Configuration Models
# =============================================================================

DEFAULT_TASK_TIMEOUT = 30.0  # seconds, per-task wait in the barrier


def available_processors() -> int:
    """Number of logical processing units, at least 1."""
    return os.cpu_count() or 1


@dataclass(frozen=True)
class WorkerPoolConfig:
    """
    Worker pool sizing and barrier timeout.

    Built once before a run via `create()`; never mutated mid-run.
    """
    size: int
    task_timeout: float = DEFAULT_TASK_TIMEOUT

    @classmethod
    def create(
        cls,
        size: Optional[int] = None,
        task_timeout: float = DEFAULT_TASK_TIMEOUT
    ) -> 'WorkerPoolConfig':
        """
        Create a normalized configuration.

        A missing or non-positive size falls back to the number of
        available processors.

        Raises:
            ValueError: If task_timeout is not positive
        """
        if task_timeout is None or task_timeout <= 0:
            raise ValueError(f"task_timeout must be positive: {task_timeout}")
        if size is None or size <= 0:
            size = available_processors()
        return cls(size=size, task_timeout=float(task_timeout))


# =============================================================================
# Progress and Result Models
# =============================================================================

@dataclass
class OperationProgress:
    """Progress information for a running operation."""
    phase: OperationPhase
    current_path: str
    completed: int
    total: int

    @property
    def percent(self) -> float:
        if self.total == 0:
            return 0.0
        return (self.completed / self.total) * 100


@dataclass
class OperationResult:
    """Result of a successful directory operation."""
    kind: OperationKind
    source: Path
    destination: Path
    entries_processed: int = 0
    differences: list[str] = field(default_factory=list)
    cleanup_failures: list[tuple[str, str]] = field(default_factory=list)  # (path, error)
    duration: float = 0.0

    @property
    def has_differences(self) -> bool:
        return len(self.differences) > 0

    @property
    def has_cleanup_failures(self) -> bool:
        return len(self.cleanup_failures) > 0
