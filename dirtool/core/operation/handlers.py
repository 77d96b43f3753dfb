"""
Per-operation behaviour: entry handlers and post-processors.

Each operation kind binds one entry handler, applied to every walked entry
concurrently, and one post-processor, run once after all entries are done.
The pair is looked up in STRATEGIES; there is no class hierarchy.
"""

from __future__ import annotations

import errno
import logging
import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from dirtool.core.errors import ComparisonError, WalkError
from dirtool.core.models import OperationKind
from dirtool.core.operation.walker import TreeWalker
from dirtool.services.comparison import FileComparator
from dirtool.services.report import DiffReport, DifferenceType


@dataclass
class OperationContext:
    """Collaborators shared by the handlers of one run."""
    report: DiffReport = field(default_factory=DiffReport)
    comparator: FileComparator = field(default_factory=FileComparator)
    walker: TreeWalker = field(default_factory=TreeWalker)
    cleanup_failures: list[tuple[str, str]] = field(default_factory=list)  # (path, error)


# (context, source_path, target_path, relative_path)
EntryHandler = Callable[[OperationContext, Path, Path, Path], None]
# (context, source_root, destination_root)
PostProcessor = Callable[[OperationContext, Path, Path], None]


@dataclass(frozen=True)
class OperationStrategy:
    """Entry handler and post-processor bound to one operation kind."""
    handle_entry: EntryHandler
    post_process: PostProcessor


# =============================================================================
# Entry Handlers
# =============================================================================

def copy_entry(
    context: OperationContext,
    source_path: Path,
    target_path: Path,
    relative_path: Path
) -> None:
    """Create directories; copy files over any existing target."""
    if source_path.is_dir():
        # Other workers may be creating the same directory
        target_path.mkdir(parents=True, exist_ok=True)
        return

    target_path.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(source_path, target_path)
    logging.debug(f"CopyHandler - Copied {relative_path.as_posix()}")


def move_entry(
    context: OperationContext,
    source_path: Path,
    target_path: Path,
    relative_path: Path
) -> None:
    """Create directories; move files over any existing target."""
    if source_path.is_dir():
        target_path.mkdir(parents=True, exist_ok=True)
        return

    target_path.parent.mkdir(parents=True, exist_ok=True)
    try:
        os.replace(source_path, target_path)
    except OSError as e:
        if e.errno != errno.EXDEV:
            raise
        # Different file system: fall back to copy and delete
        shutil.move(str(source_path), str(target_path))
    logging.debug(f"MoveHandler - Moved {relative_path.as_posix()}")


def diff_entry(
    context: OperationContext,
    source_path: Path,
    target_path: Path,
    relative_path: Path
) -> None:
    """Report how a source entry differs from its destination counterpart."""
    display_path = relative_path.as_posix()
    report = context.report

    if source_path.is_dir():
        if not target_path.exists():
            report.report(DifferenceType.DIRECTORY_ONLY_IN_SOURCE, display_path)
        elif not target_path.is_dir():
            report.report(DifferenceType.DIFFERENT, display_path, "directory vs file")
        return

    if not target_path.exists():
        report.report(DifferenceType.ONLY_IN_SOURCE, display_path)
    elif not target_path.is_file():
        report.report(DifferenceType.DIFFERENT, display_path, "file vs directory")
    else:
        try:
            identical = context.comparator.equal(source_path, target_path)
        except OSError as e:
            raise ComparisonError(relative_path, str(e)) from e
        if not identical:
            report.report(DifferenceType.DIFFERENT, display_path)


# =============================================================================
# Post-Processors
# =============================================================================

def no_post_process(context: OperationContext, source: Path, destination: Path) -> None:
    pass


def remove_moved_source(context: OperationContext, source: Path, destination: Path) -> None:
    """
    Delete what is left of the source tree after a move.

    Deepest paths go first so each directory is empty when its turn comes.
    Failures are logged and recorded but never raised.
    """
    try:
        paths = context.walker.walk_deepest_first(source)
    except WalkError as e:
        logging.warning(f"MoveCleanup - Could not list {source} for cleanup: {e}")
        context.cleanup_failures.append((str(source), str(e)))
        return

    for path in paths:
        try:
            if path.is_dir() and not path.is_symlink():
                path.rmdir()
            else:
                path.unlink()
        except FileNotFoundError:
            continue
        except OSError as e:
            logging.warning(f"MoveCleanup - Failed to delete '{path}': {e}")
            context.cleanup_failures.append((str(path), str(e)))

    logging.debug(f"MoveCleanup - Cleaned up {source}")


def report_destination_only(context: OperationContext, source: Path, destination: Path) -> None:
    """Report entries that exist under the destination but not under the source."""
    if not destination.exists():
        return

    for pair in context.walker.walk(destination):
        if pair.is_root:
            continue

        if (source / pair.relative_path).exists():
            continue

        if pair.absolute_path.is_dir():
            context.report.report(DifferenceType.DIRECTORY_ONLY_IN_DESTINATION, pair.display_path)
        else:
            context.report.report(DifferenceType.ONLY_IN_DESTINATION, pair.display_path)


STRATEGIES: dict[OperationKind, OperationStrategy] = {
    OperationKind.COPY: OperationStrategy(copy_entry, no_post_process),
    OperationKind.MOVE: OperationStrategy(move_entry, remove_moved_source),
    OperationKind.DIFF: OperationStrategy(diff_entry, report_destination_only),
}


def strategy_for(kind: OperationKind) -> OperationStrategy:
    """Look up the handler pair for an operation kind."""
    try:
        return STRATEGIES[kind]
    except KeyError:
        raise ValueError(f"Unsupported operation: {kind}") from None
