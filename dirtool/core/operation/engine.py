"""
Directory operation engine.

Runs one operation (COPY, MOVE or DIFF) across a whole directory tree:
validate the roots, walk the source, process every entry concurrently,
wait for all of them, then run the operation's post-processing step.
"""

from __future__ import annotations

import logging
import threading
import time
from pathlib import Path
from typing import Callable, Optional, TextIO

from dirtool.core.errors import OperationCancelledError
from dirtool.core.models import (
    DEFAULT_TASK_TIMEOUT,
    OperationKind,
    OperationPhase,
    OperationProgress,
    OperationResult,
    TaskResult,
    WorkerPoolConfig,
)
from dirtool.core.operation.handlers import OperationContext, strategy_for
from dirtool.core.operation.pool import WorkerPool
from dirtool.core.operation.validator import validate_paths
from dirtool.core.operation.walker import TreeWalker
from dirtool.services.comparison import FileComparator
from dirtool.services.report import DiffReport


class DirectoryOperation:
    """
    Applies one operation kind to a source tree and a destination tree.

    A fresh worker pool and task set are created for every `process()` call,
    so an instance may be reused for several runs, one at a time.

    Usage:
        operation = DirectoryOperation(OperationKind.COPY)
        result = operation.process(source, destination)
    """

    def __init__(
        self,
        kind: OperationKind | str,
        config: Optional[WorkerPoolConfig] = None,
        report: Optional[DiffReport] = None,
        comparator: Optional[FileComparator] = None
    ):
        if isinstance(kind, str):
            kind = OperationKind.from_string(kind)
        self.kind = kind
        self.config = config or WorkerPoolConfig.create()
        self.report = report or DiffReport()
        self.comparator = comparator or FileComparator()
        self._strategy = strategy_for(kind)
        self._walker = TreeWalker()
        self._cancel_requested = threading.Event()
        self._pool: Optional[WorkerPool] = None
        self._progress_callback: Optional[Callable[[OperationProgress], None]] = None

    def process(
        self,
        source: Path | str,
        destination: Path | str,
        progress_callback: Optional[Callable[[OperationProgress], None]] = None
    ) -> OperationResult:
        """
        Run the operation.

        Args:
            source: Directory to read from; must exist
            destination: Directory to write to or compare against; created
                if absent
            progress_callback: Called on this thread with progress updates

        Returns:
            OperationResult with the entry count, reported differences and
            tolerated cleanup failures

        Raises:
            DirectoryOperationError: The first failure observed. No later
                stage runs after a failure.
        """
        start_time = time.time()

        source = Path(source).resolve()
        destination = Path(destination).resolve()

        self._progress_callback = progress_callback
        self.report.clear()

        logging.info(f"DirectoryOperation - {self.kind.name} {source} -> {destination}")

        try:
            return self._run(source, destination, start_time)
        finally:
            # A cancel request applies to one run only
            self._cancel_requested.clear()

    def _run(self, source: Path, destination: Path, start_time: float) -> OperationResult:
        validate_paths(source, destination)

        pairs = self._walker.collect(source)
        self._check_cancelled("walk")
        total = len(pairs)
        self._report_progress(OperationPhase.WALKING, str(source), 0, total)

        context = OperationContext(
            report=self.report,
            comparator=self.comparator,
            walker=TreeWalker(),
        )

        completed = 0

        def on_complete(task_result: TaskResult) -> None:
            nonlocal completed
            completed += 1
            self._report_progress(
                OperationPhase.PROCESSING,
                task_result.pair.display_path,
                completed,
                total
            )

        with WorkerPool(self.config) as pool:
            self._pool = pool
            try:
                handles = []
                for pair in pairs:
                    if self._cancel_requested.is_set():
                        pool.cancel()
                        break
                    handles.append(pool.submit(pair, destination, self._strategy.handle_entry, context))

                pool.await_all(handles, on_complete)
            finally:
                self._pool = None

        self._check_cancelled("processing")
        logging.info(f"DirectoryOperation - Processed {total} entries")

        self._report_progress(OperationPhase.POST_PROCESSING, str(destination), total, total)
        self._strategy.post_process(context, source, destination)

        result = OperationResult(
            kind=self.kind,
            source=source,
            destination=destination,
            entries_processed=total,
            differences=self.report.lines,
            cleanup_failures=list(context.cleanup_failures),
            duration=time.time() - start_time,
        )

        if result.has_cleanup_failures:
            logging.warning(
                f"DirectoryOperation - {len(result.cleanup_failures)} source paths could not be removed"
            )
        logging.info(f"DirectoryOperation - {self.kind.name} completed in {result.duration:.2f}s")

        return result

    def cancel(self) -> None:
        """
        Request cancellation.

        Tasks that have not started are skipped; running tasks finish. The
        current `process()` call, or the next one if none is running, raises
        OperationCancelledError. The request is cleared when that run ends.
        """
        self._cancel_requested.set()
        self._walker.cancel()
        pool = self._pool
        if pool is not None:
            pool.cancel()

    @property
    def is_cancelled(self) -> bool:
        return self._cancel_requested.is_set()

    def _check_cancelled(self, stage: str) -> None:
        if self._cancel_requested.is_set():
            logging.info(f"DirectoryOperation - Cancelled during {stage}")
            raise OperationCancelledError()

    def _report_progress(
        self,
        phase: OperationPhase,
        current_path: str,
        completed: int,
        total: int
    ) -> None:
        if self._progress_callback:
            self._progress_callback(OperationProgress(
                phase=phase,
                current_path=current_path,
                completed=completed,
                total=total
            ))


def process_directory(
    source: Path | str,
    destination: Path | str,
    kind: OperationKind | str,
    pool_size: Optional[int] = None,
    *,
    task_timeout: float = DEFAULT_TASK_TIMEOUT,
    output: Optional[TextIO] = None
) -> OperationResult:
    """
    Run one operation across a directory tree.

    Args:
        source: Source directory
        destination: Destination directory
        kind: COPY, MOVE or DIFF, as an OperationKind or its name
        pool_size: Number of worker threads; defaults to the processor count
        task_timeout: Seconds to wait for each entry task
        output: Stream for DIFF report lines; defaults to stdout
    """
    config = WorkerPoolConfig.create(pool_size, task_timeout)
    operation = DirectoryOperation(kind, config=config, report=DiffReport(output))
    return operation.process(source, destination)
