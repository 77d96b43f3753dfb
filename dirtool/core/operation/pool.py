"""
Bounded worker pool and completion barrier.

Entries are handed to a thread pool as independent tasks. Each task
captures its own outcome in a TaskResult; the barrier then waits for every
task in submission order and raises on the first failure it sees.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import CancelledError, Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from dirtool.core.errors import (
    EntryProcessingError,
    OperationCancelledError,
    TaskTimeoutError,
)
from dirtool.core.models import PathPair, TaskResult, WorkerPoolConfig
from dirtool.core.operation.handlers import EntryHandler, OperationContext


@dataclass
class TaskHandle:
    """A submitted task: the entry it processes and its pending result."""
    pair: PathPair
    future: Future


class WorkerPool:
    """
    Thread pool scoped to a single operation run.

    Usage:
        with WorkerPool(config) as pool:
            handles = [pool.submit(pair, destination, handler, context) for pair in pairs]
            pool.await_all(handles)

    When the barrier fails, tasks that have not started yet are cancelled.
    Tasks that are already running are left to finish; their results are
    ignored.
    """

    def __init__(self, config: WorkerPoolConfig):
        self.config = config
        self._executor: Optional[ThreadPoolExecutor] = None
        self._handles: list[TaskHandle] = []
        self._cancelled = threading.Event()

    def __enter__(self) -> 'WorkerPool':
        self._executor = ThreadPoolExecutor(
            max_workers=self.config.size,
            thread_name_prefix="dirtool-worker"
        )
        logging.debug(f"WorkerPool - Started with {self.config.size} workers")
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> bool:
        if exc_type is None:
            self._executor.shutdown(wait=True)
        else:
            # Do not block the failure on tasks that are still running
            self._cancelled.set()
            self._executor.shutdown(wait=False, cancel_futures=True)
        self._executor = None
        return False

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled.is_set()

    def submit(
        self,
        pair: PathPair,
        destination: Path,
        handler: EntryHandler,
        context: OperationContext
    ) -> TaskHandle:
        """
        Submit one entry for processing.

        The task resolves the entry's target under `destination` and applies
        `handler` to (source path, target path, relative path).
        """
        if self._executor is None:
            raise RuntimeError("WorkerPool must be used as a context manager")

        future = self._executor.submit(self._run_task, pair, destination, handler, context)
        handle = TaskHandle(pair=pair, future=future)
        self._handles.append(handle)
        return handle

    def await_all(
        self,
        handles: list[TaskHandle],
        on_complete: Optional[Callable[[TaskResult], None]] = None
    ) -> None:
        """
        Wait for every task, failing fast.

        Each wait is bounded by the configured task timeout. `on_complete`
        is called on the waiting thread for each successful task.

        Raises:
            EntryProcessingError: A handler raised; chained to its exception
            TaskTimeoutError: A task did not finish in time
            OperationCancelledError: The pool was cancelled
        """
        timeout = self.config.task_timeout

        for handle in handles:
            try:
                result = handle.future.result(timeout=timeout)
            except FutureTimeoutError:
                self.cancel()
                logging.error(f"WorkerPool - Timed out after {timeout:g}s on {handle.pair.absolute_path}")
                raise TaskTimeoutError(handle.pair.absolute_path, timeout) from None
            except CancelledError:
                raise OperationCancelledError() from None
            except KeyboardInterrupt:
                self.cancel()
                raise

            if result.cancelled:
                raise OperationCancelledError()

            if result.error is not None:
                self.cancel()
                logging.error(
                    f"WorkerPool - Failed to process {handle.pair.absolute_path}: "
                    f"{type(result.error).__name__}: {result.error}"
                )
                raise EntryProcessingError(handle.pair.absolute_path, result.error) from result.error

            if on_complete:
                on_complete(result)

    def cancel(self) -> None:
        """Cancel every task that has not started. Running tasks finish."""
        self._cancelled.set()
        for handle in self._handles:
            handle.future.cancel()

    def _run_task(
        self,
        pair: PathPair,
        destination: Path,
        handler: EntryHandler,
        context: OperationContext
    ) -> TaskResult:
        """Task body: never raises, the outcome goes into the TaskResult."""
        if self._cancelled.is_set():
            return TaskResult(pair=pair, cancelled=True)

        target_path = destination / pair.relative_path
        try:
            handler(context, pair.absolute_path, target_path, pair.relative_path)
        except Exception as e:
            return TaskResult(pair=pair, error=e)

        return TaskResult(pair=pair)
