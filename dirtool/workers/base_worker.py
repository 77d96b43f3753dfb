"""
Base classes for running directory operations in a Qt thread.

A worker owns one unit of background work. It publishes progress, status and
its final outcome through Qt signals so a UI thread can follow along
without polling.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Optional

from PyQt6.QtCore import QObject, QThread, pyqtSignal, pyqtSlot, QMutex, QMutexLocker


class WorkerState(Enum):
    """Lifecycle of a worker."""
    PENDING = auto()
    RUNNING = auto()
    CANCELLING = auto()
    CANCELLED = auto()
    COMPLETED = auto()
    FAILED = auto()

    @property
    def is_terminal(self) -> bool:
        return self in (WorkerState.CANCELLED, WorkerState.COMPLETED, WorkerState.FAILED)


@dataclass
class ProgressInfo:
    """A progress update as shown to the user."""
    current: int
    total: int
    message: str = ""
    detail: str = ""

    @property
    def percent(self) -> float:
        if self.total == 0:
            return 0.0
        return (self.current / self.total) * 100

    @property
    def is_indeterminate(self) -> bool:
        return self.total == 0


class WorkerSignals(QObject):
    """Signals emitted by a worker, usually received on the UI thread."""
    started = pyqtSignal()
    progress = pyqtSignal(int, int, str)        # (current, total, message)
    progress_detail = pyqtSignal(object)        # ProgressInfo
    status = pyqtSignal(str)
    finished = pyqtSignal(object)               # result of do_work
    error = pyqtSignal(str, str)                # (error_type, message)
    cancelled = pyqtSignal()
    state_changed = pyqtSignal(object)          # WorkerState


class CancelledException(Exception):
    """Raised from do_work to stop after a cancel request."""
    pass


class WorkerMeta(type(QObject), type(ABC)):
    pass


class BaseWorker(QObject, ABC, metaclass=WorkerMeta):
    """
    Runs `do_work` and reports its outcome.

    `run` emits `started`, then exactly one of `finished`, `cancelled` or
    `error`. It may be called directly for synchronous use, or connected to
    a thread's `started` signal (see WorkerThread).
    """

    def __init__(self, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.signals = WorkerSignals()
        self._mutex = QMutex()
        self._state = WorkerState.PENDING
        self._cancel_requested = False
        self._result: Any = None
        self._error: Optional[tuple[str, str]] = None

    @property
    def state(self) -> WorkerState:
        with QMutexLocker(self._mutex):
            return self._state

    @property
    def is_cancelled(self) -> bool:
        with QMutexLocker(self._mutex):
            return self._cancel_requested

    @property
    def result(self) -> Any:
        """Return value of do_work, once COMPLETED."""
        return self._result

    @property
    def error(self) -> Optional[tuple[str, str]]:
        """(error_type, message), once FAILED."""
        return self._error

    def cancel(self) -> None:
        """Ask the worker to stop. Takes effect when do_work checks for it."""
        with QMutexLocker(self._mutex):
            self._cancel_requested = True
            if self._state.is_terminal:
                return
            running = self._state == WorkerState.RUNNING
        if running:
            self._transition(WorkerState.CANCELLING)

    @pyqtSlot()
    def run(self) -> None:
        self._transition(WorkerState.RUNNING)
        self.signals.started.emit()

        try:
            result = self.do_work()
        except CancelledException:
            self._finish_cancelled()
            return
        except Exception as e:
            self._error = (type(e).__name__, str(e))
            self._transition(WorkerState.FAILED)
            self.signals.error.emit(*self._error)
            return

        if self.is_cancelled:
            self._finish_cancelled()
            return

        self._result = result
        self._transition(WorkerState.COMPLETED)
        self.signals.finished.emit(result)

    @abstractmethod
    def do_work(self) -> Any:
        """Do the work on the current thread and return its result."""

    def report_progress(self, info: ProgressInfo) -> None:
        """Publish progress as both the summary and the detailed signal."""
        self.signals.progress.emit(info.current, info.total, info.message)
        self.signals.progress_detail.emit(info)

    def report_status(self, message: str) -> None:
        self.signals.status.emit(message)

    def check_cancelled(self) -> None:
        if self.is_cancelled:
            raise CancelledException("Operation cancelled")

    def _transition(self, state: WorkerState) -> None:
        with QMutexLocker(self._mutex):
            self._state = state
        self.signals.state_changed.emit(state)

    def _finish_cancelled(self) -> None:
        self._transition(WorkerState.CANCELLED)
        self.signals.cancelled.emit()


class WorkerThread(QThread):
    """
    QThread that hosts a single worker and quits when it is done.

    Usage:
        thread = WorkerThread(worker)
        thread.start()
    """

    def __init__(self, worker: BaseWorker, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.worker = worker
        self.worker.moveToThread(self)

        self.started.connect(self.worker.run)
        for done in (worker.signals.finished, worker.signals.error, worker.signals.cancelled):
            done.connect(self.quit)

    def cancel(self) -> None:
        self.worker.cancel()
