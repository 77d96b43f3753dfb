"""
Background workers for non-blocking operations.

QThread-based workers that run directory operations and report through
Qt signals.
"""

from dirtool.workers.base_worker import (
    BaseWorker,
    CancelledException,
    ProgressInfo,
    WorkerSignals,
    WorkerState,
    WorkerThread,
)
from dirtool.workers.operation_worker import (
    DirectoryOperationWorker,
)

__all__ = [
    # Base
    'BaseWorker',
    'CancelledException',
    'ProgressInfo',
    'WorkerSignals',
    'WorkerState',
    'WorkerThread',
    # Operations
    'DirectoryOperationWorker',
]
