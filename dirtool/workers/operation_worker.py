"""
Worker running a directory operation off the UI thread.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from PyQt6.QtCore import QObject

from dirtool.core.errors import OperationCancelledError
from dirtool.core.models import OperationKind, OperationProgress, OperationResult, WorkerPoolConfig
from dirtool.core.operation.engine import DirectoryOperation
from dirtool.services.report import DiffReport
from dirtool.workers.base_worker import BaseWorker, CancelledException, ProgressInfo


class DirectoryOperationWorker(BaseWorker):
    """
    Worker for COPY, MOVE and DIFF runs.

    Progress from the engine is re-emitted as ProgressInfo. DIFF lines are
    collected rather than printed unless a report is supplied.
    """

    def __init__(
        self,
        kind: OperationKind | str,
        source: str | Path,
        destination: str | Path,
        config: Optional[WorkerPoolConfig] = None,
        report: Optional[DiffReport] = None,
        parent: Optional[QObject] = None
    ):
        super().__init__(parent)
        self.source = Path(source)
        self.destination = Path(destination)
        self.operation = DirectoryOperation(
            kind,
            config=config,
            report=report or DiffReport(echo=False)
        )

    def do_work(self) -> OperationResult:
        self.report_status(f"{self.operation.kind.name}: {self.source} -> {self.destination}")

        try:
            result = self.operation.process(self.source, self.destination, self._on_progress)
        except OperationCancelledError as e:
            raise CancelledException(str(e)) from e

        if result.has_cleanup_failures:
            self.report_status(f"Could not remove {len(result.cleanup_failures)} source paths")

        return result

    def cancel(self) -> None:
        super().cancel()
        self.operation.cancel()

    def _on_progress(self, progress: OperationProgress) -> None:
        self.report_progress(ProgressInfo(
            current=progress.completed,
            total=progress.total,
            message=progress.phase.value,
            detail=progress.current_path
        ))
