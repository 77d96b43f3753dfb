"""
Difference report sink.

Collects the human-readable lines emitted by a DIFF run and writes each
one to an output stream as soon as it is reported. Lines are reported
from worker threads, so emission is serialized.
"""

from __future__ import annotations

import sys
import threading
from enum import Enum
from typing import Optional, TextIO


class DifferenceType(Enum):
    """Kinds of difference reported by a DIFF run, with their line prefix."""
    ONLY_IN_SOURCE = "Only in source"
    ONLY_IN_DESTINATION = "Only in destination"
    DIFFERENT = "Different"
    DIRECTORY_ONLY_IN_SOURCE = "Directory only in source"
    DIRECTORY_ONLY_IN_DESTINATION = "Directory only in destination"

    def format(self, relative_path: str, detail: str = "") -> str:
        line = f"{self.value}: {relative_path}"
        if detail:
            line = f"{line} ({detail})"
        return line


class DiffReport:
    """
    Thread-safe sink for difference lines.

    Args:
        output: Stream to write lines to. Defaults to sys.stdout, looked up
            at write time. Pass `echo=False` to only collect lines.
    """

    def __init__(self, output: Optional[TextIO] = None, echo: bool = True):
        self._output = output
        self._echo = echo
        self._lines: list[str] = []
        self._lock = threading.Lock()

    @property
    def lines(self) -> list[str]:
        """Snapshot of the lines reported so far."""
        with self._lock:
            return list(self._lines)

    def __len__(self) -> int:
        with self._lock:
            return len(self._lines)

    def report(
        self,
        difference: DifferenceType,
        relative_path: str,
        detail: str = ""
    ) -> str:
        """Record a difference and write it to the output stream."""
        line = difference.format(relative_path, detail)

        with self._lock:
            self._lines.append(line)
            if self._echo:
                stream = self._output if self._output is not None else sys.stdout
                stream.write(line + "\n")
                stream.flush()

        return line

    def clear(self) -> None:
        with self._lock:
            self._lines.clear()
