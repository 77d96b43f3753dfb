"""
Byte-level file comparison service.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path


DEFAULT_CHUNK_SIZE = 65536


class FileComparator:
    """
    Compares two files byte for byte.

    Files of different size are reported unequal without being opened.
    Equal-size files are read in lockstep, one chunk at a time, and the
    scan stops at the first differing chunk.
    """

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE):
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive: {chunk_size}")
        self.chunk_size = chunk_size

    def equal(self, file1: Path | str, file2: Path | str) -> bool:
        """
        Check whether two files have identical content.

        Raises:
            OSError: If either file cannot be read
        """
        if os.path.getsize(file1) != os.path.getsize(file2):
            return False
        return self._scan(file1, file2) == -1

    def mismatch(self, file1: Path | str, file2: Path | str) -> int:
        """
        Find the first differing byte.

        Returns:
            Offset of the first mismatch, or -1 if the files are identical.
            When one file is a prefix of the other the offset is the length
            of the shorter file.
        """
        return self._scan(file1, file2)

    def _scan(self, file1: Path | str, file2: Path | str) -> int:
        offset = 0
        try:
            with open(file1, 'rb') as f1, open(file2, 'rb') as f2:
                while True:
                    chunk1 = f1.read(self.chunk_size)
                    chunk2 = f2.read(self.chunk_size)

                    if chunk1 != chunk2:
                        return offset + _first_difference(chunk1, chunk2)

                    if not chunk1:  # EOF on both
                        return -1

                    offset += len(chunk1)
        except OSError as e:
            logging.error(f"FileComparator - Error comparing {file1} and {file2}: {e}")
            raise


def _first_difference(chunk1: bytes, chunk2: bytes) -> int:
    """Index of the first differing byte of two unequal chunks."""
    for index, (b1, b2) in enumerate(zip(chunk1, chunk2)):
        if b1 != b2:
            return index
    return min(len(chunk1), len(chunk2))
