"""
Directory tree walker.

Provides lazy, deterministic traversal of a directory tree with:
- The root itself as the first entry
- Sorted entries per directory
- Relative paths computed once per entry
- Fail-fast error handling
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterator

from dirtool.core.errors import WalkError
from dirtool.core.models import PathPair


class TreeWalker:
    """
    Enumerates every entry under a root directory.

    Entries are produced depth-first: the root, then the subdirectories and
    files of each directory as it is visited. Subdirectories that are not
    descended into (symbolic links when links are not followed) are still
    produced as entries, so every entry is visited exactly once.
    """

    def __init__(self, follow_symlinks: bool = False):
        self.follow_symlinks = follow_symlinks
        self._cancelled = False

    def walk(self, root: Path | str) -> Iterator[PathPair]:
        """
        Lazily walk a directory tree.

        Args:
            root: Directory to walk

        Yields:
            A PathPair for the root and for every entry beneath it

        Raises:
            WalkError: If any part of the tree cannot be read
        """
        root = Path(root)
        self._cancelled = False

        def on_walk_error(error: OSError) -> None:
            failed = Path(error.filename) if error.filename else root
            logging.error(f"TreeWalker - Walk error at {failed}: {error}")
            raise WalkError(failed, error.strerror or str(error)) from error

        yield PathPair(absolute_path=root, relative_path=Path('.'))

        for dirpath, dirnames, filenames in os.walk(
            root,
            topdown=True,
            followlinks=self.follow_symlinks,
            onerror=on_walk_error
        ):
            if self._cancelled:
                logging.info("TreeWalker - Walk cancelled")
                return

            current_path = Path(dirpath)

            # Sort for consistent ordering; os.walk recurses in this order
            dirnames.sort()
            filenames.sort()

            for name in dirnames:
                entry = current_path / name
                yield PathPair(absolute_path=entry, relative_path=entry.relative_to(root))

            for name in filenames:
                entry = current_path / name
                yield PathPair(absolute_path=entry, relative_path=entry.relative_to(root))

    def collect(self, root: Path | str) -> list[PathPair]:
        """Walk the whole tree before returning, so a failed walk yields nothing."""
        pairs = list(self.walk(root))
        logging.debug(f"TreeWalker - Found {len(pairs)} entries under {root}")
        return pairs

    def walk_deepest_first(self, root: Path | str) -> list[Path]:
        """
        List every path under root, root included, deepest first.

        Paths are ordered by descending length, so any directory comes after
        everything it contains.
        """
        paths = [pair.absolute_path for pair in self.walk(root)]
        paths.sort(key=lambda path: len(str(path)), reverse=True)
        return paths

    def cancel(self) -> None:
        """Stop an ongoing walk at the next directory."""
        self._cancelled = True
