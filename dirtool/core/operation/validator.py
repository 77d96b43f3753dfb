"""
Source and destination validation.
"""

from __future__ import annotations

import logging
from pathlib import Path

from dirtool.core.errors import (
    DestinationCreationError,
    DestinationNotADirectoryError,
    OverlappingPathsError,
    SourceNotADirectoryError,
    SourceNotFoundError,
)


def validate_paths(source: Path, destination: Path) -> None:
    """
    Validate the roots of an operation before any work is dispatched.

    The source must be an existing directory. The destination must be a
    directory or absent; an absent destination is created together with
    its missing ancestors. Neither may lie inside the other.

    Raises:
        SourceNotFoundError: Source does not exist
        SourceNotADirectoryError: Source exists but is not a directory
        OverlappingPathsError: Source and destination are the same, or nested
        DestinationNotADirectoryError: Destination exists but is not a directory
        DestinationCreationError: Destination could not be created
    """
    if not source.exists():
        logging.error(f"PathValidator - Source not found: {source}")
        raise SourceNotFoundError(source)

    if not source.is_dir():
        logging.error(f"PathValidator - Source is not a directory: {source}")
        raise SourceNotADirectoryError(source)

    resolved_source = source.resolve()
    resolved_destination = destination.resolve()
    if (resolved_destination.is_relative_to(resolved_source)
            or resolved_source.is_relative_to(resolved_destination)):
        logging.error(f"PathValidator - Source {source} and destination {destination} overlap")
        raise OverlappingPathsError(source, destination)

    if destination.exists():
        if not destination.is_dir():
            logging.error(f"PathValidator - Destination is not a directory: {destination}")
            raise DestinationNotADirectoryError(destination)
        return

    try:
        destination.mkdir(parents=True, exist_ok=True)
    except FileExistsError:
        # Lost a race with something that created a non-directory there
        logging.error(f"PathValidator - Destination is not a directory: {destination}")
        raise DestinationNotADirectoryError(destination)
    except OSError as e:
        logging.error(f"PathValidator - Could not create destination {destination}: {e}")
        raise DestinationCreationError(destination, str(e)) from e

    logging.info(f"PathValidator - Created destination directory: {destination}")
