"""
Command line entry point for dirtool.

This module handles:
- Command line argument parsing
- Logging configuration
- Settings and environment overrides
- Mapping failures to process exit codes
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path
from typing import List, NoReturn, Optional

from dirtool import __version__
from dirtool.core.errors import DirectoryOperationError
from dirtool.core.models import OperationKind, WorkerPoolConfig
from dirtool.core.operation.engine import DirectoryOperation
from dirtool.services.comparison import FileComparator
from dirtool.services.report import DiffReport
from dirtool.services.settings import SettingsManager


# =============================================================================
# Constants
# =============================================================================

APP_NAME = "dirtool"


class ExitCode(IntEnum):
    """Process exit status."""
    SUCCESS = 0
    ARGUMENT_ERROR = 1
    EXPECTED_ERROR = 2
    UNEXPECTED_ERROR = 3


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class CommandLineArgs:
    """Parsed command line arguments."""
    mode: OperationKind
    source: str
    destination: str
    pool_size: Optional[int] = None
    task_timeout: Optional[float] = None
    config_file: Optional[str] = None
    log_level: Optional[str] = None
    log_file: Optional[str] = None


class ArgumentParsingError(Exception):
    """Raised for malformed command line arguments."""
    pass


# =============================================================================
# Logging Setup
# =============================================================================

class LogFormatter(logging.Formatter):
    """Custom log formatter with colors for console."""

    COLORS = {
        logging.INFO: '\033[32m',      # Green
        logging.WARNING: '\033[33m',   # Yellow
        logging.ERROR: '\033[31m',     # Red
        logging.CRITICAL: '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    def __init__(self, use_colors: bool = True):
        super().__init__(
            fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)

        if self.use_colors:
            color = self.COLORS.get(record.levelno, '')
            return f"{color}{formatted}{self.RESET}"

        return formatted


def setup_logging(level: str = "INFO", log_file: Optional[Path] = None) -> logging.Logger:
    """
    Configure logging for a command line run.

    Console output goes to stderr; stdout carries the DIFF report.

    Args:
        level: Log level string
        log_file: Optional file path for logging

    Returns:
        Root logger instance
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(LogFormatter(use_colors=True))
    root_logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(
            log_file,
            encoding='utf-8'
        )
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(LogFormatter(use_colors=False))
        root_logger.addHandler(file_handler)

    return root_logger


# =============================================================================
# Argument Parsing
# =============================================================================

class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises instead of exiting on bad input."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        raise ArgumentParsingError(message)


def parse_arguments(args: Optional[List[str]] = None) -> CommandLineArgs:
    """
    Parse command line arguments.

    Args:
        args: Arguments to parse (defaults to sys.argv)

    Returns:
        Parsed arguments

    Raises:
        ArgumentParsingError: Missing or malformed arguments, or an
            unknown mode
    """
    parser = _ArgumentParser(
        prog=APP_NAME,
        description="Copy, move or compare directory trees concurrently",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s COPY src dest                   Copy src into dest
  %(prog)s MOVE src dest                   Move src into dest, removing src
  %(prog)s DIFF src dest                   Print differences between src and dest
  %(prog)s --thread-pool-size 4 COPY a b   Use four worker threads
        """
    )

    parser.add_argument(
        'mode',
        help='Operation: COPY, MOVE or DIFF (case-insensitive)'
    )
    parser.add_argument(
        'source',
        help='Source directory'
    )
    parser.add_argument(
        'destination',
        help='Destination directory, created if missing'
    )

    # Concurrency
    parser.add_argument(
        '--thread-pool-size',
        type=int,
        default=None,
        help='Number of worker threads (default: number of processors)'
    )
    parser.add_argument(
        '--timeout',
        type=float,
        default=None,
        help='Seconds to wait for each entry (default: 30)'
    )

    # Configuration
    parser.add_argument(
        '-c', '--config',
        help='Configuration file path'
    )

    # Logging
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose output'
    )
    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        default=None,
        help='Log level'
    )
    parser.add_argument(
        '--log-file',
        help='Also write log output to this file'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'{APP_NAME} {__version__}'
    )

    parsed = parser.parse_args(args)

    try:
        mode = OperationKind.from_string(parsed.mode)
    except ValueError as e:
        parser.print_usage(sys.stderr)
        raise ArgumentParsingError(str(e)) from None

    return CommandLineArgs(
        mode=mode,
        source=parsed.source,
        destination=parsed.destination,
        pool_size=parsed.thread_pool_size,
        task_timeout=parsed.timeout,
        config_file=parsed.config,
        log_level='DEBUG' if parsed.verbose else parsed.log_level,
        log_file=parsed.log_file,
    )


# =============================================================================
# Main
# =============================================================================

def main(argv: Optional[List[str]] = None) -> int:
    """
    Command line main entry point.

    Returns:
        Exit code (see ExitCode)
    """
    try:
        args = parse_arguments(argv)
    except ArgumentParsingError as e:
        sys.stderr.write(f"{APP_NAME}: error: {e}\n")
        return ExitCode.ARGUMENT_ERROR

    settings_manager = SettingsManager(Path(args.config_file) if args.config_file else None)
    settings = settings_manager.load().operation

    logger = setup_logging(
        args.log_level or settings.log_level,
        Path(args.log_file) if args.log_file else None
    )
    logger.debug(f"Starting {APP_NAME} v{__version__}")

    try:
        config = WorkerPoolConfig.create(
            args.pool_size if args.pool_size is not None else settings.pool_size,
            args.task_timeout if args.task_timeout is not None else settings.task_timeout
        )
        comparator = FileComparator(settings.chunk_size)
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return ExitCode.ARGUMENT_ERROR

    operation = DirectoryOperation(
        args.mode,
        config=config,
        report=DiffReport(sys.stdout),
        comparator=comparator
    )

    try:
        result = operation.process(args.source, args.destination)
    except DirectoryOperationError as e:
        logger.error(f"{args.mode.name} failed: {e}")
        return ExitCode.EXPECTED_ERROR
    except Exception as e:
        logger.critical(f"Unexpected error: {e}", exc_info=True)
        return ExitCode.UNEXPECTED_ERROR

    if args.mode is OperationKind.DIFF:
        logger.info(f"{len(result.differences)} differences found")
    logger.info(f"{args.mode.name} finished: {result.entries_processed} entries in {result.duration:.2f}s")
    return ExitCode.SUCCESS


# =============================================================================
# Entry Point
# =============================================================================

if __name__ == '__main__':
    sys.exit(main())
