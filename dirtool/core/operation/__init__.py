"""
Directory operation engine.

Provides:
- Source and destination validation
- Deterministic tree walking
- Per-kind entry handlers and post-processors
- A bounded worker pool with a fail-fast completion barrier
"""

from dirtool.core.operation.validator import validate_paths
from dirtool.core.operation.walker import TreeWalker
from dirtool.core.operation.handlers import (
    OperationContext,
    OperationStrategy,
    STRATEGIES,
    strategy_for,
)
from dirtool.core.operation.pool import (
    TaskHandle,
    WorkerPool,
)
from dirtool.core.operation.engine import (
    DirectoryOperation,
    process_directory,
)

__all__ = [
    # Validation
    'validate_paths',
    # Walk
    'TreeWalker',
    # Handlers
    'OperationContext',
    'OperationStrategy',
    'STRATEGIES',
    'strategy_for',
    # Pool
    'TaskHandle',
    'WorkerPool',
    # Engine
    'DirectoryOperation',
    'process_directory',
]
