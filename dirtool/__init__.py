"""
dirtool: concurrent COPY, MOVE and DIFF across directory trees.
"""

__version__ = "1.0.0"

from dirtool.core.models import OperationKind, OperationResult, WorkerPoolConfig
from dirtool.core.operation.engine import DirectoryOperation, process_directory

__all__ = [
    '__version__',
    'OperationKind',
    'OperationResult',
    'WorkerPoolConfig',
    'DirectoryOperation',
    'process_directory',
]
