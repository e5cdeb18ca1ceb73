"""
idmsync: bulk export, import and delete of IDM config entities.
"""

__version__ = "1.0.0"

from .config import SyncContext, SyncSettings
from .core import (
    AggregateError,
    Coordinator,
    ExportBundle,
    ImportOptions,
    StoreOperationError,
    SyncError,
    TransportError,
    ValidationError,
)

__all__ = [
    "__version__",
    "Coordinator",
    "SyncContext",
    "SyncSettings",
    "ExportBundle",
    "ImportOptions",
    "AggregateError",
    "StoreOperationError",
    "SyncError",
    "TransportError",
    "ValidationError",
]
