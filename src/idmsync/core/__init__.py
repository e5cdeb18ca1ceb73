"""
Core package: bulk synchronization of IDM config entities.
Exposes the Coordinator, which ties the catalog and the export, import and
delete orchestrators to one config store.
"""

from .catalog import Catalog
from .coordinator import Coordinator
from .deleter import DeleteOrchestrator
from .errors import AggregateError, StoreOperationError, SyncError, TransportError, ValidationError
from .exporter import ExportOrchestrator
from .importer import ImportOrchestrator
from .models import ConfigStore, Entity, EntityStub, ExportBundle, ExportMetadata, ImportOptions
from .policy import SuppressionPolicy, SuppressionRule, load_policy

__all__ = [
    "Catalog",
    "Coordinator",
    "DeleteOrchestrator",
    "ExportOrchestrator",
    "ImportOrchestrator",
    "AggregateError",
    "StoreOperationError",
    "SyncError",
    "TransportError",
    "ValidationError",
    "ConfigStore",
    "Entity",
    "EntityStub",
    "ExportBundle",
    "ExportMetadata",
    "ImportOptions",
    "SuppressionPolicy",
    "SuppressionRule",
    "load_policy",
]
