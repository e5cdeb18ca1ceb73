import logging
from typing import List, Optional

from ..config import SyncContext, SyncSettings
from ..utils.script_hooks import are_script_hooks_valid
from .catalog import Catalog
from .deleter import DeleteOrchestrator
from .exporter import ExportOrchestrator
from .importer import ImportOrchestrator, ScriptValidator
from .models import ConfigStore, Entity, EntityStub, ExportBundle, ImportOptions
from .policy import SuppressionPolicy, load_policy

logger = logging.getLogger(__name__)


class Coordinator:
    """
    Single entry point for bulk config operations against one store.

    Ties the catalog and the three orchestrators to the same store, context
    and suppression policy.
    """

    def __init__(
        self,
        store: ConfigStore,
        context: Optional[SyncContext] = None,
        policy: Optional[SuppressionPolicy] = None,
        export_workers: Optional[int] = None,
        validator: ScriptValidator = are_script_hooks_valid,
    ) -> None:
        self.store = store
        self.context = context or SyncContext()
        self.policy = policy or SuppressionPolicy()
        self.catalog = Catalog(store)
        self._exporter = ExportOrchestrator(self.catalog, store, self.context, self.policy, export_workers)
        self._importer = ImportOrchestrator(store, self.context, self.policy, validator)
        self._deleter = DeleteOrchestrator(self.catalog, store)

    @classmethod
    def from_settings(cls, settings: SyncSettings) -> "Coordinator":
        from ..idm.client import IdmConfigClient

        client = IdmConfigClient(
            settings.base_url,
            token=settings.token,
            timeout=settings.timeout,
            verify=settings.verify_tls,
        )
        policy = load_policy(settings.policy_file, case_sensitive=settings.case_sensitive)
        logger.debug(
            "Coordinator for %s (deployment=%s, export workers=%s)",
            settings.base_url, settings.deployment_type, settings.export_workers or "unbounded",
        )
        return cls(client, settings.context(), policy, export_workers=settings.export_workers)

    # ---------- catalog ----------
    def list_stubs(self) -> List[EntityStub]:
        return self.catalog.list_stubs()

    def list_types(self) -> List[str]:
        return self.catalog.list_types()

    def read_entity(self, entity_id: str) -> Entity:
        return self.catalog.read_entity(entity_id)

    # ---------- export / import ----------
    def export_all(self) -> ExportBundle:
        return self._exporter.export_all()

    def import_all(self, bundle: ExportBundle, options: Optional[ImportOptions] = None) -> List[Entity]:
        return self._importer.import_all(bundle, options)

    def create_entity(self, entity_id: str, body: Entity, wait: bool = False) -> Entity:
        return self._importer.create_entity(entity_id, body, wait=wait)

    def update_entity(self, entity_id: str, body: Entity, wait: bool = False) -> Entity:
        return self._importer.update_entity(entity_id, body, wait=wait)

    # ---------- delete ----------
    def delete_all(self) -> List[Entity]:
        return self._deleter.delete_all()

    def delete_all_of_type(self, type_: str) -> List[Entity]:
        return self._deleter.delete_all_of_type(type_)

    def delete_entity(self, entity_id: str) -> Entity:
        return self._deleter.delete_entity(entity_id)
