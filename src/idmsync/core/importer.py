import logging
from typing import Callable, List, Optional

from ..config import SyncContext
from ..utils.script_hooks import are_script_hooks_valid
from .catalog import Catalog
from .errors import AggregateError, SyncError, ValidationError
from .models import ConfigStore, Entity, ExportBundle, ImportOptions
from .policy import SuppressionPolicy

logger = logging.getLogger(__name__)

ScriptValidator = Callable[[Entity], bool]


class ImportOrchestrator:
    """
    Writes config entities back to the store, one id at a time, in bundle
    order. A failing id never stops the remaining ones; failures are reported
    together once the whole bundle has been attempted.
    """

    def __init__(
        self,
        store: ConfigStore,
        context: SyncContext,
        policy: Optional[SuppressionPolicy] = None,
        validator: ScriptValidator = are_script_hooks_valid,
    ) -> None:
        self._store = store
        self._catalog = Catalog(store)
        self._context = context
        self._policy = policy or SuppressionPolicy()
        self._validator = validator

    def update_entity(self, entity_id: str, body: Entity, wait: bool = False) -> Entity:
        """Create or replace one entity."""
        try:
            return self._store.put_entity(entity_id, body, wait=wait)
        except Exception as e:
            raise SyncError(f"Error updating config entity {entity_id}", e) from e

    def create_entity(self, entity_id: str, body: Entity, wait: bool = False) -> Entity:
        """Create one entity; fails if the id already exists."""
        try:
            self._catalog.read_entity(entity_id)
        except SyncError:
            try:
                return self._store.put_entity(entity_id, body, wait=wait)
            except Exception as e:
                raise SyncError(f"Error creating config entity {entity_id}", e) from e
        raise SyncError(f"Config entity {entity_id} already exists!")

    def import_all(self, bundle: ExportBundle, options: Optional[ImportOptions] = None) -> List[Entity]:
        options = options or ImportOptions()
        response: List[Entity] = []
        errors: List[BaseException] = []

        for entity_id, body in bundle.entities.items():
            logger.debug("Importing config entity %s", entity_id)
            if options.validate and not self._validator(body):
                logger.error("Invalid script hook in config entity %s; not imported", entity_id)
                errors.append(ValidationError(entity_id))
                continue
            try:
                response.append(self._store.put_entity(entity_id, body, wait=options.wait))
            except Exception as e:
                if self._policy.is_benign_write_failure(entity_id, e, self._context.deployment_type):
                    logger.info("Config entity %s is protected on this deployment; skipped (%s)", entity_id, e)
                    continue
                logger.error("Error importing config entity %s: %s", entity_id, e)
                errors.append(e)

        if errors:
            raise AggregateError("Error importing config entities", errors)
        logger.info("Imported %d config entities.", len(response))
        return response


__all__ = ["ImportOrchestrator", "ScriptValidator"]
