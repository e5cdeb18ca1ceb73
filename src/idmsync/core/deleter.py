import logging
from typing import Iterable, List

from .catalog import Catalog
from .errors import AggregateError, SyncError
from .models import ConfigStore, Entity

logger = logging.getLogger(__name__)


class DeleteOrchestrator:
    """
    Sequential bulk deletes. A listing failure is raised straight away;
    per-id failures are collected and raised together at the end.
    """

    def __init__(self, catalog: Catalog, store: ConfigStore) -> None:
        self._catalog = catalog
        self._store = store

    def delete_entity(self, entity_id: str) -> Entity:
        try:
            return self._store.delete_entity(entity_id)
        except Exception as e:
            raise SyncError(f"Error deleting config entity {entity_id}", e) from e

    def _delete_each(self, entity_ids: Iterable[str], failure_message: str) -> List[Entity]:
        deleted: List[Entity] = []
        errors: List[BaseException] = []
        for entity_id in entity_ids:
            logger.debug("Deleting config entity %s", entity_id)
            try:
                deleted.append(self._store.delete_entity(entity_id))
            except Exception as e:
                logger.error("Error deleting config entity %s: %s", entity_id, e)
                errors.append(e)
        if errors:
            raise AggregateError(failure_message, errors)
        logger.info("Deleted %d config entities.", len(deleted))
        return deleted

    def delete_all(self) -> List[Entity]:
        stubs = self._catalog.list_stubs()
        return self._delete_each((s.id for s in stubs), "Error deleting config entities")

    def delete_all_of_type(self, type_: str) -> List[Entity]:
        entities = self._catalog.list_entities_by_type(type_)
        return self._delete_each(
            (str(e["_id"]) for e in entities if e.get("_id")),
            f"Error deleting config entities of type {type_}",
        )


__all__ = ["DeleteOrchestrator"]
