import logging
from typing import List

from .errors import SyncError
from .models import ConfigStore, Entity, EntityStub

logger = logging.getLogger(__name__)


class Catalog:
    """
    Enumerates what the store holds. Every call goes to the store; nothing is
    cached between calls.
    """

    def __init__(self, store: ConfigStore) -> None:
        self._store = store

    def list_stubs(self) -> List[EntityStub]:
        try:
            stubs = self._store.list_stubs()
        except Exception as e:
            raise SyncError("Error reading config entity stubs", e) from e
        logger.debug("Listed %d config entity stubs", len(stubs))
        return stubs

    def list_types(self) -> List[str]:
        """Distinct entity types, in the order they first appear."""
        types: List[str] = []
        for stub in self.list_stubs():
            if stub.type not in types:
                types.append(stub.type)
        return types

    def list_entities(self) -> List[Entity]:
        try:
            entities = self._store.list_entities()
        except Exception as e:
            raise SyncError("Error reading config entities", e) from e
        logger.debug("Listed %d config entities", len(entities))
        return entities

    def list_entities_by_type(self, type_: str) -> List[Entity]:
        try:
            entities = self._store.list_entities_by_type(type_)
        except Exception as e:
            raise SyncError(f"Error reading config entities of type {type_}", e) from e
        logger.debug("Listed %d config entities of type %s", len(entities), type_)
        return entities

    def read_entity(self, entity_id: str) -> Entity:
        try:
            return self._store.get_entity(entity_id)
        except Exception as e:
            raise SyncError(f"Error reading config entity {entity_id}", e) from e


__all__ = ["Catalog"]
