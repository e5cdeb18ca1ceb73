"""Shared fixtures: an in-memory config store that can be told to fail."""

import copy
import threading
from typing import Dict, List, Optional

import pytest

from idmsync.config import CLASSIC_DEPLOYMENT, CLOUD_DEPLOYMENT, SyncContext
from idmsync.core.errors import StoreOperationError
from idmsync.core.models import EntityStub


class FakeStore:
    """Dict-backed ConfigStore. ``fail_*`` maps an id to the error to raise."""

    def __init__(self, entities: Optional[Dict[str, dict]] = None) -> None:
        self.entities: Dict[str, dict] = {k: dict(v, _id=k) for k, v in (entities or {}).items()}
        self.fail_get: Dict[str, Exception] = {}
        self.fail_put: Dict[str, Exception] = {}
        self.fail_delete: Dict[str, Exception] = {}
        self.list_error: Optional[Exception] = None
        self.calls: List[tuple] = []
        self._lock = threading.Lock()

    def _record(self, *call) -> None:
        with self._lock:
            self.calls.append(call)

    def calls_to(self, name: str) -> List[tuple]:
        return [c for c in self.calls if c[0] == name]

    def list_stubs(self):
        self._record("list_stubs")
        if self.list_error:
            raise self.list_error
        return [EntityStub(id=k, pid=k, factory_pid=None) for k in self.entities]

    def list_entities(self):
        self._record("list_entities")
        if self.list_error:
            raise self.list_error
        return [copy.deepcopy(v) for v in self.entities.values()]

    def list_entities_by_type(self, type_):
        self._record("list_entities_by_type", type_)
        if self.list_error:
            raise self.list_error
        return [copy.deepcopy(v) for k, v in self.entities.items() if k.startswith(type_)]

    def get_entity(self, entity_id):
        self._record("get_entity", entity_id)
        if entity_id in self.fail_get:
            raise self.fail_get[entity_id]
        if entity_id not in self.entities:
            raise StoreOperationError(404, "Not Found", f"No configuration exists for id {entity_id}",
                                      entity_id=entity_id)
        return copy.deepcopy(self.entities[entity_id])

    def put_entity(self, entity_id, body, wait=False):
        self._record("put_entity", entity_id, wait)
        if entity_id in self.fail_put:
            raise self.fail_put[entity_id]
        self.entities[entity_id] = dict(copy.deepcopy(body), _id=entity_id)
        return copy.deepcopy(self.entities[entity_id])

    def delete_entity(self, entity_id):
        self._record("delete_entity", entity_id)
        if entity_id in self.fail_delete:
            raise self.fail_delete[entity_id]
        return self.entities.pop(entity_id)


def not_found(entity_id: str) -> StoreOperationError:
    return StoreOperationError(404, "Not Found", f"No configuration exists for id {entity_id}",
                               entity_id=entity_id)


def forbidden(entity_id: str, message: str = "Forbidden") -> StoreOperationError:
    return StoreOperationError(403, "Forbidden", message, entity_id=entity_id)


@pytest.fixture
def store():
    return FakeStore(
        {
            "managed": {"objects": []},
            "sync": {"mappings": []},
            "emailTemplate/welcome": {"enabled": True},
            "emailTemplate/frOnboarding": {"enabled": True},
            "endpoint/hello": {"type": "text/javascript", "source": "1;"},
        }
    )


@pytest.fixture
def context():
    return SyncContext(deployment_type=CLASSIC_DEPLOYMENT, origin="https://idm.example.com", exported_by="admin")


@pytest.fixture
def cloud_context():
    return SyncContext(deployment_type=CLOUD_DEPLOYMENT, origin="https://tenant.example.com", exported_by="admin")
