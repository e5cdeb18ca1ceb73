import logging
from typing import Any, Dict, List, Optional

import requests

from .. import __version__
from ..core.errors import StoreOperationError, SyncError, TransportError
from ..core.models import Entity, EntityStub
from .endpoints import config_url, type_query_filter

logger = logging.getLogger(__name__)


class IdmConfigClient:
    """
    Point CRUD against the IDM ``openidm/config`` endpoint.

    HTTP errors surface as StoreOperationError (status, reason, message taken
    from the IDM error body); anything that prevents a response from arriving
    surfaces as TransportError. No retries happen here.
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        *,
        timeout: float = 30.0,
        verify: bool = True,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.verify = verify
        self._session.headers.update(
            {
                "Content-Type": "application/json",
                "Accept": "application/json",
                "User-Agent": f"idmsync/{__version__}",
            }
        )
        if token:
            self._session.headers.update({"Authorization": f"Bearer {token.strip()}"})

    # -------------------------------------------------------------------------
    # Low-level HTTP helpers
    # -------------------------------------------------------------------------

    def _request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json_data: Any = None,
        entity_id: Optional[str] = None,
    ) -> Any:
        try:
            resp = self._session.request(method, url, params=params, json=json_data, timeout=self.timeout)
            resp.raise_for_status()
        except requests.HTTPError as e:
            raise self._store_error(e, entity_id) from e
        except requests.RequestException as e:
            raise TransportError(f"{method} {url} failed", e) from e

        if not resp.content:
            return {}
        try:
            return resp.json()
        except ValueError as e:
            raise SyncError(f"Unexpected non-JSON response from {method} {url}", e) from e

    @staticmethod
    def _store_error(error: requests.HTTPError, entity_id: Optional[str]) -> StoreOperationError:
        resp = error.response
        status = resp.status_code if resp is not None else 0
        reason = (resp.reason or "") if resp is not None else ""
        message = ""
        code = None
        try:
            body = resp.json() if resp is not None else None
        except ValueError:
            body = None
        if isinstance(body, dict):
            reason = str(body.get("reason") or reason)
            message = str(body.get("message") or "")
            # IDM echoes the numeric status as "code"; only string codes are machine codes
            if isinstance(body.get("code"), str):
                code = body["code"]
        return StoreOperationError(status, reason, message, code=code, entity_id=entity_id, cause=error)

    # -------------------------------------------------------------------------
    # Listing
    # -------------------------------------------------------------------------

    def list_stubs(self) -> List[EntityStub]:
        data = self._request("GET", config_url(self.base_url))
        configurations = data.get("configurations") if isinstance(data, dict) else None
        if not isinstance(configurations, list):
            raise SyncError(f"Unexpected config stubs format: {data!r}")
        return [EntityStub.from_dict(c) for c in configurations]

    def _query(self, query_filter: str) -> List[Entity]:
        data = self._request("GET", config_url(self.base_url), params={"_queryFilter": query_filter})
        result = data.get("result") if isinstance(data, dict) else None
        if not isinstance(result, list):
            raise SyncError(f"Unexpected config query format: {data!r}")
        return result

    def list_entities(self) -> List[Entity]:
        return self._query("true")

    def list_entities_by_type(self, type_: str) -> List[Entity]:
        return self._query(type_query_filter(type_))

    # -------------------------------------------------------------------------
    # Single entity
    # -------------------------------------------------------------------------

    def get_entity(self, entity_id: str) -> Entity:
        return self._request("GET", config_url(self.base_url, entity_id), entity_id=entity_id)

    def put_entity(self, entity_id: str, body: Entity, wait: bool = False) -> Entity:
        params = {"waitForCompletion": "true"} if wait else None
        return self._request(
            "PUT", config_url(self.base_url, entity_id), params=params, json_data=body, entity_id=entity_id
        )

    def delete_entity(self, entity_id: str) -> Entity:
        return self._request("DELETE", config_url(self.base_url, entity_id), entity_id=entity_id)

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "IdmConfigClient":
        return self

    def __exit__(self, *args) -> None:
        self.close()


__all__ = ["IdmConfigClient"]
