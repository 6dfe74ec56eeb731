"""Integration with the media services OData/REST endpoint."""
from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote, urlparse

import httpx

from mediaservices.core.constants import DATA_SERVICE_VERSION, DEFAULT_API_VERSION, EntitySets
from mediaservices.core.errors import ProtocolError
from mediaservices.core.schema import RemoteEntity
from mediaservices.domain import Operation

from .store import ChangeResponse, EntityT

logger = logging.getLogger(__name__)


def _entity_path(entity_set: str, entity_id: str) -> str:
    escaped = entity_id.replace("'", "''")
    return f"{entity_set}('{quote(escaped, safe=':')}')"


def _unwrap(payload: Any) -> Any:
    """Strip the verbose OData ``{"d": ...}`` envelope when present."""

    if isinstance(payload, dict) and "d" in payload:
        return payload["d"]
    return payload


def _items(payload: Any) -> list[dict[str, Any]]:
    body = _unwrap(payload)
    if isinstance(body, list):
        return body
    if isinstance(body, dict):
        for key in ("value", "results"):
            if isinstance(body.get(key), list):
                return body[key]
    raise ProtocolError("Entity set response does not contain a list of entities")


class RestDataContext:
    """Unit of work bound to one :class:`RestEntityStore`."""

    def __init__(self, store: "RestEntityStore") -> None:
        self._store = store
        self._pending: list[tuple[str, RemoteEntity]] = []

    def add_object(self, entity_set: str, entity: RemoteEntity) -> None:
        self._pending.append((entity_set, entity))

    def save_changes(self) -> list[ChangeResponse]:
        responses: list[ChangeResponse] = []
        while self._pending:
            entity_set, entity = self._pending.pop(0)
            response = self._store.request("POST", entity_set, json=entity.to_payload())
            body = self._store.decode(response)
            if body:
                entity.apply(body)
            responses.append(
                ChangeResponse(status_code=response.status_code, headers=response.headers, entity=entity)
            )
        return responses

    def get_entity(self, model: type[EntityT], entity_id: str) -> EntityT:
        response = self._store.request("GET", _entity_path(model.entity_set, entity_id))
        entity = model.model_validate(self._store.decode(response))
        entity.init_context(self)
        return entity

    def list_entities(self, model: type[EntityT]) -> list[EntityT]:
        response = self._store.request("GET", model.entity_set)
        entities = [model.model_validate(item) for item in _items(response.json())]
        for entity in entities:
            entity.init_context(self)
        return entities

    def refresh(self, entity: RemoteEntity) -> None:
        if not entity.id:
            raise ProtocolError(f"{type(entity).__name__} has no identifier assigned by the service")
        response = self._store.request("GET", _entity_path(entity.entity_set, entity.id))
        entity.apply(self._store.decode(response))


class RestEntityStore:
    """Client for the media services REST API."""

    def __init__(
        self,
        api_base: str,
        *,
        access_token: str | None = None,
        api_version: str = DEFAULT_API_VERSION,
        timeout: float = 30.0,
        http_client: httpx.Client | None = None,
    ) -> None:
        parsed = urlparse(api_base)
        if not parsed.scheme or not parsed.netloc:
            raise ValueError("api_base must include scheme and host")

        self._base_url = api_base.rstrip("/")
        self._access_token = access_token
        self._api_version = api_version
        self._client = http_client or httpx.Client(timeout=timeout)
        self._owns_client = http_client is None

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    def _build_headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/json",
            "DataServiceVersion": DATA_SERVICE_VERSION,
            "MaxDataServiceVersion": DATA_SERVICE_VERSION,
            "x-ms-version": self._api_version,
        }
        if self._access_token:
            headers["Authorization"] = f"Bearer {self._access_token}"
        return headers

    def request(self, method: str, path: str, *, json: dict[str, Any] | None = None) -> httpx.Response:
        url = f"{self._base_url}/{path}"
        logger.debug("%s %s", method, url)
        response = self._client.request(method, url, headers=self._build_headers(), json=json)
        response.raise_for_status()
        return response

    @staticmethod
    def decode(response: httpx.Response) -> dict[str, Any]:
        if not response.content:
            return {}
        body = _unwrap(response.json())
        if not isinstance(body, dict):
            raise ProtocolError(f"Expected a JSON object from {response.request.url}")
        return body

    # ------------------------------------------------------------------
    # public API
    # ------------------------------------------------------------------
    def create_context(self) -> RestDataContext:
        return RestDataContext(self)

    def get_operation(self, operation_id: str) -> Operation:
        response = self.request("GET", _entity_path(EntitySets.OPERATIONS, operation_id))
        body = self.decode(response)
        state = body.get("State")
        if not state:
            raise ProtocolError(f"Operation '{operation_id}' response carries no state")
        error_code = body.get("ErrorCode")
        return Operation(
            id=str(body.get("Id") or operation_id),
            state=str(state),
            error_code=None if error_code is None else str(error_code),
            error_message=body.get("ErrorMessage"),
        )

    def close(self) -> None:
        if self._owns_client:
            self._client.close()


__all__ = ["RestDataContext", "RestEntityStore"]
