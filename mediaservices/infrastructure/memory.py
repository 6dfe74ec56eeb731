"""In-memory entity store for offline development and tests."""
from __future__ import annotations

import itertools
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Iterable

import httpx

from mediaservices.core.constants import EntitySets, StreamingConstants
from mediaservices.core.errors import ProtocolError
from mediaservices.core.schema import RemoteEntity
from mediaservices.domain import Operation, OperationState

from .store import ChangeResponse, EntityT


@dataclass(slots=True)
class ScriptedOperation:
    """States an operation reports, one per poll; the last one repeats."""

    states: deque[str]
    error_code: str | None = None
    error_message: str | None = None
    on_success: Callable[[dict[str, Any]], None] | None = None
    entity_key: tuple[str, str] | None = None
    polls: int = 0


@dataclass(slots=True)
class _PendingScript:
    states: list[str]
    operation_id: str | None = None
    error_code: str | None = None
    error_message: str | None = None
    on_success: Callable[[dict[str, Any]], None] | None = None
    omit_header: bool = False


class InMemoryDataContext:
    def __init__(self, store: "InMemoryEntityStore") -> None:
        self._store = store
        self._pending: list[tuple[str, RemoteEntity]] = []

    def add_object(self, entity_set: str, entity: RemoteEntity) -> None:
        self._pending.append((entity_set, entity))

    def save_changes(self) -> list[ChangeResponse]:
        responses: list[ChangeResponse] = []
        while self._pending:
            entity_set, entity = self._pending.pop(0)
            responses.append(self._store.insert(entity_set, entity))
        return responses

    def get_entity(self, model: type[EntityT], entity_id: str) -> EntityT:
        entity = model.model_validate(self._store.read(model.entity_set, entity_id))
        entity.init_context(self)
        return entity

    def list_entities(self, model: type[EntityT]) -> list[EntityT]:
        entities = [model.model_validate(row) for row in self._store.rows(model.entity_set)]
        for entity in entities:
            entity.init_context(self)
        return entities

    def refresh(self, entity: RemoteEntity) -> None:
        if not entity.id:
            raise ProtocolError(f"{type(entity).__name__} has no identifier assigned by the service")
        entity.apply(self._store.read(entity.entity_set, entity.id))


class InMemoryEntityStore:
    """Simple in-memory store mimicking the service for fast iteration and tests.

    Creates in ``long_running_sets`` answer with an ``operation-id`` header and
    register an operation whose reported states can be scripted beforehand
    with :meth:`script_operation`. Every interaction is appended to
    ``calls`` so tests can assert on the exact sequence.
    """

    def __init__(self, *, long_running_sets: Iterable[str] = (EntitySets.ORIGINS,)) -> None:
        self.long_running_sets = set(long_running_sets)
        self.calls: list[tuple[str, str]] = []
        self._entities: dict[str, dict[str, dict[str, Any]]] = {}
        self._operations: dict[str, ScriptedOperation] = {}
        self._scripts: deque[_PendingScript] = deque()
        self._ids = itertools.count(1)

    # ------------------------------------------------------------------
    # scripting helpers
    # ------------------------------------------------------------------
    def script_operation(
        self,
        *states: str,
        operation_id: str | None = None,
        error_code: str | None = None,
        error_message: str | None = None,
        on_success: Callable[[dict[str, Any]], None] | None = None,
        omit_header: bool = False,
    ) -> None:
        """Queue the behaviour of the next long-running create."""

        self._scripts.append(
            _PendingScript(
                states=list(states) or [OperationState.SUCCEEDED.value],
                operation_id=operation_id,
                error_code=error_code,
                error_message=error_message,
                on_success=on_success,
                omit_header=omit_header,
            )
        )

    def operation_polls(self, operation_id: str) -> int:
        return self._operations[operation_id].polls

    # ------------------------------------------------------------------
    # storage
    # ------------------------------------------------------------------
    def _next_id(self, entity_set: str) -> str:
        return f"nb:{entity_set.lower()}:{next(self._ids)}"

    def insert(self, entity_set: str, entity: RemoteEntity) -> ChangeResponse:
        self.calls.append(("save", entity_set))
        now = datetime.now(timezone.utc)
        row = entity.to_payload()
        entity_id = entity.id or self._next_id(entity_set)
        row.update({"Id": entity_id, "Created": now.isoformat(), "LastModified": now.isoformat()})
        self._entities.setdefault(entity_set, {})[entity_id] = row

        if entity_set not in self.long_running_sets:
            entity.apply(row)
            return ChangeResponse(status_code=201, entity=entity)

        script = self._scripts.popleft() if self._scripts else _PendingScript(states=[OperationState.SUCCEEDED.value])
        operation_id = script.operation_id or f"op-{next(self._ids)}"
        self._operations[operation_id] = ScriptedOperation(
            states=deque(script.states),
            error_code=script.error_code,
            error_message=script.error_message,
            on_success=script.on_success,
            entity_key=(entity_set, entity_id),
        )
        entity.apply({"Id": entity_id})
        headers = httpx.Headers()
        if not script.omit_header:
            headers[StreamingConstants.OPERATION_ID_HEADER] = operation_id
        return ChangeResponse(status_code=202, headers=headers, entity=entity)

    def read(self, entity_set: str, entity_id: str) -> dict[str, Any]:
        self.calls.append(("read", entity_id))
        try:
            return dict(self._entities[entity_set][entity_id])
        except KeyError:
            raise KeyError(f"{entity_set}('{entity_id}') does not exist") from None

    def rows(self, entity_set: str) -> list[dict[str, Any]]:
        self.calls.append(("list", entity_set))
        return [dict(row) for row in self._entities.get(entity_set, {}).values()]

    # ------------------------------------------------------------------
    # public API
    # ------------------------------------------------------------------
    def create_context(self) -> InMemoryDataContext:
        return InMemoryDataContext(self)

    def get_operation(self, operation_id: str) -> Operation:
        self.calls.append(("poll", operation_id))
        try:
            scripted = self._operations[operation_id]
        except KeyError:
            raise KeyError(f"Operation '{operation_id}' does not exist") from None

        scripted.polls += 1
        state = scripted.states[0]
        if len(scripted.states) > 1:
            scripted.states.popleft()
        if state == OperationState.SUCCEEDED.value and scripted.on_success is not None:
            entity_set, entity_id = scripted.entity_key
            scripted.on_success(self._entities[entity_set][entity_id])
            scripted.on_success = None

        failed = state == OperationState.FAILED.value
        return Operation(
            id=operation_id,
            state=state,
            error_code=scripted.error_code if failed else None,
            error_message=scripted.error_message if failed else None,
        )

    def close(self) -> None:
        return None


__all__ = ["InMemoryDataContext", "InMemoryEntityStore", "ScriptedOperation"]
