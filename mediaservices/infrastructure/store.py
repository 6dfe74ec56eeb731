"""Contracts between the collections and the remote entity store."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, TypeVar

import httpx

from mediaservices.core.schema import RemoteEntity
from mediaservices.domain import Operation

EntityT = TypeVar("EntityT", bound=RemoteEntity)


@dataclass(slots=True)
class ChangeResponse:
    """Outcome of one pending change after ``save_changes``."""

    status_code: int
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    entity: RemoteEntity | None = None


class DataContext(Protocol):
    """Unit of work against the remote entity store."""

    def add_object(self, entity_set: str, entity: RemoteEntity) -> None: ...

    def save_changes(self) -> list[ChangeResponse]: ...

    def get_entity(self, model: type[EntityT], entity_id: str) -> EntityT: ...

    def list_entities(self, model: type[EntityT]) -> list[EntityT]: ...

    def refresh(self, entity: RemoteEntity) -> None: ...


class EntityStore(Protocol):
    """Connection to the service: hands out data contexts and reads operations."""

    def create_context(self) -> DataContext: ...

    def get_operation(self, operation_id: str) -> Operation: ...

    def close(self) -> None: ...
