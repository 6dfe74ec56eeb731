"""Create-and-wait and create-and-return-handle over one entity set."""
from __future__ import annotations

import threading
from typing import Generic, TypeVar

from mediaservices.core.schema import RemoteEntity
from mediaservices.domain import Operation

from .submitter import EntitySubmitter
from .tracker import OperationTracker

EntityT = TypeVar("EntityT", bound=RemoteEntity)


class CreateOrchestrator(Generic[EntityT]):
    """Drives long-running creates for a single kind of entity.

    Every entry point validates and submits the draft the same way; they only
    differ in whether they then wait for the operation or hand back an
    ``InProgress`` handle for the caller to track.
    """

    def __init__(
        self,
        submitter: EntitySubmitter,
        tracker: OperationTracker,
        *,
        entity_set: str,
        poll_interval: float,
        resource: str = "entity",
    ) -> None:
        self._submitter = submitter
        self._tracker = tracker
        self.entity_set = entity_set
        self.poll_interval = poll_interval
        self.resource = resource

    def create(
        self,
        draft: EntityT,
        *,
        timeout: float | None = None,
        cancel_event: threading.Event | None = None,
    ) -> EntityT:
        operation_id = self._submitter.submit_create(self.entity_set, draft)
        operation = self._tracker.wait_for_completion(
            operation_id,
            self.poll_interval,
            target=draft,
            timeout=timeout,
            cancel_event=cancel_event,
            resource=self.resource,
        )
        return operation.target

    async def create_async(self, draft: EntityT, *, timeout: float | None = None) -> EntityT:
        operation_id = await self._submitter.submit_create_async(self.entity_set, draft)
        operation = await self._tracker.wait_for_completion_async(
            operation_id,
            self.poll_interval,
            target=draft,
            timeout=timeout,
            resource=self.resource,
        )
        return operation.target

    def send_create_operation(self, draft: EntityT) -> Operation[EntityT]:
        operation_id = self._submitter.submit_create(self.entity_set, draft)
        return Operation.in_progress(operation_id, target=draft)

    async def send_create_operation_async(self, draft: EntityT) -> Operation[EntityT]:
        operation_id = await self._submitter.submit_create_async(self.entity_set, draft)
        return Operation.in_progress(operation_id, target=draft)
