"""Submission of long-running create requests."""
from __future__ import annotations

import asyncio
import logging

from mediaservices.core.constants import StreamingConstants
from mediaservices.core.errors import ProtocolError, ValidationError
from mediaservices.core.schema import RemoteEntity
from mediaservices.infrastructure import ChangeResponse, EntityStore

logger = logging.getLogger(__name__)


def ensure_name(name: str | None, resource: str) -> None:
    if not name:
        raise ValidationError(f"{resource.capitalize()} name cannot be null or empty")


def extract_operation_id(responses: list[ChangeResponse]) -> str:
    """Return the operation id carried by the single response of a create."""

    if len(responses) != 1:
        raise ProtocolError(f"Expected exactly one change response, got {len(responses)}")
    operation_id = responses[0].headers.get(StreamingConstants.OPERATION_ID_HEADER)
    if not operation_id:
        raise ProtocolError(
            f"Response is missing the '{StreamingConstants.OPERATION_ID_HEADER}' header"
        )
    return operation_id


class EntitySubmitter:
    """Sends drafts to the store and returns the id of the operation they start."""

    def __init__(self, store: EntityStore, *, resource: str = "entity") -> None:
        self._store = store
        self._resource = resource

    def submit_create(self, entity_set: str, draft: RemoteEntity) -> str:
        name = getattr(draft, "name", None)
        ensure_name(name, self._resource)

        context = self._store.create_context()
        draft.init_context(context)
        context.add_object(entity_set, draft)
        operation_id = extract_operation_id(context.save_changes())
        logger.info("Submitted create %s '%s' as operation %s", self._resource, name, operation_id)
        return operation_id

    async def submit_create_async(self, entity_set: str, draft: RemoteEntity) -> str:
        ensure_name(getattr(draft, "name", None), self._resource)
        return await asyncio.to_thread(self.submit_create, entity_set, draft)
