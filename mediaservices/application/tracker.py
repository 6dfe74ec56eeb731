"""Polling of long-running operations until they settle."""
from __future__ import annotations

import asyncio
import logging
import threading
import time
from dataclasses import replace
from typing import Awaitable, Callable

from mediaservices.core.errors import (
    OperationCancelledError,
    OperationFailedError,
    OperationTimeoutError,
    UnexpectedStateError,
)
from mediaservices.core.schema import RemoteEntity
from mediaservices.domain import Operation, OperationState
from mediaservices.infrastructure import EntityStore

logger = logging.getLogger(__name__)


class OperationTracker:
    """Reads operation status from the store and waits for terminal states.

    Waiting is unbounded unless the caller passes ``timeout`` or a cancel
    signal; the service alone decides when an operation is finished.
    """

    def __init__(
        self,
        store: EntityStore,
        *,
        sleep: Callable[[float], None] = time.sleep,
        async_sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._store = store
        self._sleep = sleep
        self._async_sleep = async_sleep
        self._clock = clock

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    def _next_delay(self, operation_id: str, poll_interval: float, deadline: float | None, timeout: float | None) -> float:
        if deadline is None:
            return poll_interval
        remaining = deadline - self._clock()
        if remaining <= 0:
            raise OperationTimeoutError(operation_id, timeout or 0.0)
        return min(poll_interval, remaining)

    @staticmethod
    def _check_outcome(operation: Operation, resource: str) -> None:
        state = operation.known_state
        if state is OperationState.SUCCEEDED:
            logger.info("Operation %s succeeded", operation.id)
            return
        if state is OperationState.FAILED:
            logger.info("Operation %s failed: %s", operation.id, operation.error_message)
            raise OperationFailedError(
                operation.id,
                operation.error_message,
                label=OperationState.FAILED.value,
                error_code=operation.error_code,
                resource=resource,
            )
        logger.warning("Operation %s reported unknown state %r", operation.id, operation.state)
        raise UnexpectedStateError(operation.id, operation.state, resource=resource)

    # ------------------------------------------------------------------
    # public API
    # ------------------------------------------------------------------
    def poll(self, operation_id: str) -> Operation:
        operation = self._store.get_operation(operation_id)
        logger.debug("Operation %s is %s", operation_id, operation.state)
        return operation

    def wait_for_completion(
        self,
        operation_id: str,
        poll_interval: float,
        *,
        target: RemoteEntity | None = None,
        timeout: float | None = None,
        cancel_event: threading.Event | None = None,
        resource: str = "entity",
    ) -> Operation:
        """Poll until the operation leaves ``InProgress`` and resolve the outcome.

        On success the ``target`` entity is refreshed from the store and
        attached to the returned snapshot. ``Failed`` raises
        :class:`OperationFailedError`; any state this client does not know
        raises :class:`UnexpectedStateError`.
        """

        deadline = None if timeout is None else self._clock() + timeout
        while True:
            if cancel_event is not None and cancel_event.is_set():
                raise OperationCancelledError(operation_id)
            operation = self.poll(operation_id)
            if operation.known_state is not OperationState.IN_PROGRESS:
                break
            delay = self._next_delay(operation_id, poll_interval, deadline, timeout)
            if cancel_event is not None:
                if cancel_event.wait(delay):
                    raise OperationCancelledError(operation_id)
            else:
                self._sleep(delay)

        self._check_outcome(operation, resource)
        if target is not None:
            target.refresh()
        return replace(operation, target=target)

    async def wait_for_completion_async(
        self,
        operation_id: str,
        poll_interval: float,
        *,
        target: RemoteEntity | None = None,
        timeout: float | None = None,
        resource: str = "entity",
    ) -> Operation:
        deadline = None if timeout is None else self._clock() + timeout
        while True:
            operation = await asyncio.to_thread(self.poll, operation_id)
            if operation.known_state is not OperationState.IN_PROGRESS:
                break
            await self._async_sleep(self._next_delay(operation_id, poll_interval, deadline, timeout))

        self._check_outcome(operation, resource)
        if target is not None:
            await asyncio.to_thread(target.refresh)
        return replace(operation, target=target)
