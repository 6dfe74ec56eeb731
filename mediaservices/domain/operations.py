"""Domain records for long-running service operations."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

TargetT = TypeVar("TargetT")


class OperationState(str, Enum):
    IN_PROGRESS = "InProgress"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"

    @classmethod
    def parse(cls, value: str) -> "OperationState | None":
        """Return the matching state, or ``None`` for values this client does not know."""

        try:
            return cls(value)
        except ValueError:
            return None


@dataclass(frozen=True, slots=True)
class Operation(Generic[TargetT]):
    """Snapshot of a remote operation.

    ``state`` keeps the raw service value so that states added by the
    service later survive the round trip untouched.
    """

    id: str
    state: str
    error_code: str | None = None
    error_message: str | None = None
    target: TargetT | None = None

    @classmethod
    def in_progress(cls, operation_id: str, target: TargetT | None = None) -> "Operation[TargetT]":
        return cls(id=operation_id, state=OperationState.IN_PROGRESS.value, target=target)

    @property
    def known_state(self) -> OperationState | None:
        return OperationState.parse(self.state)

    @property
    def is_terminal(self) -> bool:
        return self.known_state in (OperationState.SUCCEEDED, OperationState.FAILED)
