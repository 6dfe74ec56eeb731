"""Domain layer definitions."""

from .operations import Operation, OperationState

__all__ = [
    "Operation",
    "OperationState",
]
