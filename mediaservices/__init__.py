"""Client library for the media services REST API."""

from .context import ClientSettings, MediaContext, create_context
from .core.errors import (
    MediaServicesError,
    OperationCancelledError,
    OperationFailedError,
    OperationTimeoutError,
    ProtocolError,
    UnexpectedStateError,
    ValidationError,
)
from .core.schema import (
    AccessPermissions,
    AssetCreationOptions,
    LocatorType,
    OriginServiceSettings,
)
from .domain import Operation, OperationState

__all__ = [
    "AccessPermissions",
    "AssetCreationOptions",
    "ClientSettings",
    "LocatorType",
    "MediaContext",
    "MediaServicesError",
    "Operation",
    "OperationCancelledError",
    "OperationFailedError",
    "OperationState",
    "OperationTimeoutError",
    "OriginServiceSettings",
    "ProtocolError",
    "UnexpectedStateError",
    "ValidationError",
    "create_context",
]
