"""Error taxonomy raised by the media services client."""
from __future__ import annotations


class MediaServicesError(RuntimeError):
    """Base class for every error raised by this library."""


class ValidationError(MediaServicesError, ValueError):
    """Raised when a local precondition fails before any request is sent."""


class ProtocolError(MediaServicesError):
    """Raised when a service response lacks metadata the client relies on."""


class OperationFailedError(MediaServicesError):
    """Raised when a long-running operation finishes in the ``Failed`` state."""

    def __init__(
        self,
        operation_id: str,
        error_message: str | None,
        *,
        label: str = "Failed",
        error_code: str | None = None,
        resource: str = "entity",
    ) -> None:
        self.operation_id = operation_id
        self.error_message = error_message
        self.error_code = error_code
        self.label = label
        self.resource = resource
        super().__init__(
            f"Create {resource} operation '{operation_id}' {label}: {error_message or 'no error message'}"
        )


class UnexpectedStateError(MediaServicesError):
    """Raised when an operation reports a state the client does not know."""

    def __init__(self, operation_id: str, state: str, *, resource: str = "entity") -> None:
        self.operation_id = operation_id
        self.state = state
        self.resource = resource
        super().__init__(f"Create {resource} operation '{operation_id}' is in invalid state: {state}")


class OperationTimeoutError(MediaServicesError, TimeoutError):
    """Raised when an opt-in polling deadline elapses."""

    def __init__(self, operation_id: str, timeout: float) -> None:
        self.operation_id = operation_id
        self.timeout = timeout
        super().__init__(f"Operation '{operation_id}' did not complete within {timeout:g} seconds")


class OperationCancelledError(MediaServicesError):
    """Raised when a caller signals cancellation while an operation is polled."""

    def __init__(self, operation_id: str) -> None:
        self.operation_id = operation_id
        super().__init__(f"Waiting for operation '{operation_id}' was cancelled")


__all__ = [
    "MediaServicesError",
    "OperationCancelledError",
    "OperationFailedError",
    "OperationTimeoutError",
    "ProtocolError",
    "UnexpectedStateError",
    "ValidationError",
]
