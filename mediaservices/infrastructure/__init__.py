"""Infrastructure layer exports."""

from .memory import InMemoryEntityStore
from .rest import RestEntityStore
from .store import ChangeResponse, DataContext, EntityStore

__all__ = [
    "ChangeResponse",
    "DataContext",
    "EntityStore",
    "InMemoryEntityStore",
    "RestEntityStore",
]
