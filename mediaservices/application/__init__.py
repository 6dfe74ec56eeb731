"""Application services."""

from .collections import (
    AccessPolicyCollection,
    AssetCollection,
    AssetFileCollection,
    LocatorCollection,
    OperationCollection,
    OriginCollection,
)
from .orchestrator import CreateOrchestrator
from .submitter import EntitySubmitter
from .tracker import OperationTracker

__all__ = [
    "AccessPolicyCollection",
    "AssetCollection",
    "AssetFileCollection",
    "CreateOrchestrator",
    "EntitySubmitter",
    "LocatorCollection",
    "OperationCollection",
    "OperationTracker",
    "OriginCollection",
]
