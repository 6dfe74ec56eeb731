"""Wire-level constants shared by the REST store and the collections."""
from __future__ import annotations


class StreamingConstants:
    """Headers and timings used by streaming resources (origins)."""

    OPERATION_ID_HEADER = "operation-id"
    CREATE_ORIGIN_POLL_INTERVAL = 10.0
    OPERATION_POLL_INTERVAL = 5.0


class EntitySets:
    ORIGINS = "Origins"
    ASSETS = "Assets"
    FILES = "Files"
    ACCESS_POLICIES = "AccessPolicies"
    LOCATORS = "Locators"
    OPERATIONS = "Operations"


DATA_SERVICE_VERSION = "3.0"
DEFAULT_API_VERSION = "2.19"
