from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any

import httpx

from mediaservices.application import (
    AccessPolicyCollection,
    AssetCollection,
    AssetFileCollection,
    LocatorCollection,
    OperationCollection,
    OperationTracker,
    OriginCollection,
)
from mediaservices.core.constants import DEFAULT_API_VERSION, StreamingConstants
from mediaservices.core.schema import AssetData
from mediaservices.infrastructure import EntityStore, RestEntityStore


@dataclass(slots=True)
class ClientSettings:
    """Connection settings for the REST endpoint."""

    api_base: str
    access_token: str | None = None
    api_version: str = DEFAULT_API_VERSION
    timeout: float = 30.0
    origin_poll_interval: float = StreamingConstants.CREATE_ORIGIN_POLL_INTERVAL

    @classmethod
    def from_env(cls) -> "ClientSettings":
        api_base = os.getenv("MEDIASERVICES_API_BASE")
        if not api_base:
            raise ValueError("MEDIASERVICES_API_BASE is not set")
        return cls(
            api_base=api_base,
            access_token=os.getenv("MEDIASERVICES_ACCESS_TOKEN") or None,
            api_version=os.getenv("MEDIASERVICES_API_VERSION") or DEFAULT_API_VERSION,
            timeout=float(os.getenv("MEDIASERVICES_TIMEOUT") or 30.0),
            origin_poll_interval=float(
                os.getenv("MEDIASERVICES_POLL_INTERVAL") or StreamingConstants.CREATE_ORIGIN_POLL_INTERVAL
            ),
        )


class MediaContext:
    """Entry point holding the store connection and every collection."""

    def __init__(
        self,
        store: EntityStore,
        *,
        origin_poll_interval: float = StreamingConstants.CREATE_ORIGIN_POLL_INTERVAL,
        tracker: OperationTracker | None = None,
    ) -> None:
        self.store = store
        self.tracker = tracker or OperationTracker(store)
        self.origins = OriginCollection(store, self.tracker, poll_interval=origin_poll_interval)
        self.assets = AssetCollection(store)
        self.access_policies = AccessPolicyCollection(store)
        self.locators = LocatorCollection(store)
        self.operations = OperationCollection(self.tracker)

    def asset_files(self, asset: AssetData) -> AssetFileCollection:
        return AssetFileCollection(self.store, asset)

    def close(self) -> None:
        self.store.close()

    def __enter__(self) -> "MediaContext":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


def create_context(
    settings: ClientSettings | None = None,
    *,
    http_client: httpx.Client | None = None,
) -> MediaContext:
    """Build a context talking to the REST endpoint described by ``settings`` or the environment."""

    settings = settings or ClientSettings.from_env()
    store = RestEntityStore(
        settings.api_base,
        access_token=settings.access_token,
        api_version=settings.api_version,
        timeout=settings.timeout,
        http_client=http_client,
    )
    return MediaContext(store, origin_poll_interval=settings.origin_poll_interval)
