"""Collection proxies over the remote entity sets."""
from __future__ import annotations

import asyncio
import logging
import threading
from datetime import datetime, timedelta
from typing import Generic, TypeVar

from mediaservices.core.constants import StreamingConstants
from mediaservices.core.errors import ValidationError
from mediaservices.core.schema import (
    AccessPermissions,
    AccessPolicyData,
    AssetCreationOptions,
    AssetData,
    AssetFileData,
    LocatorData,
    LocatorType,
    OriginData,
    OriginServiceSettings,
    RemoteEntity,
    serialize_settings,
)
from mediaservices.domain import Operation
from mediaservices.infrastructure import EntityStore

from .orchestrator import CreateOrchestrator
from .submitter import EntitySubmitter, ensure_name
from .tracker import OperationTracker

logger = logging.getLogger(__name__)

EntityT = TypeVar("EntityT", bound=RemoteEntity)


class EntityCollection(Generic[EntityT]):
    """Read access shared by every collection plus the plain (non-LRO) save."""

    model: type[EntityT]

    def __init__(self, store: EntityStore) -> None:
        self._store = store

    def _save(self, draft: EntityT) -> EntityT:
        context = self._store.create_context()
        draft.init_context(context)
        context.add_object(self.model.entity_set, draft)
        context.save_changes()
        logger.info("Created %s %s", self.model.entity_set, draft.id)
        return draft

    def get(self, entity_id: str) -> EntityT:
        return self._store.create_context().get_entity(self.model, entity_id)

    def list(self) -> list[EntityT]:
        return self._store.create_context().list_entities(self.model)


class OriginCollection(EntityCollection[OriginData]):
    """Origins are created through a long-running operation."""

    model = OriginData

    def __init__(
        self,
        store: EntityStore,
        tracker: OperationTracker,
        *,
        poll_interval: float = StreamingConstants.CREATE_ORIGIN_POLL_INTERVAL,
    ) -> None:
        super().__init__(store)
        self._orchestrator: CreateOrchestrator[OriginData] = CreateOrchestrator(
            EntitySubmitter(store, resource="origin"),
            tracker,
            entity_set=OriginData.entity_set,
            poll_interval=poll_interval,
            resource="origin",
        )

    @staticmethod
    def _build_draft(
        name: str | None,
        reserved_units: int,
        description: str | None,
        settings: OriginServiceSettings | None,
    ) -> OriginData:
        if reserved_units < 0:
            raise ValidationError("Origin reserved units cannot be negative")
        return OriginData(
            name=name,
            description=description,
            reserved_units=reserved_units,
            settings=serialize_settings(settings),
        )

    def create(
        self,
        name: str | None,
        reserved_units: int,
        description: str | None = None,
        settings: OriginServiceSettings | None = None,
        *,
        timeout: float | None = None,
        cancel_event: threading.Event | None = None,
    ) -> OriginData:
        """Create an origin and block until the service reports the outcome."""

        draft = self._build_draft(name, reserved_units, description, settings)
        return self._orchestrator.create(draft, timeout=timeout, cancel_event=cancel_event)

    async def create_async(
        self,
        name: str | None,
        reserved_units: int,
        description: str | None = None,
        settings: OriginServiceSettings | None = None,
        *,
        timeout: float | None = None,
    ) -> OriginData:
        draft = self._build_draft(name, reserved_units, description, settings)
        return await self._orchestrator.create_async(draft, timeout=timeout)

    def send_create_operation(
        self,
        name: str | None,
        reserved_units: int,
        description: str | None = None,
        settings: OriginServiceSettings | None = None,
    ) -> Operation[OriginData]:
        """Submit the create and return at once; track it via :class:`OperationCollection`."""

        draft = self._build_draft(name, reserved_units, description, settings)
        return self._orchestrator.send_create_operation(draft)

    async def send_create_operation_async(
        self,
        name: str | None,
        reserved_units: int,
        description: str | None = None,
        settings: OriginServiceSettings | None = None,
    ) -> Operation[OriginData]:
        draft = self._build_draft(name, reserved_units, description, settings)
        return await self._orchestrator.send_create_operation_async(draft)


class AssetCollection(EntityCollection[AssetData]):
    model = AssetData

    def create(
        self,
        name: str | None,
        options: AssetCreationOptions = AssetCreationOptions.NONE,
        storage_account_name: str | None = None,
    ) -> AssetData:
        draft = AssetData(name=name, options=options, storage_account_name=storage_account_name)
        return self._save(draft)

    async def create_async(
        self,
        name: str | None,
        options: AssetCreationOptions = AssetCreationOptions.NONE,
        storage_account_name: str | None = None,
    ) -> AssetData:
        return await asyncio.to_thread(self.create, name, options, storage_account_name)


class AssetFileCollection(EntityCollection[AssetFileData]):
    """Files belonging to one asset."""

    model = AssetFileData

    def __init__(self, store: EntityStore, asset: AssetData) -> None:
        super().__init__(store)
        if not asset.id:
            raise ValidationError("Asset must be created before files can be added to it")
        self._asset = asset

    def create(self, name: str | None) -> AssetFileData:
        ensure_name(name, "file")
        draft = AssetFileData(name=name, parent_asset_id=self._asset.id)
        return self._save(draft)

    async def create_async(self, name: str | None) -> AssetFileData:
        ensure_name(name, "file")
        return await asyncio.to_thread(self.create, name)

    def list(self) -> list[AssetFileData]:
        return [item for item in super().list() if item.parent_asset_id == self._asset.id]


class AccessPolicyCollection(EntityCollection[AccessPolicyData]):
    model = AccessPolicyData

    def create(
        self,
        name: str | None,
        duration: timedelta,
        permissions: AccessPermissions = AccessPermissions.READ,
    ) -> AccessPolicyData:
        if duration <= timedelta(0):
            raise ValidationError("Access policy duration must be positive")
        draft = AccessPolicyData(
            name=name,
            duration_in_minutes=duration.total_seconds() / 60,
            permissions=permissions,
        )
        return self._save(draft)

    async def create_async(
        self,
        name: str | None,
        duration: timedelta,
        permissions: AccessPermissions = AccessPermissions.READ,
    ) -> AccessPolicyData:
        return await asyncio.to_thread(self.create, name, duration, permissions)


class LocatorCollection(EntityCollection[LocatorData]):
    model = LocatorData

    def create_locator(
        self,
        locator_type: LocatorType,
        asset: AssetData | None,
        access_policy: AccessPolicyData | None,
        start_time: datetime | None = None,
        name: str | None = None,
    ) -> LocatorData:
        if asset is None or not asset.id:
            raise ValidationError("Locator requires a created asset")
        if access_policy is None or not access_policy.id:
            raise ValidationError("Locator requires a created access policy")
        draft = LocatorData(
            name=name,
            type=locator_type,
            asset_id=asset.id,
            access_policy_id=access_policy.id,
            start_time=start_time,
        )
        return self._save(draft)

    def create_sas_locator(
        self,
        asset: AssetData | None,
        access_policy: AccessPolicyData | None,
        start_time: datetime | None = None,
        name: str | None = None,
    ) -> LocatorData:
        return self.create_locator(LocatorType.SAS, asset, access_policy, start_time, name)

    async def create_locator_async(
        self,
        locator_type: LocatorType,
        asset: AssetData | None,
        access_policy: AccessPolicyData | None,
        start_time: datetime | None = None,
        name: str | None = None,
    ) -> LocatorData:
        return await asyncio.to_thread(self.create_locator, locator_type, asset, access_policy, start_time, name)

    async def create_sas_locator_async(
        self,
        asset: AssetData | None,
        access_policy: AccessPolicyData | None,
        start_time: datetime | None = None,
        name: str | None = None,
    ) -> LocatorData:
        return await self.create_locator_async(LocatorType.SAS, asset, access_policy, start_time, name)


class OperationCollection:
    """Status of operations started with ``send_create_operation``."""

    def __init__(self, tracker: OperationTracker) -> None:
        self._tracker = tracker

    def get(self, operation_id: str) -> Operation:
        return self._tracker.poll(operation_id)

    def wait(
        self,
        operation_id: str,
        *,
        target: RemoteEntity | None = None,
        poll_interval: float = StreamingConstants.OPERATION_POLL_INTERVAL,
        timeout: float | None = None,
        cancel_event: threading.Event | None = None,
    ) -> Operation:
        return self._tracker.wait_for_completion(
            operation_id,
            poll_interval,
            target=target,
            timeout=timeout,
            cancel_event=cancel_event,
        )
