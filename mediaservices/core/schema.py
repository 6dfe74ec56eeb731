from __future__ import annotations

from datetime import datetime
from enum import IntEnum, IntFlag
from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr
from pydantic.alias_generators import to_pascal

from mediaservices.core.constants import EntitySets
from mediaservices.core.errors import MediaServicesError

if TYPE_CHECKING:
    from mediaservices.infrastructure.store import DataContext


class AssetCreationOptions(IntFlag):
    NONE = 0
    STORAGE_ENCRYPTED = 1
    COMMON_ENCRYPTION_PROTECTED = 2
    ENVELOPE_ENCRYPTION_PROTECTED = 4


class AccessPermissions(IntFlag):
    NONE = 0
    READ = 1
    WRITE = 2
    DELETE = 4
    LIST = 8


class LocatorType(IntEnum):
    NONE = 0
    SAS = 1
    ON_DEMAND_ORIGIN = 2


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_pascal, populate_by_name=True)


class IPRange(_WireModel):
    name: str | None = None
    address: str
    subnet_prefix_length: int = 32


class EndpointSettings(_WireModel):
    max_age: int | None = Field(default=None, ge=0)
    ip_allow_list: list[IPRange] | None = None


class OriginServiceSettings(_WireModel):
    """Settings stored on an origin as an opaque serialized blob."""

    playback: EndpointSettings | None = None
    ingest: EndpointSettings | None = None


def serialize_settings(settings: OriginServiceSettings | None) -> str | None:
    """Serialise origin settings into the blob sent to the service."""

    if settings is None:
        return None
    return settings.model_dump_json(by_alias=True, exclude_none=True)


def deserialize_settings(blob: str | None) -> OriginServiceSettings | None:
    if not blob:
        return None
    return OriginServiceSettings.model_validate_json(blob)


class RemoteEntity(_WireModel):
    """Base for entities living in a remote entity set.

    A draft is built locally, bound to the data context that saves it and
    refreshed through that context once the service has accepted it.
    """

    entity_set: ClassVar[str]
    server_fields: ClassVar[frozenset[str]] = frozenset({"id", "state", "created", "last_modified"})

    id: str | None = None

    _context: Any = PrivateAttr(default=None)

    def init_context(self, context: DataContext) -> None:
        self._context = context

    @property
    def context(self) -> DataContext | None:
        return self._context

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON body used to create this entity."""

        return self.model_dump(
            mode="json",
            by_alias=True,
            exclude_none=True,
            exclude=set(self.server_fields),
        )

    def apply(self, payload: dict[str, Any]) -> None:
        """Overwrite local fields with a server representation."""

        fresh = type(self).model_validate(payload)
        for field_name in type(self).model_fields:
            if field_name in fresh.model_fields_set:
                setattr(self, field_name, getattr(fresh, field_name))

    def refresh(self) -> None:
        if self._context is None:
            raise MediaServicesError(f"{type(self).__name__} is not bound to a data context")
        self._context.refresh(self)


class OriginData(RemoteEntity):
    entity_set: ClassVar[str] = EntitySets.ORIGINS
    server_fields: ClassVar[frozenset[str]] = RemoteEntity.server_fields | {"host_name"}

    name: str | None = None
    description: str | None = None
    reserved_units: int = Field(default=0, ge=0)
    settings: str | None = None
    state: str | None = None
    host_name: str | None = None
    created: datetime | None = None
    last_modified: datetime | None = None

    @property
    def service_settings(self) -> OriginServiceSettings | None:
        return deserialize_settings(self.settings)


class AssetData(RemoteEntity):
    entity_set: ClassVar[str] = EntitySets.ASSETS

    name: str | None = None
    options: AssetCreationOptions = AssetCreationOptions.NONE
    storage_account_name: str | None = None
    state: int | None = None
    created: datetime | None = None
    last_modified: datetime | None = None


class AssetFileData(RemoteEntity):
    entity_set: ClassVar[str] = EntitySets.FILES

    name: str | None = None
    parent_asset_id: str | None = None
    is_primary: bool = False
    content_file_size: int | None = None
    mime_type: str | None = None
    created: datetime | None = None
    last_modified: datetime | None = None


class AccessPolicyData(RemoteEntity):
    entity_set: ClassVar[str] = EntitySets.ACCESS_POLICIES

    name: str | None = None
    duration_in_minutes: float | None = None
    permissions: AccessPermissions = AccessPermissions.READ
    created: datetime | None = None
    last_modified: datetime | None = None


class LocatorData(RemoteEntity):
    entity_set: ClassVar[str] = EntitySets.LOCATORS
    server_fields: ClassVar[frozenset[str]] = RemoteEntity.server_fields | {"path", "expiration_date_time"}

    name: str | None = None
    type: LocatorType = LocatorType.SAS
    asset_id: str | None = None
    access_policy_id: str | None = None
    start_time: datetime | None = None
    expiration_date_time: datetime | None = None
    path: str | None = None


ENTITY_MODELS: dict[str, type[RemoteEntity]] = {
    model.entity_set: model
    for model in (OriginData, AssetData, AssetFileData, AccessPolicyData, LocatorData)
}
