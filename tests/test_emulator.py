from __future__ import annotations

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from mediaservices import ClientSettings, OperationFailedError, create_context
from mediaservices.emulator import create_app
from mediaservices.infrastructure import InMemoryEntityStore


@pytest.fixture()
def emulator_store() -> InMemoryEntityStore:
    return InMemoryEntityStore()


@pytest.fixture()
def media(emulator_store):
    app = create_app(emulator_store)
    with TestClient(app) as http_client:
        settings = ClientSettings(api_base="http://testserver", origin_poll_interval=0.0)
        with create_context(settings, http_client=http_client) as context:
            yield context


def test_origin_round_trip_through_emulator(media, emulator_store):
    emulator_store.script_operation(
        "InProgress",
        "Succeeded",
        operation_id="op-42",
        on_success=lambda row: row.update(State="Stopped"),
    )

    origin = media.origins.create("vod-origin-1", 2)

    assert origin.state == "Stopped"
    assert origin.reserved_units == 2
    assert emulator_store.operation_polls("op-42") == 2
    assert [item.id for item in media.origins.list()] == [origin.id]


def test_failed_origin_through_emulator(media, emulator_store):
    emulator_store.script_operation("Failed", operation_id="op-13", error_message="quota exceeded")

    with pytest.raises(OperationFailedError) as excinfo:
        media.origins.create("vod-origin-1", 2)

    assert excinfo.value.operation_id == "op-13"
    assert excinfo.value.error_message == "quota exceeded"


def test_asset_publishing_through_emulator(media):
    asset = media.assets.create("trailer")
    media.asset_files(asset).create("trailer.mp4")
    policy = media.access_policies.create("read", timedelta(hours=2))
    locator = media.locators.create_sas_locator(asset, policy)

    assert media.assets.get(asset.id).name == "trailer"
    assert [item.name for item in media.asset_files(asset).list()] == ["trailer.mp4"]
    assert policy.duration_in_minutes == 120
    assert locator.asset_id == asset.id


def test_emulator_rejects_unknown_sets(emulator_store):
    with TestClient(create_app(emulator_store)) as client:
        assert client.get("/Channels").status_code == 404
        assert client.get("/Operations('missing')").status_code == 404
        assert client.get("/").json()["message"] == "Media Services Emulator"


def test_ids_with_quotes_resolve_through_emulator(media, emulator_store):
    from mediaservices.core.schema import AssetData

    emulator_store.insert("Assets", AssetData(id="director's-cut", name="feature"))

    asset = media.assets.get("director's-cut")

    assert asset.id == "director's-cut"
    assert asset.name == "feature"
