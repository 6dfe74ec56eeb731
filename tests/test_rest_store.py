from __future__ import annotations

import json

import httpx
import pytest

from mediaservices import (
    ClientSettings,
    MediaContext,
    OperationFailedError,
    ProtocolError,
    create_context,
)
from mediaservices.application import OperationTracker
from mediaservices.infrastructure import RestEntityStore

API_BASE = "https://media.example.test/api/"


class FakeService:
    """Answers the REST calls for a single origin create."""

    def __init__(self, operation_states: list[dict]) -> None:
        self.operation_states = list(operation_states)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if request.method == "POST" and path == "/api/Origins":
            body = json.loads(request.content.decode("utf-8"))
            return httpx.Response(
                202,
                headers={"Operation-Id": "op-42"},
                json={"d": {**body, "Id": "nb:oid:UUID:1", "State": "Creating"}},
            )
        if request.method == "GET" and path == "/api/Operations('op-42')":
            return httpx.Response(200, json=self.operation_states.pop(0))
        if request.method == "GET" and path == "/api/Origins('nb:oid:UUID:1')":
            return httpx.Response(
                200,
                json={
                    "Id": "nb:oid:UUID:1",
                    "Name": "vod-origin-1",
                    "ReservedUnits": 2,
                    "State": "Stopped",
                    "HostName": "vod-origin-1.origin.example.net",
                    "Created": "2024-05-01T10:00:00Z",
                },
            )
        return httpx.Response(404, json={"error": {"message": f"no route for {path}"}})


def _context(handler, *, token: str | None = "secret-token") -> tuple[MediaContext, list[float]]:
    sleeps: list[float] = []
    http_client = httpx.Client(transport=httpx.MockTransport(handler))
    store = RestEntityStore(API_BASE, access_token=token, http_client=http_client)
    tracker = OperationTracker(store, sleep=sleeps.append)
    return MediaContext(store, tracker=tracker, origin_poll_interval=10.0), sleeps


def test_create_origin_over_http():
    service = FakeService(
        [
            {"Id": "op-42", "State": "InProgress"},
            {"d": {"Id": "op-42", "State": "InProgress"}},
            {"Id": "op-42", "State": "Succeeded"},
        ]
    )
    context, sleeps = _context(service)

    origin = context.origins.create("vod-origin-1", 2, "video on demand")

    assert origin.id == "nb:oid:UUID:1"
    assert origin.reserved_units == 2
    assert origin.state == "Stopped"
    assert origin.created is not None
    assert sleeps == [10.0, 10.0]
    assert [(r.method, r.url.path) for r in service.requests] == [
        ("POST", "/api/Origins"),
        ("GET", "/api/Operations('op-42')"),
        ("GET", "/api/Operations('op-42')"),
        ("GET", "/api/Operations('op-42')"),
        ("GET", "/api/Origins('nb:oid:UUID:1')"),
    ]

    create_request = service.requests[0]
    assert json.loads(create_request.content) == {
        "Name": "vod-origin-1",
        "Description": "video on demand",
        "ReservedUnits": 2,
    }
    assert create_request.headers["Authorization"] == "Bearer secret-token"
    assert create_request.headers["x-ms-version"] == "2.19"
    assert create_request.headers["DataServiceVersion"] == "3.0"
    assert create_request.headers["Accept"] == "application/json"


def test_failed_operation_over_http():
    service = FakeService(
        [
            {"Id": "op-42", "State": "InProgress"},
            {"Id": "op-42", "State": "InProgress"},
            {"Id": "op-42", "State": "Failed", "ErrorCode": "409", "ErrorMessage": "quota exceeded"},
        ]
    )
    context, _ = _context(service, token=None)

    with pytest.raises(OperationFailedError) as excinfo:
        context.origins.create("vod-origin-1", 2)

    assert excinfo.value.operation_id == "op-42"
    assert excinfo.value.error_message == "quota exceeded"
    assert "Authorization" not in service.requests[0].headers


def test_send_create_operation_over_http_reads_header():
    service = FakeService([])
    context, _ = _context(service)

    operation = context.origins.send_create_operation("vod-origin-1", 2)

    assert operation.id == "op-42"
    assert operation.state == "InProgress"
    assert operation.target.id == "nb:oid:UUID:1"
    assert len(service.requests) == 1


def test_missing_header_over_http():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(202, json={"Id": "nb:oid:UUID:2"})

    context, _ = _context(handler)

    with pytest.raises(ProtocolError):
        context.origins.send_create_operation("vod-origin-1", 2)


def test_http_errors_propagate_without_polling():
    calls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.path)
        return httpx.Response(500, json={"error": {"message": "boom"}})

    context, _ = _context(handler)

    with pytest.raises(httpx.HTTPStatusError):
        context.origins.create("vod-origin-1", 2)
    assert calls == ["/api/Origins"]


def test_operation_without_state_is_a_protocol_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"Id": "op-1"})

    context, _ = _context(handler)

    with pytest.raises(ProtocolError):
        context.operations.get("op-1")


def test_list_accepts_verbose_and_light_payloads():
    payloads = [
        {"value": [{"Id": "nb:cid:1", "Name": "a", "Options": 1}]},
        {"d": {"results": [{"Id": "nb:cid:2", "Name": "b", "Options": 0}]}},
    ]

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/Assets"
        return httpx.Response(200, json=payloads.pop(0))

    context, _ = _context(handler)

    first = context.assets.list()
    second = context.assets.list()

    assert [asset.name for asset in first] == ["a"]
    assert first[0].options == 1
    assert [asset.id for asset in second] == ["nb:cid:2"]


def test_api_base_must_be_absolute():
    with pytest.raises(ValueError):
        RestEntityStore("media.example.test/api")


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("MEDIASERVICES_API_BASE", API_BASE)
    monkeypatch.setenv("MEDIASERVICES_ACCESS_TOKEN", "env-token")
    monkeypatch.setenv("MEDIASERVICES_POLL_INTERVAL", "2.5")
    monkeypatch.delenv("MEDIASERVICES_API_VERSION", raising=False)

    settings = ClientSettings.from_env()

    assert settings.api_base == API_BASE
    assert settings.access_token == "env-token"
    assert settings.api_version == "2.19"
    assert settings.origin_poll_interval == 2.5


def test_create_context_requires_api_base(monkeypatch):
    monkeypatch.delenv("MEDIASERVICES_API_BASE", raising=False)

    with pytest.raises(ValueError):
        create_context()


def test_injected_client_is_left_open():
    http_client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(200, json={})))

    with create_context(ClientSettings(api_base=API_BASE), http_client=http_client):
        pass

    assert not http_client.is_closed
    http_client.close()
