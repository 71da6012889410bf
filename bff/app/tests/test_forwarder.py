"""
Unit Tests for BackendForwarder
================================

Exercises the forwarder directly, without FastAPI in the loop.

Run tests:
----------
    pytest bff/app/tests/test_forwarder.py -v
"""

import asyncio
import json

import httpx
import pytest
import pytest_asyncio

from bff.app.models import ProxyRequest
from bff.app.proxy.forwarder import BackendForwarder, failure_envelope, has_bearer_credential
from bff.app.proxy.table import ResponseMode, RouteSpec
from conftest import BACKEND_API_URL, BackendStub


@pytest.fixture
def stub():
    return BackendStub()


@pytest_asyncio.fixture
async def forwarder(stub):
    async with httpx.AsyncClient(transport=httpx.MockTransport(stub)) as client:
        yield BackendForwarder(client, BACKEND_API_URL + "/")


LIST_ROUTE = RouteSpec("widgets", "/widgets", "GET", "/widgets")
COUNT_ROUTE = RouteSpec("widgets_count", "/widgets/count", "GET", "/widgets/count",
                        mode=ResponseMode.WRAP, source_field="count", empty=0)
PRIVATE_ROUTE = RouteSpec("private", "/private", "POST", "/private",
                          auth_required=True, empty={})


# ============================================================================
# Helper Tests
# ============================================================================

@pytest.mark.parametrize(
    "value, expected",
    [
        ("Bearer abc", True),
        ("bearer abc", True),
        ("Bearer", False),
        ("Bearer   ", False),
        ("Token abc", False),
        ("", False),
        (None, False),
    ],
)
def test_has_bearer_credential(value, expected):
    assert has_bearer_credential(value) is expected


def test_failure_envelope_gets_fresh_default():
    first = failure_envelope(PRIVATE_ROUTE, "boom")
    first["data"]["mutated"] = True

    assert failure_envelope(PRIVATE_ROUTE, "boom") == {"success": False, "error": "boom", "data": {}}


def test_build_target_url():
    forwarder = BackendForwarder(client=None, base_url="http://api.test/api/")

    assert forwarder.base_url == "http://api.test/api"
    assert forwarder.build_target_url("/agents/top") == "http://api.test/api/agents/top"
    assert forwarder.build_target_url("agents", "limit=6") == "http://api.test/api/agents?limit=6"


def test_build_headers():
    assert BackendForwarder.build_headers(None) == {"Content-Type": "application/json"}
    assert BackendForwarder.build_headers("Bearer t") == {
        "Content-Type": "application/json",
        "Authorization": "Bearer t",
    }
    assert BackendForwarder.build_headers(None, "multipart/form-data; boundary=xyz") == {
        "Content-Type": "multipart/form-data; boundary=xyz",
    }


# ============================================================================
# Forwarding Tests
# ============================================================================

@pytest.mark.asyncio
async def test_forward_relays_success(forwarder, stub):
    stub.respond(200, json={"success": True, "data": [1, 2]})

    result = await forwarder.forward(LIST_ROUTE, ProxyRequest("GET", "/widgets", query="a=1"))

    assert result.status_code == 200
    assert result.body == {"success": True, "data": [1, 2]}
    assert str(stub.last_request.url) == f"{BACKEND_API_URL}/widgets?a=1"


@pytest.mark.asyncio
async def test_forward_wraps_payload(forwarder, stub):
    stub.respond(200, json={"count": 3, "extra": "ignored"})

    result = await forwarder.forward(COUNT_ROUTE, ProxyRequest("GET", "/widgets/count"))

    assert result.body == {"success": True, "data": 3}


@pytest.mark.asyncio
async def test_forward_wraps_non_object_body_as_empty(forwarder, stub):
    stub.respond(200, json=[1, 2, 3])

    result = await forwarder.forward(COUNT_ROUTE, ProxyRequest("GET", "/widgets/count"))

    assert result.body == {"success": True, "data": 0}


@pytest.mark.asyncio
async def test_forward_rejects_missing_credential_without_calling_backend(forwarder, stub):
    result = await forwarder.forward(PRIVATE_ROUTE, ProxyRequest("POST", "/private", body={"a": 1}))

    assert result.status_code == 401
    assert result.body == {"success": False, "error": "Authorization header required", "data": {}}
    assert stub.requests == []


@pytest.mark.asyncio
async def test_forward_sends_body_and_credential(forwarder, stub):
    request = ProxyRequest("POST", "/private", body={"a": [1, {"b": None}]}, authorization="Bearer xyz")

    await forwarder.forward(PRIVATE_ROUTE, request)

    sent = stub.last_request
    assert sent.headers["Authorization"] == "Bearer xyz"
    assert json.loads(sent.content) == {"a": [1, {"b": None}]}


@pytest.mark.asyncio
async def test_forward_runs_local_validation_first(forwarder, stub):
    route = RouteSpec("guarded", "/guarded", "GET", "/guarded",
                      validate=lambda request: (403, "nope"))

    result = await forwarder.forward(route, ProxyRequest("GET", "/guarded"))

    assert result.status_code == 403
    assert result.body == {"success": False, "error": "nope", "data": []}
    assert stub.requests == []


@pytest.mark.asyncio
async def test_transform_skipped_on_rejection(forwarder, stub):
    route = RouteSpec("tagged", "/tagged", "GET", "/tagged",
                      transform=lambda body: {**body, "tagged": True})
    stub.respond(409, json={"success": False, "message": "conflict"})

    result = await forwarder.forward(route, ProxyRequest("GET", "/tagged"))

    assert result.status_code == 409
    assert "tagged" not in result.body


@pytest.mark.asyncio
@pytest.mark.parametrize("exc_type", [httpx.ConnectError, httpx.ConnectTimeout, httpx.ReadTimeout])
async def test_transport_errors_map_to_500(forwarder, stub, exc_type):
    stub.fail(exc_type)

    result = await forwarder.forward(LIST_ROUTE, ProxyRequest("GET", "/widgets"))

    assert result.status_code == 500
    assert result.body == {"success": False, "error": "Failed to connect to backend", "data": []}


@pytest.mark.asyncio
async def test_rejection_with_json_list_body_is_enveloped(forwarder, stub):
    stub.respond(400, json=["bad"])

    result = await forwarder.forward(LIST_ROUTE, ProxyRequest("GET", "/widgets"))

    assert result.status_code == 400
    assert result.body["error"] == "Backend API error: 400"


@pytest.mark.asyncio
async def test_concurrent_forwards_are_independent(forwarder, stub):
    stub.handler = lambda request: httpx.Response(
        200, json={"success": True, "data": request.url.params["n"]}
    )

    results = await asyncio.gather(*[
        forwarder.forward(LIST_ROUTE, ProxyRequest("GET", "/widgets", query=f"n={n}"))
        for n in range(10)
    ])

    assert [r.body["data"] for r in results] == [str(n) for n in range(10)]
