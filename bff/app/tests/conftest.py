"""
Shared fixtures for BFF tests.

Backend calls are served by ``httpx.MockTransport`` wrapping a BackendStub,
which records every request the forwarder sends and answers with whatever
the test configured.
"""

import re
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from bff.app.config import Settings
from bff.app.main import create_app
from bff.app.proxy.table import RouteSpec

BACKEND_API_URL = "http://backend.test/api"


class BackendStub:
    """Callable handler for httpx.MockTransport that records requests."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.handler: Callable[[httpx.Request], httpx.Response] = (
            lambda request: httpx.Response(200, json={"success": True, "data": []})
        )

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    def respond(self, status_code: int = 200, **kwargs) -> None:
        self.handler = lambda request: httpx.Response(status_code, **kwargs)

    def fail(self, exc_type=httpx.ConnectError, message: str = "Connection refused") -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise exc_type(message, request=request)

        self.handler = handler

    @property
    def last_request(self) -> httpx.Request:
        assert self.requests, "backend was not called"
        return self.requests[-1]


@pytest.fixture
def settings():
    """Settings pointing at the stub backend, without payment credentials"""
    return Settings(
        _env_file=None,
        BACKEND_API_URL=BACKEND_API_URL,
        STRIPE_SECRET_KEY=None,
        ALLOWED_ORIGINS="http://localhost:3000",
    )


@pytest.fixture
def backend():
    return BackendStub()


@pytest.fixture
def app(settings, backend):
    return create_app(settings=settings, transport=httpx.MockTransport(backend))


@pytest.fixture
def client(app):
    """Test client with the lifespan running (backend client opened)"""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers():
    return {"Authorization": "Bearer test-token-123"}


# ============================================================================
# Helpers
# ============================================================================

def concrete_path(route: RouteSpec, value: str = "abc123") -> str:
    """Local /api URL for a route with every path parameter filled in."""
    return "/api" + re.sub(r"\{[^}]+\}", value, route.path)


def valid_request_kwargs(route: RouteSpec, headers: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    """Request kwargs that pass the route's local validation."""
    kwargs: Dict[str, Any] = {"headers": dict(headers or {})}

    if route.name == "messages":
        kwargs["params"] = {"userId": "user-1", "userRole": "buyer"}
    elif route.name == "messages_send":
        kwargs["json"] = {
            "senderId": "user-1",
            "senderRole": "buyer",
            "recipientId": "agent-1",
            "recipientRole": "agent",
            "messageText": "Is the property still available?",
        }
    elif route.name == "message_thread_read":
        kwargs["json"] = {"userId": "user-1"}
    elif route.raw_body:
        kwargs["data"] = {"title": "Sunny 2BR Flat"}
        kwargs["files"] = {"images": ("front.jpg", b"jpeg-bytes", "image/jpeg")}
    elif route.has_body:
        kwargs["json"] = {"propertyId": "prop-1"}

    return kwargs
