"""
Backend Forwarder
=================

Turns an inbound request snapshot into one backend call and maps the outcome
onto the public envelope contract:

1. Transport failure (DNS, connection refused, timeout) -> 500 envelope
2. Backend non-2xx -> backend status and JSON body relayed as-is
3. Backend 2xx -> body relayed verbatim, or wrapped as
   ``{"success": true, "<field>": body[source_field]}``

Auth-required routes are rejected with 401 before any network call when no
bearer credential is present. Nothing is retried; the forwarder holds no
per-request state and can be shared across concurrent requests.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from ..models import ProxyRequest, ProxyResult
from .table import ResponseMode, RouteSpec

logger = logging.getLogger(__name__)


CONNECT_FAILURE_MESSAGE = "Failed to connect to backend"
INVALID_RESPONSE_MESSAGE = "Invalid response from backend"
AUTH_REQUIRED_MESSAGE = "Authorization header required"


def has_bearer_credential(authorization: Optional[str]) -> bool:
    """True for a non-empty ``Bearer <token>`` header value."""
    if not authorization:
        return False
    scheme, _, token = authorization.strip().partition(" ")
    return scheme.lower() == "bearer" and bool(token.strip())


def failure_envelope(route: RouteSpec, error: str) -> Dict[str, Any]:
    """Envelope with ``success: false`` and the route's typed empty payload."""
    return {
        "success": False,
        "error": error,
        route.field: route.empty_payload(),
    }


class BackendForwarder:
    """
    Forwards proxied requests to the backend API.

    Args:
        client: HTTP client owned by the application lifespan
        base_url: Backend base URL, e.g. ``http://localhost:5000/api``
    """

    def __init__(self, client: httpx.AsyncClient, base_url: str):
        self._client = client
        self._base_url = base_url.rstrip("/")

    @property
    def base_url(self) -> str:
        return self._base_url

    def build_target_url(self, path: str, query: str = "") -> str:
        """
        Concatenate base URL, resource path and the inbound query string.

        The query string is copied verbatim so parameter order and encoding
        reach the backend unchanged.
        """
        url = f"{self._base_url}/{path.lstrip('/')}"
        if query:
            url = f"{url}?{query}"
        return url

    @staticmethod
    def build_headers(
        authorization: Optional[str],
        content_type: Optional[str] = None,
    ) -> Dict[str, str]:
        """JSON content type unless a raw body brings its own (multipart boundary)."""
        headers = {"Content-Type": content_type or "application/json"}
        if authorization:
            headers["Authorization"] = authorization
        return headers

    def check_access(self, route: RouteSpec, authorization: Optional[str]) -> Optional[ProxyResult]:
        """Return a 401 result when the route needs a credential that is missing."""
        if route.auth_required and not has_bearer_credential(authorization):
            logger.info("Rejected unauthenticated request", extra={"route": route.name})
            return ProxyResult(401, failure_envelope(route, AUTH_REQUIRED_MESSAGE))
        return None

    async def forward(self, route: RouteSpec, request: ProxyRequest) -> ProxyResult:
        """
        Forward one request and normalize the outcome.

        Local checks (credential, route validation) run first and never
        reach the backend.

        Args:
            route: Route configuration
            request: Inbound request snapshot with the backend path resolved

        Returns:
            ProxyResult carrying the status code and JSON body for the caller
        """
        rejected = self.check_access(route, request.authorization)
        if rejected is not None:
            return rejected

        if route.validate is not None:
            rejection = route.validate(request)
            if rejection is not None:
                status_code, message = rejection
                return ProxyResult(status_code, failure_envelope(route, message))

        target_url = self.build_target_url(request.path, request.query)
        request_kwargs: Dict[str, Any] = {
            "headers": self.build_headers(request.authorization, request.content_type),
        }
        if route.raw_body:
            if request.content:
                request_kwargs["content"] = request.content
        elif route.has_body and request.body is not None:
            request_kwargs["json"] = request.body

        logger.info(
            f"Forwarding {request.method} to backend",
            extra={
                "route": route.name,
                "method": request.method,
                "target_url": target_url,
                "has_body": "json" in request_kwargs or "content" in request_kwargs,
            },
        )

        try:
            response = await self._client.request(request.method, target_url, **request_kwargs)
        except httpx.TransportError as e:
            logger.error(
                f"Backend request failed: {type(e).__name__}: {e}",
                extra={"route": route.name, "target_url": target_url},
            )
            return ProxyResult(500, failure_envelope(route, CONNECT_FAILURE_MESSAGE))

        if not response.is_success:
            return self._relay_rejection(route, response)

        status_code = response.status_code
        if not response.content:
            # 204 and other empty successes; JSON responses cannot be bodiless
            status_code, body = 200, {"success": True}
        else:
            try:
                body = response.json()
            except ValueError:
                logger.error(
                    "Backend returned a non-JSON body",
                    extra={"route": route.name, "status_code": response.status_code},
                )
                return ProxyResult(500, failure_envelope(route, INVALID_RESPONSE_MESSAGE))

        if route.mode is ResponseMode.WRAP:
            body = self._wrap(route, body)

        if route.transform is not None:
            body = route.transform(body)

        return ProxyResult(status_code, body)

    def _relay_rejection(self, route: RouteSpec, response: httpx.Response) -> ProxyResult:
        logger.warning(
            f"Backend rejected request: {response.status_code}",
            extra={"route": route.name, "status_code": response.status_code},
        )
        try:
            body = response.json()
        except ValueError:
            body = None

        if not isinstance(body, dict):
            body = failure_envelope(route, f"Backend API error: {response.status_code}")

        return ProxyResult(response.status_code, body)

    @staticmethod
    def _wrap(route: RouteSpec, body: Any) -> Dict[str, Any]:
        payload = body.get(route.source_field) if isinstance(body, dict) else None
        if payload is None:
            payload = route.empty_payload()
        return {"success": True, route.field: payload}
