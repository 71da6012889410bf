"""
Proxy Routes - Backend Request Forwarding
==========================================

Registers one FastAPI endpoint per entry of the route table. Every endpoint
follows the same flow:

1. Reject locally with 401 when the route needs a bearer credential and none is sent
2. Parse the JSON body for POST/PUT/PATCH (400 on malformed JSON), or keep
   the raw bytes and Content-Type for upload routes
3. Resolve the backend path from the route's target template
4. Hand the request snapshot to the BackendForwarder
5. Return the forwarder's status code and JSON body

Endpoints share no state; the forwarder comes from app state through a
dependency so its HTTP client follows the application lifespan.
"""

import json
import logging
from typing import Iterable, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse

from ..models import ProxyEnvelope, ProxyRequest
from .forwarder import BackendForwarder, failure_envelope
from .table import ROUTES, RouteSpec

logger = logging.getLogger(__name__)


# ============================================================================
# Dependencies
# ============================================================================

def get_forwarder(request: Request) -> BackendForwarder:
    """
    Dependency to get the backend forwarder from app state.

    Raises:
        HTTPException: 503 when the application lifespan has not set it up
    """
    forwarder: Optional[BackendForwarder] = getattr(request.app.state, "forwarder", None)
    if forwarder is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Backend client not available",
        )
    return forwarder


def raw_query_string(request: Request) -> str:
    """Query string exactly as received (``request.url`` is rebuilt from the decoded path)."""
    return request.scope.get("query_string", b"").decode("latin-1")


# ============================================================================
# Endpoint Factory
# ============================================================================

def make_endpoint(route: RouteSpec):
    """Build the request handler for one route table entry."""

    async def endpoint(
        request: Request,
        forwarder: BackendForwarder = Depends(get_forwarder),
    ) -> JSONResponse:
        authorization = request.headers.get("authorization")

        rejected = forwarder.check_access(route, authorization)
        if rejected is not None:
            return JSONResponse(status_code=rejected.status_code, content=rejected.body)

        body = None
        content = None
        content_type = None
        if route.raw_body:
            content = await request.body()
            content_type = request.headers.get("content-type")
        elif route.has_body:
            raw = await request.body()
            if raw:
                try:
                    body = json.loads(raw)
                except ValueError:
                    logger.warning("Malformed JSON body", extra={"route": route.name})
                    return JSONResponse(
                        status_code=status.HTTP_400_BAD_REQUEST,
                        content=failure_envelope(route, "Invalid JSON body"),
                    )

        proxy_request = ProxyRequest(
            method=route.method,
            path=route.resolve_target(request.path_params),
            query=raw_query_string(request),
            body=body,
            authorization=authorization,
            content=content,
            content_type=content_type,
        )

        result = await forwarder.forward(route, proxy_request)
        return JSONResponse(status_code=result.status_code, content=result.body)

    endpoint.__name__ = route.name
    return endpoint


def build_proxy_router(routes: Iterable[RouteSpec] = ROUTES) -> APIRouter:
    """
    Create an APIRouter with one endpoint per route table entry.

    Args:
        routes: Route table entries, in matching order

    Returns:
        APIRouter ready to be mounted under /api
    """
    router = APIRouter()
    for route in routes:
        error_responses = {
            status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ProxyEnvelope},
        }
        if route.auth_required:
            error_responses[status.HTTP_401_UNAUTHORIZED] = {"model": ProxyEnvelope}

        router.add_api_route(
            route.path,
            make_endpoint(route),
            methods=[route.method],
            name=route.name,
            response_class=JSONResponse,
            responses=error_responses,
        )
    return router


proxy_router = build_proxy_router()
