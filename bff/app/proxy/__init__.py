"""
Proxy Package
=============

This package implements the /api endpoints that forward browser requests
to the marketplace backend.

Main Components:
----------------
- table.py: Declarative route table (path, verb, target, auth, envelope shape)
- forwarder.py: BackendForwarder, the single forwarding function behind every route
- routes.py: FastAPI router built from the route table

Usage:
------
    from bff.app.proxy import proxy_router
    app.include_router(proxy_router, prefix="/api")
"""

from .forwarder import BackendForwarder
from .routes import build_proxy_router, proxy_router
from .table import ROUTES, ResponseMode, RouteSpec

__all__ = [
    "BackendForwarder",
    "ROUTES",
    "ResponseMode",
    "RouteSpec",
    "build_proxy_router",
    "proxy_router",
]
