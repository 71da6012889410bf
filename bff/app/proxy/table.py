"""
Route Table
===========

Declarative description of every proxied route. Each entry names the local
path (relative to the /api mount), the backend target, the HTTP verb and how
the backend's answer is turned into the public response.

Path and target are templates that share parameter names, e.g.
``/seller/{seller_id}/listings`` -> ``/sellers/{seller_id}/listings``.

Order matters: FastAPI matches routes in registration order, so static
segments (``/agents/top``) come before parameterised siblings
(``/agents/{agent_id}``).
"""

import copy
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple
from urllib.parse import parse_qs, quote

from ..models import ProxyRequest


BODIED_METHODS = frozenset({"POST", "PUT", "PATCH"})

# (status_code, message) returned by a route's local validation
Rejection = Tuple[int, str]


class ResponseMode(str, Enum):
    """How a 2xx backend body becomes the public response."""
    RELAY = "relay"
    WRAP = "wrap"


@dataclass(frozen=True)
class RouteSpec:
    """
    One proxied route.

    Attributes:
        name: Unique route name (used for logging and FastAPI route names)
        path: Local path template under /api
        method: HTTP verb
        target: Backend path template, relative to the backend base URL
        auth_required: Reject with 401 locally when no bearer credential is sent
        mode: RELAY returns the backend body verbatim, WRAP builds
            ``{success: true, <field>: body[source_field]}``
        source_field: Backend key read in WRAP mode
        empty: Typed empty default for the payload field on failure
        field: Public payload field name
        transform: Optional rewrite of a successful response body
        validate: Optional local check run before forwarding
        raw_body: Forward the inbound body bytes and Content-Type untouched
            (multipart uploads) instead of re-serialising JSON
    """
    name: str
    path: str
    method: str
    target: str
    auth_required: bool = False
    mode: ResponseMode = ResponseMode.RELAY
    source_field: str = "data"
    empty: Any = ()
    field: str = "data"
    transform: Optional[Callable[[Any], Any]] = None
    validate: Optional[Callable[[ProxyRequest], Optional[Rejection]]] = None
    raw_body: bool = False

    @property
    def has_body(self) -> bool:
        return self.method in BODIED_METHODS

    def empty_payload(self) -> Any:
        """Fresh copy of the empty default (tuples become lists)."""
        if isinstance(self.empty, tuple):
            return list(self.empty)
        return copy.deepcopy(self.empty)

    def resolve_target(self, path_params: Dict[str, str]) -> str:
        """Fill the target template with each value escaped as one path segment."""
        return self.target.format(**{
            name: escape_segment(value) for name, value in path_params.items()
        })


def escape_segment(value: str) -> str:
    """
    Percent-encode a path parameter so it stays a single segment.

    Example:
        >>> escape_segment("x?role=admin")
        'x%3Frole%3Dadmin'
        >>> escape_segment("..")
        '%2E%2E'
    """
    segment = quote(str(value), safe="")
    if segment in (".", ".."):
        segment = segment.replace(".", "%2E")
    return segment


# ============================================================================
# Response Transforms
# ============================================================================

def with_ids(record: Any) -> Any:
    """Give a record matching ``id`` and ``_id`` keys."""
    if not isinstance(record, dict):
        return record
    identifier = record.get("id") or record.get("_id")
    return {**record, "_id": identifier, "id": identifier}


def with_user_status(record: Any) -> Any:
    """Derive the account status shown on admin user screens."""
    record = with_ids(record)
    if not isinstance(record, dict):
        return record

    if record.get("isSuspended"):
        status = "suspended"
    elif record.get("isActive"):
        status = "active"
    else:
        status = "inactive"

    return {
        **record,
        "status": status,
        "totalTransactions": record.get("totalTransactions") or 0,
    }


def map_data(fn: Callable[[Any], Any]) -> Callable[[Any], Any]:
    """
    Build a body transform applying ``fn`` to the records in ``body["data"]``.

    Only successful envelopes with a payload are touched; anything else is
    returned unchanged.
    """
    def transform(body: Any) -> Any:
        if not isinstance(body, dict) or not body.get("success") or not body.get("data"):
            return body
        data = body["data"]
        if isinstance(data, list):
            return {**body, "data": [fn(item) for item in data]}
        return {**body, "data": fn(data)}

    return transform


def zero_filled(defaults: Dict[str, Any]) -> Callable[[Any], Any]:
    """Build a transform that fills missing or null stats in ``body["data"]``."""
    def transform(body: Any) -> Any:
        if not isinstance(body, dict):
            return body
        payload = body.get("data")
        if not isinstance(payload, dict):
            payload = {}
        filled = {**payload}
        for key, default in defaults.items():
            filled[key] = payload.get(key) or default
        return {**body, "data": filled}

    return transform


# ============================================================================
# Local Validation
# ============================================================================

FORBIDDEN_ROLE_PAIRS = frozenset({("buyer", "seller"), ("seller", "buyer")})
ALLOWED_ROLE_PAIRS = frozenset({
    ("buyer", "agent"),
    ("agent", "buyer"),
    ("agent", "seller"),
    ("seller", "agent"),
    ("agent", "agent"),
})


def messaging_allowed(sender_role: Optional[str], recipient_role: Optional[str]) -> bool:
    """Buyers and sellers may only talk through an agent."""
    if (sender_role, recipient_role) in FORBIDDEN_ROLE_PAIRS:
        return False
    return (sender_role, recipient_role) in ALLOWED_ROLE_PAIRS


def require_query(*names: str) -> Callable[[ProxyRequest], Optional[Rejection]]:
    def validate(request: ProxyRequest) -> Optional[Rejection]:
        params = parse_qs(request.query)
        missing = [name for name in names if not params.get(name, [""])[0]]
        if missing:
            return 400, f"Missing required query parameter: {', '.join(missing)}"
        return None

    return validate


def require_body_fields(*names: str) -> Callable[[ProxyRequest], Optional[Rejection]]:
    def validate(request: ProxyRequest) -> Optional[Rejection]:
        body = request.body if isinstance(request.body, dict) else {}
        missing = [name for name in names if not body.get(name)]
        if missing:
            return 400, f"Missing required field: {', '.join(missing)}"
        return None

    return validate


def validate_new_message(request: ProxyRequest) -> Optional[Rejection]:
    rejection = require_body_fields("senderId", "messageText")(request)
    if rejection:
        return rejection

    recipient_role = request.body.get("recipientRole")
    if recipient_role and not messaging_allowed(request.body.get("senderRole"), recipient_role):
        return 403, (
            "Direct communication between buyers and sellers is not allowed. "
            "Please communicate through an agent."
        )
    return None


# ============================================================================
# Routes
# ============================================================================

DASHBOARD_STATS_EMPTY = {
    "totalProperties": 0,
    "totalAgents": 0,
    "totalUsers": 0,
    "pendingApprovals": 0,
    "recentPayments": 0,
    "monthlyRevenue": 0,
}

WRAP = ResponseMode.WRAP


ROUTES: List[RouteSpec] = [
    # Admin
    RouteSpec("admin_activity", "/admin/activity", "GET", "/admin/activity",
              mode=WRAP, source_field="activities"),
    RouteSpec("admin_agents", "/admin/agents", "GET", "/admin/agents",
              transform=map_data(with_ids)),
    RouteSpec("admin_dashboard_stats", "/admin/dashboard/stats", "GET", "/admin/dashboard/stats",
              mode=WRAP, empty=DASHBOARD_STATS_EMPTY,
              transform=zero_filled(DASHBOARD_STATS_EMPTY)),
    RouteSpec("admin_monthly_revenue", "/admin/payments/monthly-revenue", "GET",
              "/admin/payments/monthly-revenue", mode=WRAP, source_field="revenue", empty=0),
    RouteSpec("admin_properties_count", "/admin/properties/count", "GET", "/admin/properties/count",
              mode=WRAP, source_field="count", empty=0),
    RouteSpec("admin_properties", "/admin/properties", "GET", "/admin/properties"),
    RouteSpec("admin_users_count", "/admin/users/count", "GET", "/admin/users/count",
              mode=WRAP, source_field="count", empty=0),
    RouteSpec("admin_users", "/admin/users", "GET", "/admin/users",
              transform=map_data(with_user_status)),
    RouteSpec("admin_create_user", "/admin/users", "POST", "/admin/users", empty={}),
    RouteSpec("admin_user", "/admin/users/{user_id}", "GET", "/admin/users/{user_id}",
              empty={}, transform=map_data(with_user_status)),
    RouteSpec("admin_delete_user", "/admin/users/{user_id}", "DELETE", "/admin/users/{user_id}",
              empty={}),
    RouteSpec("admin_user_status", "/admin/users/{user_id}/status", "PATCH",
              "/admin/users/{user_id}/status", empty={}),

    # Agent dashboard
    RouteSpec("agent_activities", "/agent/{agent_id}/activities", "GET",
              "/agent/{agent_id}/activities"),
    RouteSpec("agent_properties", "/agent/{agent_id}/properties", "GET",
              "/agent/{agent_id}/properties"),
    RouteSpec("agent_stats", "/agent/{agent_id}/stats", "GET", "/agent/{agent_id}/stats",
              empty={}),

    # Agents directory
    RouteSpec("agents", "/agents", "GET", "/agents"),
    RouteSpec("agents_top", "/agents/top", "GET", "/agents/top"),
    RouteSpec("agents_stats", "/agents/stats", "GET", "/agents/stats", empty={}),
    RouteSpec("agent", "/agents/{agent_id}", "GET", "/agents/{agent_id}", empty={}),

    # Buyer
    RouteSpec("buyer_unlock_property", "/buyer/unlock-property", "POST",
              "/buyer/unlock-property", auth_required=True, empty={}),
    RouteSpec("buyer_unlocked_properties", "/buyer/unlocked-properties", "GET",
              "/buyer/unlocked-properties", auth_required=True),
    RouteSpec("buyer_watchlist_add", "/buyer/watchlist/{property_id}", "POST",
              "/buyer/watchlist/{property_id}", auth_required=True, empty={}),
    RouteSpec("buyer_watchlist_remove", "/buyer/watchlist/{property_id}", "DELETE",
              "/buyer/watchlist/{property_id}", auth_required=True, empty={}),

    # Messaging
    RouteSpec("messages", "/messages", "GET", "/messages",
              validate=require_query("userId")),
    RouteSpec("messages_send", "/messages", "POST", "/messages",
              empty={}, validate=validate_new_message),
    RouteSpec("message_thread", "/messages/{thread_id}", "GET", "/messages/{thread_id}"),
    RouteSpec("message_thread_read", "/messages/{thread_id}", "PUT",
              "/messages/{thread_id}/read", empty={}, validate=require_body_fields("userId")),

    # Payments
    RouteSpec("payments_confirm", "/payments/confirm", "POST", "/payment/confirm",
              auth_required=True, empty={}),

    # Properties
    RouteSpec("properties", "/properties", "GET", "/properties"),
    RouteSpec("properties_create", "/properties", "POST", "/properties",
              auth_required=True, empty={}),
    RouteSpec("properties_upload", "/properties/upload", "POST", "/properties/upload",
              auth_required=True, mode=WRAP, empty={}, raw_body=True),
    RouteSpec("property", "/properties/{property_id}", "GET", "/properties/{property_id}",
              empty={}),
    RouteSpec("property_status", "/properties/{property_id}/status", "PATCH",
              "/properties/{property_id}/status", empty={}),
    RouteSpec("property_find_seller", "/properties/{property_id}/find-seller", "GET",
              "/properties/{property_id}/find-seller", empty={}),
    RouteSpec("property_with_seller", "/properties/{property_id}/with-seller", "GET",
              "/properties/{property_id}/with-seller", empty={}),

    # Seller dashboard
    RouteSpec("seller_properties", "/seller/properties", "GET", "/sellers/properties",
              auth_required=True),
    RouteSpec("seller_listings", "/seller/{seller_id}/listings", "GET",
              "/sellers/{seller_id}/listings", auth_required=True),
    RouteSpec("seller_analytics", "/sellers/{seller_id}/analytics", "GET",
              "/sellers/{seller_id}/analytics", auth_required=True, empty={}),
    RouteSpec("seller_overview", "/sellers/{seller_id}/overview", "GET",
              "/sellers/{seller_id}/overview", auth_required=True, empty={}),
    RouteSpec("seller_public_listings", "/sellers/{seller_id}/listings", "GET",
              "/sellers/{seller_id}/listings"),
]


def get_route(name: str) -> RouteSpec:
    """Look up a route by name."""
    for route in ROUTES:
        if route.name == name:
            return route
    raise KeyError(name)
