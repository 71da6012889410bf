"""
Data Models Module

This module defines Pydantic models for request/response validation
and data serialization throughout the BFF service.

Models are organized by functional area:
- Proxy models (inbound request snapshot, response envelope)
- Payment models (payment intent request/response)
- Health check models
"""

from dataclasses import dataclass
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Proxy Models
# ============================================================================

@dataclass(frozen=True)
class ProxyRequest:
    """
    Snapshot of an inbound request, as much of it as gets forwarded.

    Attributes:
        method: HTTP verb, upper-case
        path: Backend resource path with parameters already substituted
        query: Raw query string, without the leading "?"
        body: Parsed JSON body for bodied methods, None otherwise
        authorization: Inbound Authorization header value, if any
        content: Raw body bytes for routes that pass the payload through undecoded
        content_type: Inbound Content-Type sent along with ``content``
    """
    method: str
    path: str
    query: str = ""
    body: Any = None
    authorization: Optional[str] = None
    content: Optional[bytes] = None
    content_type: Optional[str] = None


@dataclass(frozen=True)
class ProxyResult:
    """Status code and JSON body to return to the caller."""
    status_code: int
    body: Any


class ProxyEnvelope(BaseModel):
    """Uniform envelope returned by proxy routes that own their response shape."""
    model_config = ConfigDict(extra="allow")

    success: bool = Field(..., description="Whether the request succeeded")
    data: Any = Field(None, description="Route payload, or its empty default on failure")
    error: Optional[str] = Field(None, description="Error message when success is false")


# ============================================================================
# Payment Models
# ============================================================================

class PaymentIntentRequest(BaseModel):
    """Request model for creating a payment intent."""
    amount: int = Field(
        ...,
        description="Amount in the smallest currency unit (e.g. cents)",
        gt=0,
    )


class PaymentIntentResponse(BaseModel):
    """Client-side confirmation token for a created payment intent."""
    clientSecret: str = Field(..., description="Payment intent client secret")


# ============================================================================
# Health Check Models
# ============================================================================

class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(..., description="Service health status")
    service: str = Field(..., description="Service name")
    version: str = Field(..., description="Service version")
