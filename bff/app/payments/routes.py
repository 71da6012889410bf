"""
Payment Routes
==============

POST /api/create-payment-intent calls the payment processor directly with the
server-held secret key instead of going through the backend, and returns the
intent's client secret to the browser.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from ..models import PaymentIntentRequest, PaymentIntentResponse
from .gateway import PaymentGateway, PaymentGatewayError

logger = logging.getLogger(__name__)

payments_router = APIRouter()


def get_payment_gateway(request: Request) -> Optional[PaymentGateway]:
    """Dependency returning the gateway built at startup, or None."""
    return getattr(request.app.state, "payment_gateway", None)


@payments_router.post("/create-payment-intent", response_model=PaymentIntentResponse)
async def create_payment_intent(
    payment_request: PaymentIntentRequest,
    gateway: Optional[PaymentGateway] = Depends(get_payment_gateway),
):
    """
    Create a payment intent for the given amount.

    Args:
        payment_request: Amount in the smallest currency unit
        gateway: Payment gateway from app state

    Returns:
        ``{"clientSecret": ...}`` on success, 500 ``{"error": ...}`` otherwise
    """
    if gateway is None:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "error": "Payment processor not configured"},
        )

    try:
        client_secret = await gateway.create_intent(payment_request.amount)
    except PaymentGatewayError as e:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "error": str(e)},
        )

    return PaymentIntentResponse(clientSecret=client_secret)
