"""
Payments Package

Binding to the hosted payment processor: the PaymentGateway wrapper and the
create-payment-intent route.
"""

from .gateway import PaymentGateway, PaymentGatewayError
from .routes import payments_router

__all__ = ["PaymentGateway", "PaymentGatewayError", "payments_router"]
