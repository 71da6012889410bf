"""
Payment gateway binding.

Thin wrapper over an explicitly constructed ``stripe.StripeClient``. The
application lifespan builds one gateway, keeps it on app state and closes
its HTTP client on shutdown.
"""

import logging
from typing import Optional

import stripe

from ..config import Settings

logger = logging.getLogger(__name__)


class PaymentGatewayError(Exception):
    """Raised when the payment processor rejects or fails a call."""


class PaymentGateway:
    """
    Creates payment intents with the payment processor.

    Args:
        client: Configured Stripe client
        currency: ISO currency code applied to every intent
        http_client: The client's HTTP transport, closed by ``aclose``
    """

    def __init__(
        self,
        client: stripe.StripeClient,
        currency: str,
        http_client: Optional[stripe.HTTPClient] = None,
    ):
        self._client = client
        self._currency = currency
        self._http_client = http_client

    @property
    def currency(self) -> str:
        return self._currency

    @classmethod
    def from_settings(cls, settings: Settings) -> Optional["PaymentGateway"]:
        """Build a gateway, or return None when no secret key is configured."""
        if not settings.payment_configured:
            logger.warning("STRIPE_SECRET_KEY not set, payment intents are disabled")
            return None

        http_client = stripe.HTTPXClient(timeout=settings.BACKEND_TIMEOUT_SECONDS)
        client = stripe.StripeClient(
            settings.STRIPE_SECRET_KEY,
            stripe_version=settings.STRIPE_API_VERSION,
            http_client=http_client,
            max_network_retries=0,
        )
        return cls(client, settings.PAYMENT_CURRENCY, http_client)

    async def create_intent(self, amount: int) -> str:
        """
        Create a payment intent and return its client secret.

        Args:
            amount: Amount in the smallest currency unit

        Returns:
            Client secret used by the browser to confirm the payment

        Raises:
            PaymentGatewayError: With the processor's message on any failure
        """
        try:
            intent = await self._client.payment_intents.create_async(
                params={
                    "amount": amount,
                    "currency": self._currency,
                    "automatic_payment_methods": {"enabled": True},
                }
            )
        except stripe.StripeError as e:
            message = e.user_message or str(e)
            logger.error(
                f"Payment intent creation failed: {message}",
                extra={"amount": amount, "currency": self._currency},
            )
            raise PaymentGatewayError(message) from e

        logger.info(
            "Created payment intent",
            extra={"payment_intent_id": intent.id, "amount": amount, "currency": self._currency},
        )
        return intent.client_secret

    async def aclose(self) -> None:
        if self._http_client is not None:
            await self._http_client.close_async()
