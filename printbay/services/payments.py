# printbay/services/payments.py

import logging
from typing import Any, Optional

import stripe
from fastapi.concurrency import run_in_threadpool

from printbay.config.settings import Settings
from printbay.core.exceptions import IntegrationError
from printbay.schemas.payments import PaymentIntentResult
from printbay.utils.hashing import now_ms

logger = logging.getLogger(__name__)

DEFAULT_AMOUNT_CENTS = 2425
PAYMENT_SOURCE = "theprintedbay_web"


class PaymentService:
    """
    Stripe payment intents. The SDK is synchronous, so calls go through the
    threadpool; the key is passed per call instead of set on the module.
    """

    name = "payments"

    def __init__(self, settings: Settings):
        self._api_key = settings.stripe_secret_key
        self._configured = settings.stripe_configured
        self._initialized = False

    @property
    def configured(self) -> bool:
        return self._configured

    async def initialize(self) -> None:
        if self._initialized:
            return
        self._initialized = True
        if not self._configured:
            logger.warning("⚠️ Stripe not configured, using mock payment intents")

    async def close(self) -> None:
        return None

    async def create_intent(
        self,
        order_id: Optional[str] = None,
        amount: Optional[int] = None,
        currency: str = "usd",
    ) -> PaymentIntentResult:
        amount = amount or DEFAULT_AMOUNT_CENTS
        if not self._configured:
            logger.warning("⚠️ Stripe not configured, using mock payment intent")
            ts = now_ms()
            return PaymentIntentResult(
                client_secret=f"pi_mock_{ts}_secret",
                payment_intent_id=f"pi_mock_{ts}",
                amount=amount,
                currency=currency,
            )

        try:
            intent = await run_in_threadpool(
                stripe.PaymentIntent.create,
                api_key=self._api_key,
                amount=amount,
                currency=currency,
                metadata={"orderId": order_id or f"order_{now_ms()}", "source": PAYMENT_SOURCE},
                automatic_payment_methods={"enabled": True},
            )
        except stripe.StripeError as e:
            logger.error("❌ Stripe intent creation failed: %s", e)
            raise IntegrationError(self.name, "payment intent creation failed", {"error": str(e)}) from e

        logger.info("✅ Stripe Payment Intent created: %s", intent["id"])
        return PaymentIntentResult(
            client_secret=intent["client_secret"],
            payment_intent_id=intent["id"],
            amount=intent["amount"],
            currency=intent["currency"],
        )

    async def retrieve_intent(self, payment_intent_id: str) -> Any:
        """Raw Stripe intent (id, amount, currency, status). Configured mode only."""
        if not self._configured:
            raise IntegrationError(self.name, "Stripe is not configured")
        try:
            return await run_in_threadpool(
                stripe.PaymentIntent.retrieve, payment_intent_id, api_key=self._api_key
            )
        except stripe.StripeError as e:
            logger.error("❌ Stripe intent lookup failed for %s: %s", payment_intent_id, e)
            raise IntegrationError(self.name, "payment intent lookup failed", {"error": str(e)}) from e
