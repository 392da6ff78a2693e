"""
Adapter para Stripe.
Cancela suscripciones usando el SDK oficial de Stripe.
"""

import asyncio

import stripe
import structlog

from app.adapters.base import CancellationProvider, CancellationResult
from app.schemas.cancellation import CancellationStatus
from app.utils.exceptions import CredentialDecryptionError


logger = structlog.get_logger(__name__)


class StripeAdapter(CancellationProvider):
    """
    Adapter para Stripe Billing.

    El ``userId`` recibido debe ser el ID de la suscripción en Stripe
    (``sub_...``). La cancelación es inmediata, sin prorrateo.
    """

    @property
    def provider_name(self) -> str:
        return "stripe"

    async def cancel_subscription(self, subscription_id: str) -> CancellationResult:
        """Cancela una suscripción de Stripe de inmediato."""
        try:
            api_key = self._cipher.decrypt(self._credential)
        except CredentialDecryptionError as e:
            logger.error("Failed to decrypt Stripe API key", error=e.message)
            return self.failed(subscription_id, "Failed to decrypt Stripe API key.")

        logger.info("Attempting Stripe subscription cancellation", subscription_id=subscription_id)

        try:
            # api_key por request: no se toca el stripe.api_key global
            subscription = await asyncio.wait_for(
                stripe.Subscription.cancel_async(subscription_id, api_key=api_key),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            logger.error("Stripe cancellation timed out", subscription_id=subscription_id)
            return self.failed(
                subscription_id,
                f"Stripe API request timed out after {self._timeout:g}s",
            )
        except stripe.StripeError as e:
            message = e.user_message or str(e) or "Stripe API error"
            logger.error(
                "Stripe subscription cancellation failed",
                subscription_id=subscription_id,
                error=message,
                http_status=e.http_status,
            )
            return self.failed(
                subscription_id,
                message,
                upstream_status_code=e.http_status,
            )
        except Exception as e:
            logger.error(
                "Unexpected error during Stripe cancellation",
                subscription_id=subscription_id,
                error=str(e),
            )
            return self.failed(subscription_id, str(e) or "Stripe API error")

        logger.info("Stripe subscription cancelled", stripe_subscription_id=subscription.id)

        return CancellationResult(
            status=CancellationStatus.COMPLETED,
            provider=self.provider_name,
            subscription_id=subscription_id,
            processor_reference=subscription.id,
            upstream_subscription_status=getattr(subscription, "status", None),
        )
