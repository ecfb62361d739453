"""Stripe webhook signature verification.

Wraps ``stripe.Webhook.construct_event`` and returns a typed StripeEvent.
The signing secret is supplied by WebhookSettings.
"""

import hashlib
import logging

import stripe
from pydantic import ValidationError

from payment_webhook.models.stripe_webhook import StripeEvent

logger = logging.getLogger(__name__)


class StripeServiceError(Exception):
    """Raised when a Stripe operation fails."""

    def __init__(self, message: str, stripe_error_code: str | None = None) -> None:
        """Initialize with message and optional Stripe error code.

        Args:
            message: Human-readable error message.
            stripe_error_code: Stripe-specific error code if available.
        """
        super().__init__(message)
        self.stripe_error_code = stripe_error_code


class StripeService:
    """Service for Stripe webhook operations.

    Usage:
        stripe_svc = StripeService(webhook_secret="whsec_...")
        event = stripe_svc.verify_webhook_signature(payload, signature)
    """

    def __init__(
        self,
        webhook_secret: str | None,
        *,
        tolerance: int = stripe.Webhook.DEFAULT_TOLERANCE,
    ) -> None:
        """Initialize with the webhook signing secret.

        Args:
            webhook_secret: Endpoint signing secret (whsec_...).
            tolerance: Maximum signature age in seconds.
        """
        self._webhook_secret = webhook_secret
        self._tolerance = tolerance

    def verify_webhook_signature(self, payload: bytes, signature: str) -> StripeEvent:
        """Verify a webhook signature and parse the event.

        Args:
            payload: Raw request body bytes, exactly as received.
            signature: Stripe-Signature header value.

        Returns:
            The verified event.

        Raises:
            StripeServiceError: If the secret is missing, the signature is
                invalid, or the body is not a Stripe event.
        """
        if not self._webhook_secret:
            raise StripeServiceError("Webhook secret not configured")

        try:
            stripe.Webhook.construct_event(
                payload, signature, self._webhook_secret, tolerance=self._tolerance
            )
        except stripe.SignatureVerificationError as e:
            logger.warning("Invalid webhook signature: %s", str(e))
            raise StripeServiceError("Invalid webhook signature") from e
        except ValueError as e:
            logger.warning("Invalid webhook payload: %s", str(e))
            raise StripeServiceError("Invalid webhook payload") from e

        # Parse the verified bytes ourselves rather than relying on the
        # StripeObject returned above.
        try:
            event = StripeEvent.model_validate_json(payload)
        except ValidationError as e:
            logger.warning("Webhook payload is not a Stripe event: %s", str(e))
            raise StripeServiceError("Invalid webhook payload") from e

        logger.info("Webhook signature verified for event: %s", event.id)
        return event

    @staticmethod
    def compute_payload_hash(payload: bytes) -> str:
        """Compute SHA-256 hash of a webhook payload for log correlation.

        Args:
            payload: Raw webhook payload bytes.

        Returns:
            Hex-encoded SHA-256 hash.
        """
        return hashlib.sha256(payload).hexdigest()
