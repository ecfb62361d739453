"""Webhook handler for processing Stripe events.

Provides the verify → parse → forward → relay pipeline separate from
HTTP routing concerns, so it can be unit tested with fake services.
"""

import datetime as dt

from pydantic import ValidationError

from payment_webhook.config import WebhookSettings
from payment_webhook.models.errors import ErrorCode, WebhookError
from payment_webhook.models.playfab import (
    TransactionReference,
    build_cloud_script_request,
)
from payment_webhook.models.responses import (
    EnvironmentStatus,
    HealthResponse,
    WebhookResponse,
)
from payment_webhook.models.stripe_webhook import EventType, StripeEvent
from payment_webhook.services.playfab_service import PlayFabService, PlayFabServiceError
from payment_webhook.services.stripe_service import StripeService, StripeServiceError
from payment_webhook.utils.logging import (
    get_logger,
    log_fulfillment_operation,
    log_webhook_event,
)

logger = get_logger(__name__)


class WebhookHandler:
    """Handler for Stripe payment webhooks.

    Verifies deliveries, acts on checkout.session.completed and forwards
    the purchase to PlayFab for fulfillment. Holds no per-request state.
    """

    def __init__(
        self,
        settings: WebhookSettings,
        stripe_service: StripeService,
        playfab_service: PlayFabService,
    ) -> None:
        self._settings = settings
        self._stripe = stripe_service
        self._playfab = playfab_service

    def health(self) -> HealthResponse:
        """Report liveness and which required secrets are configured."""
        return HealthResponse(
            timestamp=dt.datetime.now(dt.UTC),
            environment=EnvironmentStatus(
                has_stripe_key=self._settings.has_stripe_key,
                has_webhook_secret=self._settings.has_webhook_secret,
                has_playfab_title_id=self._settings.has_playfab_title_id,
                has_playfab_secret_key=self._settings.has_playfab_secret_key,
            ),
        )

    def verify(self, payload: bytes, signature: str | None) -> StripeEvent:
        """Verify a delivery and return its event.

        Args:
            payload: Raw request body.
            signature: Stripe-Signature header value, if present.

        Raises:
            WebhookError: INVALID_WEBHOOK_SIGNATURE on any verification failure.
        """
        if not signature:
            raise WebhookError(
                code=ErrorCode.INVALID_WEBHOOK_SIGNATURE,
                details={"message": "Missing Stripe-Signature header"},
            )

        try:
            return self._stripe.verify_webhook_signature(payload, signature)
        except StripeServiceError as e:
            raise WebhookError(
                code=ErrorCode.INVALID_WEBHOOK_SIGNATURE,
                details={"message": str(e)},
            ) from e

    async def handle_event(self, event: StripeEvent) -> WebhookResponse:
        """Dispatch a verified event.

        Event kinds other than checkout.session.completed are acknowledged
        without action.
        """
        log_webhook_event(logger, event.type, event.id, result="received")

        if event.kind is EventType.CHECKOUT_SESSION_COMPLETED:
            return await self.process_checkout_completed(event)

        log_webhook_event(logger, event.type, event.id, result="skipped")
        return WebhookResponse.acknowledged()

    async def process_checkout_completed(self, event: StripeEvent) -> WebhookResponse:
        """Forward a completed checkout to PlayFab and relay the outcome.

        Args:
            event: Verified checkout.session.completed event.

        Returns:
            Acknowledgement carrying the fulfillment result, if any.

        Raises:
            WebhookError: On a malformed transaction reference (400) or a
                failed PlayFab call (500).
        """
        try:
            session = event.checkout_session()
        except ValidationError as e:
            raise WebhookError(
                code=ErrorCode.INTERNAL_ERROR,
                details={"message": f"Unexpected checkout session shape: {e}"},
            ) from e

        logger.info(
            "Processing payment: transaction=%s payment_status=%s",
            session.client_reference_id,
            session.payment_status,
        )

        reference = TransactionReference.parse(session.client_reference_id)
        player_id = reference.player_id

        request = build_cloud_script_request(
            reference,
            function_name=self._settings.cloud_script_function,
            payment_intent=session.payment_intent,
            payment_status=session.payment_status,
        )

        try:
            log_fulfillment_operation(
                logger,
                "execute_cloud_script",
                player_id=player_id,
                transaction_id=reference.raw,
                payment_status=session.payment_status,
                function_name=request.function_name,
            )
            result = await self._playfab.execute_cloud_script(request)
        except PlayFabServiceError as e:
            log_fulfillment_operation(
                logger,
                "execute_cloud_script",
                player_id=player_id,
                transaction_id=reference.raw,
                error=str(e),
                status_code=e.status_code,
                response_text=e.response_text,
            )
            log_webhook_event(
                logger,
                event.type,
                event.id,
                transaction_id=reference.raw,
                player_id=player_id,
                result="error",
                error=str(e),
            )
            raise WebhookError(
                code=ErrorCode.PLAYFAB_ERROR,
                details={"message": str(e), "response": e.response_text or ""},
            ) from e
        except Exception as e:
            logger.exception("Fulfillment call failed for transaction %s", reference.raw)
            log_webhook_event(
                logger,
                event.type,
                event.id,
                transaction_id=reference.raw,
                player_id=player_id,
                result="error",
                error=str(e),
            )
            raise WebhookError(
                code=ErrorCode.INTERNAL_ERROR,
                details={"message": str(e)},
            ) from e

        function_result = result.function_result
        if function_result is None:
            log_webhook_event(
                logger,
                event.type,
                event.id,
                transaction_id=reference.raw,
                player_id=player_id,
                result="acknowledged",
            )
            return WebhookResponse.acknowledged()

        if function_result.success:
            log_webhook_event(
                logger,
                event.type,
                event.id,
                transaction_id=reference.raw,
                player_id=player_id,
                result="fulfilled",
            )
            return WebhookResponse.processed()

        # Business rejection: still 200 so Stripe does not redeliver
        log_webhook_event(
            logger,
            event.type,
            event.id,
            transaction_id=reference.raw,
            player_id=player_id,
            result="rejected",
            error=function_result.message,
        )
        return WebhookResponse.rejected(function_result.message)
