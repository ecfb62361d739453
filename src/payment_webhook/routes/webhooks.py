"""Webhook endpoint for Stripe payment notifications.

One path serves three purposes:
- GET: health check reporting which secrets are configured
- POST: signed Stripe event delivery (checkout.session.completed)
- anything else, HEAD included: 405

The endpoint does NOT require authentication; deliveries are verified with
the Stripe webhook signing secret.
"""

from fastapi import APIRouter, Depends, Request

from payment_webhook.dependencies import get_webhook_handler
from payment_webhook.models.errors import ErrorCode, ErrorResponse, WebhookError
from payment_webhook.models.responses import HealthResponse, WebhookResponse
from payment_webhook.services.stripe_service import StripeService
from payment_webhook.services.webhook_handler import WebhookHandler
from payment_webhook.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["webhooks"])

WEBHOOK_PATH = "/webhook"
SIGNATURE_HEADER = "Stripe-Signature"


@router.api_route(
    WEBHOOK_PATH,
    methods=["GET"],
    summary="Webhook health check",
    response_model=HealthResponse,
)
async def webhook_health(
    handler: WebhookHandler = Depends(get_webhook_handler),
) -> HealthResponse:
    """Report liveness and configuration presence. No side effects."""
    return handler.health()


@router.post(
    WEBHOOK_PATH,
    summary="Receive Stripe webhook events",
    description="""
Endpoint for Stripe webhook events. Handles:
- checkout.session.completed: forwards the purchase to PlayFab for fulfillment

All other event types are acknowledged without action.

**No authentication required** - signature is verified using Stripe webhook secret.

**Not idempotent**: a redelivered event is forwarded to PlayFab again.
""",
    response_model=WebhookResponse,
    response_model_exclude_none=True,
    responses={
        200: {
            "description": "Event received (and fulfilled, rejected, or skipped)",
            "model": WebhookResponse,
        },
        400: {
            "description": "Invalid signature or transaction ID",
            "model": ErrorResponse,
        },
        500: {
            "description": "PlayFab or internal failure",
            "model": ErrorResponse,
        },
    },
)
async def handle_stripe_webhook(
    request: Request,
    handler: WebhookHandler = Depends(get_webhook_handler),
) -> WebhookResponse:
    """Handle an incoming Stripe webhook delivery.

    The raw body is passed to signature verification unmodified.
    """
    signature = request.headers.get(SIGNATURE_HEADER)
    payload = await request.body()

    logger.info(
        "Webhook received (%d bytes, sha256=%s)",
        len(payload),
        StripeService.compute_payload_hash(payload),
    )

    event = handler.verify(payload, signature)
    return await handler.handle_event(event)


# Verbs not listed here reach exceptions.http_exception_handler as a 405
@router.api_route(
    WEBHOOK_PATH,
    methods=["HEAD", "PUT", "PATCH", "DELETE", "OPTIONS", "TRACE"],
    include_in_schema=False,
)
async def webhook_method_not_allowed(request: Request) -> None:
    raise WebhookError(
        code=ErrorCode.METHOD_NOT_ALLOWED,
        details={"method": request.method},
    )
