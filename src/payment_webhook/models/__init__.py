"""Pydantic models for the Stripe → PlayFab payment webhook."""

from .errors import (
    ERROR_MESSAGES,
    ErrorCode,
    ErrorResponse,
    WebhookError,
)
from .playfab import (
    CloudScriptRequest,
    CloudScriptResponse,
    FunctionResult,
    TransactionReference,
)
from .responses import (
    EnvironmentStatus,
    HealthResponse,
    WebhookResponse,
)
from .stripe_webhook import (
    CheckoutSession,
    EventType,
    StripeEvent,
)

__all__ = [
    # Errors
    "ERROR_MESSAGES",
    "ErrorCode",
    "ErrorResponse",
    "WebhookError",
    # Stripe
    "CheckoutSession",
    "EventType",
    "StripeEvent",
    # PlayFab
    "CloudScriptRequest",
    "CloudScriptResponse",
    "FunctionResult",
    "TransactionReference",
    # Responses
    "EnvironmentStatus",
    "HealthResponse",
    "WebhookResponse",
]
