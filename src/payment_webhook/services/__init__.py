"""Backend services for the Stripe → PlayFab payment webhook."""

from .playfab_service import PlayFabService, PlayFabServiceError
from .ssm_service import SSMService, SSMServiceError, get_ssm_service
from .stripe_service import StripeService, StripeServiceError
from .webhook_handler import WebhookHandler

__all__ = [
    "PlayFabService",
    "PlayFabServiceError",
    "SSMService",
    "SSMServiceError",
    "get_ssm_service",
    "StripeService",
    "StripeServiceError",
    "WebhookHandler",
]
