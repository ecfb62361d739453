"""Response bodies returned by the webhook endpoint."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class WebhookResponse(BaseModel):
    """Acknowledgement returned to Stripe.

    ``success`` and ``message`` are only set when a fulfillment result is
    available; routes serialize with ``exclude_none`` so a bare
    acknowledgement is exactly ``{"received": true}``.
    """

    received: bool = True
    success: bool | None = None
    message: str | None = None

    @classmethod
    def acknowledged(cls) -> "WebhookResponse":
        return cls()

    @classmethod
    def processed(cls) -> "WebhookResponse":
        return cls(success=True, message="Payment processed")

    @classmethod
    def rejected(cls, message: str | None) -> "WebhookResponse":
        return cls(success=False, message=message)


class EnvironmentStatus(BaseModel):
    """Presence flags for the required secrets."""

    model_config = ConfigDict(populate_by_name=True)

    has_stripe_key: bool = Field(..., alias="hasStripeKey")
    has_webhook_secret: bool = Field(..., alias="hasWebhookSecret")
    has_playfab_title_id: bool = Field(..., alias="hasPlayFabTitleId")
    has_playfab_secret_key: bool = Field(..., alias="hasPlayFabSecretKey")


class HealthResponse(BaseModel):
    """Health check body served on GET."""

    status: str = Field(default="healthy", examples=["healthy"])
    timestamp: datetime
    environment: EnvironmentStatus
