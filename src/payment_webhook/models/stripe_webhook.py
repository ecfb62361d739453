"""Stripe webhook event models.

Only the fields this service reads are modelled; everything else Stripe
sends is ignored.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class EventType(str, Enum):
    """Stripe event kinds this service acts upon."""

    CHECKOUT_SESSION_COMPLETED = "checkout.session.completed"


class CheckoutSession(BaseModel):
    """Payload of a checkout.session.completed event (``data.object``)."""

    model_config = ConfigDict(extra="ignore")

    id: str | None = Field(
        default=None,
        description="Stripe checkout session ID",
        examples=["cs_test_a1b2c3"],
    )
    client_reference_id: str | None = Field(
        default=None,
        description="Transaction reference chosen when the session was created",
        examples=["order_42_1712345678"],
    )
    payment_intent: str | None = Field(
        default=None,
        description="Stripe PaymentIntent ID",
        examples=["pi_3ABC123DEF456"],
    )
    payment_status: str | None = Field(
        default=None,
        description="Stripe payment status label",
        examples=["paid", "unpaid", "no_payment_required"],
    )


class EventData(BaseModel):
    """The ``data`` envelope of a Stripe event."""

    model_config = ConfigDict(extra="ignore")

    object: dict[str, Any] = Field(default_factory=dict)


class StripeEvent(BaseModel):
    """A Stripe event whose signature has been verified."""

    model_config = ConfigDict(extra="ignore")

    id: str | None = Field(
        default=None,
        description="Stripe event ID (evt_xxx)",
        examples=["evt_1ABC123DEF456"],
    )
    type: str = Field(
        ...,
        description="Stripe event type",
        examples=["checkout.session.completed", "payment_intent.created"],
    )
    data: EventData = Field(default_factory=EventData)

    @property
    def kind(self) -> EventType | None:
        """Return the handled event kind, or None for any other type."""
        try:
            return EventType(self.type)
        except ValueError:
            return None

    def checkout_session(self) -> CheckoutSession:
        """Parse ``data.object`` as a checkout session.

        Raises:
            ValueError: If the event is not a completed checkout.
        """
        if self.kind is not EventType.CHECKOUT_SESSION_COMPLETED:
            raise ValueError(f"Event type '{self.type}' has no checkout session")
        return CheckoutSession.model_validate(self.data.object)
