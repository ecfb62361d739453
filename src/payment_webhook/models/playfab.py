"""PlayFab fulfillment models.

Covers the transaction reference embedded in a checkout session and the
request/response envelopes of the Server ExecuteCloudScript API.
"""

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from payment_webhook.models.errors import ErrorCode, WebhookError

TRANSACTION_ID_SEPARATOR = "_"
MIN_TRANSACTION_ID_PARTS = 3
PLAYER_ID_INDEX = 1


class TransactionReference(BaseModel):
    """A client_reference_id split into its ``_``-separated parts.

    The format is owned by the checkout-creation flow. This service only
    requires at least three parts and reads the player ID from index 1.
    """

    model_config = ConfigDict(frozen=True)

    raw: str
    parts: tuple[str, ...]

    @classmethod
    def parse(cls, client_reference_id: str | None) -> "TransactionReference":
        """Parse and validate a client_reference_id.

        Args:
            client_reference_id: Value from the checkout session.

        Returns:
            The parsed reference.

        Raises:
            WebhookError: MISSING_TRANSACTION_ID if absent or empty,
                INVALID_TRANSACTION_ID if it has fewer than three parts.
        """
        if not client_reference_id:
            raise WebhookError(
                code=ErrorCode.MISSING_TRANSACTION_ID,
                details={"message": "checkout session has no client_reference_id"},
            )

        parts = tuple(client_reference_id.split(TRANSACTION_ID_SEPARATOR))
        if len(parts) < MIN_TRANSACTION_ID_PARTS:
            raise WebhookError(
                code=ErrorCode.INVALID_TRANSACTION_ID,
                details={
                    "message": f"expected at least {MIN_TRANSACTION_ID_PARTS} parts",
                    "client_reference_id": client_reference_id,
                },
            )

        return cls(raw=client_reference_id, parts=parts)

    @property
    def player_id(self) -> str:
        """PlayFab player ID embedded in the reference."""
        return self.parts[PLAYER_ID_INDEX]


class SessionParameter(BaseModel):
    """Checkout session fields forwarded to CloudScript."""

    client_reference_id: str
    payment_intent: str | None = None
    payment_status: str | None = None


class FunctionParameter(BaseModel):
    """CloudScript ``FunctionParameter`` argument."""

    session: SessionParameter


class CloudScriptRequest(BaseModel):
    """Body of POST /Server/ExecuteCloudScript."""

    model_config = ConfigDict(populate_by_name=True)

    playfab_id: str = Field(..., alias="PlayFabId")
    function_name: str = Field(..., alias="FunctionName")
    function_parameter: FunctionParameter = Field(..., alias="FunctionParameter")


class FunctionResult(BaseModel):
    """Value returned by the ProcessStripeWebhook CloudScript function.

    The script is free-form JavaScript, so a null ``success`` reads as a
    failure and a non-string ``message`` is rendered as text.
    """

    model_config = ConfigDict(extra="ignore")

    success: bool = False
    message: str | None = None

    @field_validator("success", mode="before")
    @classmethod
    def _truthy_success(cls, value: Any) -> bool:
        return bool(value)

    @field_validator("message", mode="before")
    @classmethod
    def _message_as_text(cls, value: Any) -> str | None:
        if value is None or isinstance(value, str):
            return value
        if isinstance(value, (dict, list)):
            return json.dumps(value)
        return str(value)


class ScriptExecutionError(BaseModel):
    """Error block PlayFab reports when the CloudScript itself throws."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    error: str | None = Field(default=None, alias="Error")
    message: str | None = Field(default=None, alias="Message")
    stack_trace: str | None = Field(default=None, alias="StackTrace")


class CloudScriptResult(BaseModel):
    """The ``data`` block of an ExecuteCloudScript response."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    function_name: str | None = Field(default=None, alias="FunctionName")
    function_result: FunctionResult | None = Field(default=None, alias="FunctionResult")
    error: ScriptExecutionError | None = Field(default=None, alias="Error")

    @field_validator("function_result", mode="before")
    @classmethod
    def _scalar_result(cls, value: Any) -> Any:
        # A bare truthy value carries no success flag, so it reads as a failure
        if value is None or isinstance(value, dict):
            return value
        return {} if value else None


class CloudScriptResponse(BaseModel):
    """Generic PlayFab response envelope around CloudScriptResult."""

    model_config = ConfigDict(extra="ignore")

    code: int | None = None
    status: str | None = None
    data: CloudScriptResult | None = None

    @property
    def function_result(self) -> FunctionResult | None:
        """Nested function result, if the script returned one."""
        return self.data.function_result if self.data else None

    @classmethod
    def empty(cls) -> "CloudScriptResponse":
        """Envelope with no data, used when the body has an unexpected shape."""
        return cls()


def build_cloud_script_request(
    reference: TransactionReference,
    *,
    function_name: str,
    payment_intent: str | None,
    payment_status: str | None,
) -> CloudScriptRequest:
    """Build the ExecuteCloudScript request for a verified checkout.

    Args:
        reference: Parsed transaction reference.
        function_name: CloudScript function to run.
        payment_intent: Stripe PaymentIntent ID.
        payment_status: Stripe payment status label.

    Returns:
        Request addressed to the player embedded in the reference.
    """
    return CloudScriptRequest(
        playfab_id=reference.player_id,
        function_name=function_name,
        function_parameter=FunctionParameter(
            session=SessionParameter(
                client_reference_id=reference.raw,
                payment_intent=payment_intent,
                payment_status=payment_status,
            )
        ),
    )


def dump_cloud_script_request(request: CloudScriptRequest) -> dict[str, Any]:
    """Serialize a CloudScriptRequest with PlayFab's field names."""
    return request.model_dump(by_alias=True, mode="json")
