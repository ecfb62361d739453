"""Standard error codes for the payment webhook.

Every failure that reaches the HTTP boundary is expressed as a WebhookError
carrying one of these codes. Messages returned to the caller are generic;
diagnostic details are logged only.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ErrorCode(str, Enum):
    """Error codes returned by the webhook endpoint."""

    METHOD_NOT_ALLOWED = "ERR_WEBHOOK_001"
    INVALID_WEBHOOK_SIGNATURE = "ERR_WEBHOOK_002"
    MISSING_TRANSACTION_ID = "ERR_WEBHOOK_003"
    INVALID_TRANSACTION_ID = "ERR_WEBHOOK_004"
    PLAYFAB_ERROR = "ERR_WEBHOOK_005"
    INTERNAL_ERROR = "ERR_WEBHOOK_006"


# Generic, caller-facing messages
ERROR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.METHOD_NOT_ALLOWED: "Method not allowed",
    ErrorCode.INVALID_WEBHOOK_SIGNATURE: "Invalid signature",
    ErrorCode.MISSING_TRANSACTION_ID: "Missing transaction ID",
    ErrorCode.INVALID_TRANSACTION_ID: "Invalid transaction ID",
    ErrorCode.PLAYFAB_ERROR: "PlayFab error",
    ErrorCode.INTERNAL_ERROR: "Internal error",
}


class ErrorResponse(BaseModel):
    """JSON body returned for every webhook failure."""

    model_config = ConfigDict(strict=True)

    error: str
    error_code: ErrorCode

    @classmethod
    def from_code(cls, code: ErrorCode) -> "ErrorResponse":
        """Create an ErrorResponse from an error code.

        Args:
            code: The error code

        Returns:
            An ErrorResponse with the generic message for the code.
        """
        return cls(error=ERROR_MESSAGES[code], error_code=code)


class WebhookError(Exception):
    """Exception raised while handling a webhook delivery.

    ``details`` is operator-facing context. It is logged by the exception
    handler and never serialized into the response.
    """

    def __init__(
        self,
        code: ErrorCode,
        details: Optional[dict[str, str]] = None,
    ):
        self.code = code
        self.message = ERROR_MESSAGES[code]
        self.details = details
        super().__init__(self.message)

    def to_error_response(self) -> ErrorResponse:
        """Convert this exception to the caller-facing response body."""
        return ErrorResponse.from_code(self.code)
