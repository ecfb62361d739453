"""FastAPI exception handlers for converting WebhookError to HTTP responses.

The ErrorCode-to-HTTP status mapping:
- 400 Bad Request: invalid signature, missing or malformed transaction ID
- 405 Method Not Allowed: unsupported HTTP method
- 500 Internal Server Error: PlayFab failures and anything unexpected

Bodies are always the generic ErrorResponse. WebhookError.details are
logged for operators and never returned to the caller.

Usage:
    from payment_webhook.exceptions import register_exception_handlers
    register_exception_handlers(app)
"""

from fastapi import FastAPI, Request
from fastapi.exception_handlers import (
    http_exception_handler as default_http_exception_handler,
)
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_405_METHOD_NOT_ALLOWED,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

from payment_webhook.middleware.correlation import CORRELATION_ID_HEADER
from payment_webhook.models.errors import ErrorCode, ErrorResponse, WebhookError
from payment_webhook.utils.logging import get_logger

logger = get_logger(__name__)

ALLOWED_METHODS = "GET, POST"

ERROR_CODE_TO_HTTP_STATUS: dict[ErrorCode, int] = {
    ErrorCode.METHOD_NOT_ALLOWED: HTTP_405_METHOD_NOT_ALLOWED,
    ErrorCode.INVALID_WEBHOOK_SIGNATURE: HTTP_400_BAD_REQUEST,
    ErrorCode.MISSING_TRANSACTION_ID: HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_TRANSACTION_ID: HTTP_400_BAD_REQUEST,
    ErrorCode.PLAYFAB_ERROR: HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.INTERNAL_ERROR: HTTP_500_INTERNAL_SERVER_ERROR,
}


def get_http_status_for_error(code: ErrorCode) -> int:
    """Get HTTP status code for an ErrorCode.

    Args:
        code: The ErrorCode to map

    Returns:
        HTTP status code, defaults to 500 if not explicitly mapped.
    """
    return ERROR_CODE_TO_HTTP_STATUS.get(code, HTTP_500_INTERNAL_SERVER_ERROR)


async def webhook_error_handler(request: Request, exc: WebhookError) -> JSONResponse:
    """Handle WebhookError exceptions and convert to JSON response.

    Args:
        request: The incoming request
        exc: The WebhookError exception

    Returns:
        JSONResponse with the generic error body and mapped status code.
    """
    status_code = get_http_status_for_error(exc.code)

    log = logger.error if status_code >= HTTP_500_INTERNAL_SERVER_ERROR else logger.warning
    log(
        "%s %s failed: %s (%s) details=%s",
        request.method,
        request.url.path,
        exc.message,
        exc.code.value,
        exc.details,
    )

    headers = None
    if exc.code is ErrorCode.METHOD_NOT_ALLOWED:
        headers = {"Allow": ALLOWED_METHODS}

    return JSONResponse(
        status_code=status_code,
        content=exc.to_error_response().model_dump(mode="json"),
        headers=headers,
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> Response:
    """Route-level HTTP errors.

    Starlette raises a 405 when the path matches but no route accepts the
    method. Those get the same body and Allow header as the explicit guard
    route; every other status keeps FastAPI's default handling.
    """
    if exc.status_code == HTTP_405_METHOD_NOT_ALLOWED:
        return await webhook_error_handler(
            request,
            WebhookError(
                code=ErrorCode.METHOD_NOT_ALLOWED,
                details={"method": request.method},
            ),
        )
    return await default_http_exception_handler(request, exc)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions with a generic error response.

    This runs in Starlette's ServerErrorMiddleware, outside
    CorrelationIdMiddleware, so the correlation header is set here.

    Args:
        request: The incoming request
        exc: The uncaught exception

    Returns:
        JSONResponse with 500 status and generic error message.
    """
    logger.exception("Unhandled exception: %s", exc)

    correlation_id = getattr(request.state, "correlation_id", None)
    headers = {CORRELATION_ID_HEADER: correlation_id} if correlation_id else None

    return JSONResponse(
        status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse.from_code(ErrorCode.INTERNAL_ERROR).model_dump(mode="json"),
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app.

    Args:
        app: The FastAPI application instance.
    """
    app.add_exception_handler(WebhookError, webhook_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, generic_exception_handler)
