"""PlayFab Server API client for purchase fulfillment.

Calls ``/Server/ExecuteCloudScript`` on the configured title using the
title secret key. One HTTP request per call; no retries.
"""

import logging

import httpx
from pydantic import ValidationError

from payment_webhook.config import WebhookSettings
from payment_webhook.models.playfab import (
    CloudScriptRequest,
    CloudScriptResponse,
    dump_cloud_script_request,
)

logger = logging.getLogger(__name__)

EXECUTE_CLOUD_SCRIPT_PATH = "/Server/ExecuteCloudScript"
SECRET_KEY_HEADER = "X-SecretKey"


class PlayFabServiceError(Exception):
    """Raised when PlayFab cannot be reached or rejects the request."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        response_text: str | None = None,
    ) -> None:
        """Initialize with message and optional HTTP details.

        Args:
            message: Human-readable error message.
            status_code: HTTP status returned by PlayFab, if any.
            response_text: Raw response body, for operator diagnostics.
        """
        super().__init__(message)
        self.status_code = status_code
        self.response_text = response_text


class PlayFabService:
    """Client for the PlayFab Server API.

    Usage:
        playfab = PlayFabService(settings)
        result = await playfab.execute_cloud_script(request)
        if result.function_result and result.function_result.success:
            ...
    """

    def __init__(
        self,
        settings: WebhookSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize with settings and an optional HTTP transport.

        Args:
            settings: Webhook settings holding the title ID and secret key.
            transport: Custom httpx transport (used by tests).
        """
        self._settings = settings
        self._transport = transport

    @property
    def execute_cloud_script_url(self) -> str:
        return f"{self._settings.playfab_base_url}{EXECUTE_CLOUD_SCRIPT_PATH}"

    async def execute_cloud_script(
        self, request: CloudScriptRequest
    ) -> CloudScriptResponse:
        """Run a CloudScript function for a player.

        Args:
            request: ExecuteCloudScript request body.

        Returns:
            The parsed response envelope. A 2xx body that does not match the
            expected shape yields an envelope without a function result.

        Raises:
            PlayFabServiceError: If PlayFab is not configured or answers with
                a non-success HTTP status.
            httpx.HTTPError: On network failures and timeouts.
            ValueError: If a 2xx body is not valid JSON.
        """
        if not self._settings.has_playfab_title_id or not self._settings.has_playfab_secret_key:
            raise PlayFabServiceError("PlayFab title ID or secret key not configured")

        headers = {
            "Content-Type": "application/json",
            SECRET_KEY_HEADER: self._settings.playfab_secret_key or "",
        }

        async with httpx.AsyncClient(
            timeout=self._settings.playfab_timeout_seconds,
            transport=self._transport,
        ) as client:
            response = await client.post(
                self.execute_cloud_script_url,
                json=dump_cloud_script_request(request),
                headers=headers,
            )

        if not response.is_success:
            raise PlayFabServiceError(
                f"ExecuteCloudScript failed with HTTP {response.status_code}",
                status_code=response.status_code,
                response_text=response.text,
            )

        body = response.json()
        try:
            result = CloudScriptResponse.model_validate(body)
        except ValidationError as e:
            logger.warning("Unexpected ExecuteCloudScript response shape: %s", e)
            return CloudScriptResponse.empty()

        if result.data and result.data.error:
            logger.error(
                "CloudScript %s raised %s: %s",
                result.data.function_name or request.function_name,
                result.data.error.error,
                result.data.error.message,
            )

        return result
