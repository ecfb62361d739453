"""SSM Parameter Store service for secure secret retrieval.

Provides cached access to AWS SSM Parameter Store SecureString parameters.
Used as a fallback source for the Stripe and PlayFab secrets when they are
not present in the process environment.
"""

import logging
from functools import lru_cache
from typing import ClassVar

import boto3
from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)


class SSMServiceError(Exception):
    """Raised when SSM parameter retrieval fails."""

    pass


class SSMService:
    """Service for retrieving secrets from AWS SSM Parameter Store.

    Usage:
        ssm = SSMService()
        webhook_secret = ssm.get_parameter("/game/prod/stripe/webhook_secret")
    """

    _cache: ClassVar[dict[str, str]] = {}

    def __init__(self, region_name: str | None = None) -> None:
        try:
            self._client = boto3.client("ssm", region_name=region_name)
        except BotoCoreError as e:
            raise SSMServiceError(f"Failed to create SSM client: {e}") from e

    def get_parameter(self, name: str, *, use_cache: bool = True) -> str:
        """Retrieve a parameter value from SSM Parameter Store.

        Args:
            name: Full parameter path (e.g., "/game/prod/stripe/secret_key")
            use_cache: Whether to use cached value if available (default: True)

        Returns:
            The decrypted parameter value.

        Raises:
            SSMServiceError: If parameter cannot be retrieved.
        """
        if use_cache and name in self._cache:
            logger.debug("SSM cache hit for %s", name)
            return self._cache[name]

        try:
            logger.info("Fetching SSM parameter: %s", name)
            response = self._client.get_parameter(Name=name, WithDecryption=True)
            value = response["Parameter"]["Value"]

            self._cache[name] = value
            return value

        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            if error_code == "ParameterNotFound":
                raise SSMServiceError(f"SSM parameter not found: {name}") from e
            if error_code == "AccessDeniedException":
                raise SSMServiceError(
                    f"Access denied to SSM parameter: {name}. "
                    "Check IAM permissions for ssm:GetParameter."
                ) from e
            raise SSMServiceError(
                f"Failed to retrieve SSM parameter {name}: {e}"
            ) from e
        except BotoCoreError as e:
            raise SSMServiceError(
                f"Failed to retrieve SSM parameter {name}: {e}"
            ) from e

    def clear_cache(self) -> None:
        """Clear all cached parameters."""
        self._cache.clear()
        logger.info("SSM parameter cache cleared")


@lru_cache(maxsize=1)
def get_ssm_service() -> SSMService:
    """Get the shared SSMService instance (singleton pattern).

    Returns:
        SSMService: Shared service instance.
    """
    return SSMService()
