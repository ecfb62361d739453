"""Runtime configuration for the payment webhook.

Settings are read once per process by ``WebhookSettings.from_env()`` and
injected into request handling through FastAPI dependencies. Nothing in the
request path reads the environment directly.

Secrets come from environment variables. When ``SSM_PARAMETER_PREFIX`` is
set, secrets missing from the environment are looked up in SSM Parameter
Store under that prefix, e.g. ``/game/prod/stripe/webhook_secret``.
"""

import logging
import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

DEFAULT_PLAYFAB_API_DOMAIN = "playfabapi.com"
DEFAULT_CLOUD_SCRIPT_FUNCTION = "ProcessStripeWebhook"

# field name -> (environment variable, SSM parameter suffix)
SECRET_SOURCES: dict[str, tuple[str, str]] = {
    "stripe_secret_key": ("STRIPE_SECRET_KEY", "stripe/secret_key"),
    "stripe_webhook_secret": ("STRIPE_WEBHOOK_SECRET", "stripe/webhook_secret"),
    "playfab_title_id": ("PLAYFAB_TITLE_ID", "playfab/title_id"),
    "playfab_secret_key": ("PLAYFAB_SECRET_KEY", "playfab/secret_key"),
}


class WebhookSettings(BaseModel):
    """Explicit configuration for the webhook handler.

    Frozen so a single instance can be shared (and cached) safely.
    """

    model_config = ConfigDict(frozen=True)

    stripe_secret_key: str | None = Field(default=None, repr=False)
    stripe_webhook_secret: str | None = Field(default=None, repr=False)
    playfab_title_id: str | None = None
    playfab_secret_key: str | None = Field(default=None, repr=False)

    playfab_api_domain: str = DEFAULT_PLAYFAB_API_DOMAIN
    cloud_script_function: str = DEFAULT_CLOUD_SCRIPT_FUNCTION
    playfab_timeout_seconds: float = Field(default=10.0, gt=0)
    ssm_parameter_prefix: str | None = None
    log_level: str = "INFO"

    @property
    def has_stripe_key(self) -> bool:
        return bool(self.stripe_secret_key)

    @property
    def has_webhook_secret(self) -> bool:
        return bool(self.stripe_webhook_secret)

    @property
    def has_playfab_title_id(self) -> bool:
        return bool(self.playfab_title_id)

    @property
    def has_playfab_secret_key(self) -> bool:
        return bool(self.playfab_secret_key)

    @property
    def playfab_base_url(self) -> str:
        """Base URL of the title's PlayFab API."""
        return f"https://{self.playfab_title_id}.{self.playfab_api_domain}"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "WebhookSettings":
        """Build settings from environment variables (and SSM, if configured).

        Args:
            environ: Mapping to read from. Defaults to ``os.environ``.

        Returns:
            Populated settings.
        """
        env = os.environ if environ is None else environ

        values: dict[str, object] = {
            field: env.get(var) or None for field, (var, _) in SECRET_SOURCES.items()
        }

        prefix = env.get("SSM_PARAMETER_PREFIX") or None
        if prefix:
            values["ssm_parameter_prefix"] = prefix
            for field, (_, suffix) in SECRET_SOURCES.items():
                if values[field] is None:
                    values[field] = _load_secret_from_ssm(prefix, suffix)

        optional = {
            "playfab_api_domain": "PLAYFAB_API_DOMAIN",
            "cloud_script_function": "PLAYFAB_CLOUDSCRIPT_FUNCTION",
            "playfab_timeout_seconds": "PLAYFAB_TIMEOUT_SECONDS",
            "log_level": "LOG_LEVEL",
        }
        for field, var in optional.items():
            if env.get(var):
                values[field] = env[var]

        return cls.model_validate(values)


def _load_secret_from_ssm(prefix: str, suffix: str) -> str | None:
    """Fetch one secret from SSM, returning None when it cannot be read."""
    from payment_webhook.services.ssm_service import SSMServiceError, get_ssm_service

    name = f"{prefix.rstrip('/')}/{suffix}"
    try:
        return get_ssm_service().get_parameter(name)
    except SSMServiceError as e:
        logger.warning("Secret unavailable from SSM (%s): %s", name, e)
        return None
