"""FastAPI dependency injection providers for configuration and services.

Settings and stateless services are cached with @lru_cache so each is
built once per process. Tests replace them with
``app.dependency_overrides``.

Service Dependency Graph:
    WebhookSettings (get_settings)
        ├── StripeService
        ├── PlayFabService
        └── WebhookHandler (per request, composes the three above)

Testing:
    Use reset_dependencies() to clear cached instances between tests.
"""

from functools import lru_cache

from fastapi import Depends

from payment_webhook.config import WebhookSettings
from payment_webhook.services.playfab_service import PlayFabService
from payment_webhook.services.stripe_service import StripeService
from payment_webhook.services.webhook_handler import WebhookHandler


@lru_cache
def get_settings() -> WebhookSettings:
    """Get cached WebhookSettings built from the environment."""
    return WebhookSettings.from_env()


@lru_cache
def get_stripe_service(
    settings: WebhookSettings = Depends(get_settings),
) -> StripeService:
    """Get cached StripeService for the configured signing secret."""
    return StripeService(webhook_secret=settings.stripe_webhook_secret)


@lru_cache
def get_playfab_service(
    settings: WebhookSettings = Depends(get_settings),
) -> PlayFabService:
    """Get cached PlayFabService for the configured title."""
    return PlayFabService(settings)


def get_webhook_handler(
    settings: WebhookSettings = Depends(get_settings),
    stripe_service: StripeService = Depends(get_stripe_service),
    playfab_service: PlayFabService = Depends(get_playfab_service),
) -> WebhookHandler:
    """Compose the WebhookHandler for a request."""
    return WebhookHandler(
        settings=settings,
        stripe_service=stripe_service,
        playfab_service=playfab_service,
    )


def reset_dependencies() -> None:
    """Clear all cached settings and service instances."""
    get_settings.cache_clear()
    get_stripe_service.cache_clear()
    get_playfab_service.cache_clear()
