"""Pytest configuration and fixtures for the payment webhook tests.

This module provides reusable fixtures for testing:
- Settings with test secrets
- Stripe-format signature helpers
- A stubbed PlayFab API built on httpx.MockTransport
- A TestClient wired to the stubs via dependency overrides
"""

import hashlib
import hmac
import json
import os
import time
from collections.abc import Callable
from typing import Any, Generator

import httpx
import pytest

# === Environment Setup ===

# Set before the app is imported; main.create_app() reads settings at import
os.environ.setdefault("AWS_DEFAULT_REGION", "eu-west-1")
if not os.environ.get("AWS_PROFILE") and not os.environ.get("AWS_ACCESS_KEY_ID"):
    os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
    os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")

from fastapi.testclient import TestClient  # noqa: E402

from payment_webhook.config import WebhookSettings  # noqa: E402
from payment_webhook.dependencies import (  # noqa: E402
    get_playfab_service,
    get_settings,
    reset_dependencies,
)
from payment_webhook.services.playfab_service import PlayFabService  # noqa: E402

# === Test Configuration ===

TEST_STRIPE_SECRET_KEY = "sk_test_abc123xyz"
TEST_WEBHOOK_SECRET = "whsec_test_secret_for_testing"
TEST_TITLE_ID = "A1B2C"
TEST_PLAYFAB_SECRET_KEY = "playfab_secret_key_test"
TEST_TRANSACTION_ID = "order_42_1712345678"
TEST_PLAYER_ID = "42"


# === Helper Functions ===


def create_stripe_signature(
    payload: bytes,
    secret: str = TEST_WEBHOOK_SECRET,
    timestamp: int | None = None,
) -> str:
    """Create a valid Stripe webhook signature.

    Stripe signatures use HMAC-SHA256 with format: t={timestamp},v1={signature}
    """
    ts = str(timestamp if timestamp is not None else int(time.time()))
    signed_payload = f"{ts}.{payload.decode('utf-8')}"
    signature = hmac.new(
        secret.encode("utf-8"),
        signed_payload.encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()
    return f"t={ts},v1={signature}"


def create_checkout_completed_event(
    event_id: str = "evt_1ABC123DEF456",
    client_reference_id: str | None = TEST_TRANSACTION_ID,
    payment_intent: str | None = "pi_3ABC123DEF456",
    payment_status: str = "paid",
) -> dict[str, Any]:
    """Create a checkout.session.completed webhook event."""
    session: dict[str, Any] = {
        "id": "cs_test_abc123",
        "object": "checkout.session",
        "payment_intent": payment_intent,
        "payment_status": payment_status,
        "amount_total": 499,
        "currency": "usd",
        "metadata": {},
    }
    if client_reference_id is not None:
        session["client_reference_id"] = client_reference_id

    return {
        "id": event_id,
        "object": "event",
        "type": "checkout.session.completed",
        "created": int(time.time()),
        "data": {"object": session},
    }


def create_unhandled_event(event_id: str = "evt_3GHI789JKL012") -> dict[str, Any]:
    """Create an event type this service does not act on."""
    return {
        "id": event_id,
        "object": "event",
        "type": "payment_intent.created",
        "created": int(time.time()),
        "data": {"object": {"id": "pi_test", "object": "payment_intent"}},
    }


def function_result_body(success: bool, message: str | None = None) -> dict[str, Any]:
    """ExecuteCloudScript success envelope carrying a FunctionResult."""
    result: dict[str, Any] = {"success": success}
    if message is not None:
        result["message"] = message
    return {
        "code": 200,
        "status": "OK",
        "data": {
            "FunctionName": "ProcessStripeWebhook",
            "Revision": 7,
            "FunctionResult": result,
            "ExecutionTimeSeconds": 0.01,
        },
    }


class PlayFabStub:
    """Records ExecuteCloudScript calls and replies with a canned response."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.responder: Callable[[httpx.Request], httpx.Response] = lambda request: (
            httpx.Response(200, json=function_result_body(True))
        )

    def reply_with(self, status_code: int = 200, **kwargs: Any) -> None:
        self.responder = lambda request: httpx.Response(status_code, **kwargs)

    def raise_error(self, exc: Exception) -> None:
        def _raise(request: httpx.Request) -> httpx.Response:
            raise exc

        self.responder = _raise

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._handle)

    @property
    def call_count(self) -> int:
        return len(self.requests)

    def last_json(self) -> dict[str, Any]:
        return json.loads(self.requests[-1].content)


# === Fixtures ===


@pytest.fixture(autouse=True)
def reset_cached_dependencies() -> Generator[None, None, None]:
    """Clear lru_cache'd settings and services around each test."""
    reset_dependencies()
    yield
    reset_dependencies()


@pytest.fixture
def settings() -> WebhookSettings:
    """Fully configured settings."""
    return WebhookSettings(
        stripe_secret_key=TEST_STRIPE_SECRET_KEY,
        stripe_webhook_secret=TEST_WEBHOOK_SECRET,
        playfab_title_id=TEST_TITLE_ID,
        playfab_secret_key=TEST_PLAYFAB_SECRET_KEY,
    )


@pytest.fixture
def playfab_stub() -> PlayFabStub:
    return PlayFabStub()


@pytest.fixture
def playfab_service(settings: WebhookSettings, playfab_stub: PlayFabStub) -> PlayFabService:
    return PlayFabService(settings, transport=playfab_stub.transport)


@pytest.fixture
def client(
    settings: WebhookSettings,
    playfab_service: PlayFabService,
) -> Generator[TestClient, None, None]:
    """TestClient with settings and PlayFab replaced by test doubles."""
    from payment_webhook.main import app

    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_playfab_service] = lambda: playfab_service
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def post_event(client: TestClient) -> Callable[..., httpx.Response]:
    """POST a signed event to the webhook endpoint."""

    def _post(
        event: dict[str, Any],
        *,
        secret: str = TEST_WEBHOOK_SECRET,
        signature: str | None = None,
    ) -> httpx.Response:
        payload = json.dumps(event).encode("utf-8")
        sig = signature if signature is not None else create_stripe_signature(payload, secret)
        return client.post(
            "/api/webhook",
            content=payload,
            headers={"Content-Type": "application/json", "Stripe-Signature": sig},
        )

    return _post
