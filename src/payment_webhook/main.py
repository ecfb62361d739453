"""FastAPI application for the Stripe → PlayFab payment webhook.

Exposes:
- ``app``: ASGI application
- ``handler``: AWS Lambda entrypoint (Mangum)
- ``run_server``: local development server (uvicorn)
"""

from fastapi import FastAPI
from mangum import Mangum

from payment_webhook import __version__
from payment_webhook.dependencies import get_settings
from payment_webhook.exceptions import register_exception_handlers
from payment_webhook.middleware.correlation import CorrelationIdMiddleware
from payment_webhook.routes import webhooks_router
from payment_webhook.utils.logging import configure_logging


def create_app() -> FastAPI:
    """Build the FastAPI application.

    Settings are loaded (and cached) here so configuration problems surface
    at startup rather than on the first delivery.
    """
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Payment Webhook",
        description="Receives Stripe checkout events and fulfills purchases in PlayFab",
        version=__version__,
    )

    app.add_middleware(CorrelationIdMiddleware)
    register_exception_handlers(app)

    # /api/webhook matches the path registered in the Stripe dashboard
    app.include_router(webhooks_router, prefix="/api")

    return app


app = create_app()

# Lambda handler - Mangum wraps FastAPI for AWS Lambda + API Gateway
handler = Mangum(app, lifespan="off")


def run_server(host: str = "0.0.0.0", port: int = 8080, reload: bool = False) -> None:
    """Run the FastAPI server.

    Args:
        host: Host to bind to (default: 0.0.0.0)
        port: Port to listen on (default: 8080)
        reload: Enable hot reload for development (default: False)
    """
    import uvicorn

    if reload:
        # Use string reference for reload mode (uvicorn requirement)
        uvicorn.run("payment_webhook.main:app", host=host, port=port, reload=True)
    else:
        uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    run_server()
