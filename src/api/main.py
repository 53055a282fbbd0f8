from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from mangum import Mangum

from api import routers
from core.config import Settings, get_settings
from core.dependencies import build_fulfillment_service, build_http_client, build_webhook_verifier
from core.logging_config import configure_logging
from services.fulfillment_service import FulfillmentService
from services.paypal_client import PayPalWebhookVerifier


def create_app(
    settings: Settings | None = None,
    fulfillment_service: FulfillmentService | None = None,
    webhook_verifier: PayPalWebhookVerifier | None = None
) -> FastAPI:
    """
    Build the API. Collaborators passed in are used as-is; anything missing
    is built from settings when the app starts.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        async with build_http_client() as http_client:
            if app.state.fulfillment_service is None:
                app.state.fulfillment_service = build_fulfillment_service(settings, http_client)
            if app.state.webhook_verifier is None:
                app.state.webhook_verifier = build_webhook_verifier(settings, http_client)
            yield

    app = FastAPI(title="HopeSpring Donation Fulfillment", lifespan=lifespan)
    app.state.settings = settings
    app.state.fulfillment_service = fulfillment_service
    app.state.webhook_verifier = webhook_verifier

    @app.get("/")
    def read_root():
        return {"message": "Welcome to the HopeSpring Donation Fulfillment API"}

    app.include_router(routers.router)
    return app


app = create_app()

handler = Mangum(app)


def run() -> None:
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.PORT)


if __name__ == "__main__":
    run()
