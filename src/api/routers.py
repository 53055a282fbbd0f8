from fastapi import (
    APIRouter, 
    Request, 
    Depends, 
    HTTPException
)
from fastapi.responses import PlainTextResponse
import json
import logging

from core.dependencies import get_fulfillment_service, get_webhook_verifier
from core.exceptions import WebhookVerificationError
from api.schemas import WebhookAck
from services.fulfillment_service import FulfillmentService
from services.paypal_client import PayPalWebhookVerifier

router = APIRouter()
logger = logging.getLogger(__name__)

WEBHOOK_PATH = "/webhooks/payment-events"
LIVENESS_BODY = "Webhook endpoint is active and listening for POST requests."


@router.get(WEBHOOK_PATH, response_class=PlainTextResponse)
def webhook_liveness():
    logger.info("Received a GET request to the webhook URL for validation.")
    return LIVENESS_BODY


@router.post(WEBHOOK_PATH, response_model=WebhookAck)
async def handle_payment_webhook(
    request: Request,
    fulfillment_service: FulfillmentService = Depends(get_fulfillment_service),
    verifier: PayPalWebhookVerifier | None = Depends(get_webhook_verifier)
):
    """
    Receives PayPal webhook events and fulfills completed captures inline.
    Answers 200 when the event was handled or deliberately skipped, and 500
    when the donor metadata was invalid or the receipt could not be sent.
    """
    try:
        event = json.loads(await request.body())
    except ValueError as e:
        logger.warning(f"Webhook invalid payload: {e}")
        raise HTTPException(status_code=400, detail="Invalid payload")

    if verifier is not None:
        try:
            await verifier.verify(request.headers, event)
        except WebhookVerificationError as e:
            logger.warning(f"Webhook signature verification failed: {e}")
            raise HTTPException(status_code=400, detail="Invalid signature")

    try:
        outcome = await fulfillment_service.handle_payment_event(event)
    except Exception as e:
        logger.exception(f"Webhook internal error: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

    if not outcome.acknowledged:
        raise HTTPException(status_code=500, detail=f"Fulfillment failed: {outcome.detail}")

    return WebhookAck(status=outcome.state.value, capture_id=outcome.capture_id)
