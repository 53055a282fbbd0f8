import logging
from enum import Enum
from typing import Any

from pydantic import BaseModel

from data_access.idempotency import IdempotencyStore
from models.donation import ValidatedDonation
from models.results import FellBack, Failed, Ignored, Invalid
from services.content_generator import ContentGenerator
from services.ingestion import ingest
from services.notification_service import NotificationService

logger = logging.getLogger(__name__)


class FulfillmentState(str, Enum):
    RECEIVED = "received"
    IGNORED = "ignored"
    VALIDATED = "validated"
    DUPLICATE = "duplicate"
    GENERATING = "generating"
    DISPATCHING = "dispatching"
    COMPLETED = "completed"
    FAILED = "failed"


ACKNOWLEDGED_STATES = {FulfillmentState.IGNORED, FulfillmentState.DUPLICATE, FulfillmentState.COMPLETED}


class FulfillmentOutcome(BaseModel):
    state: FulfillmentState
    capture_id: str | None = None
    detail: str | None = None
    used_fallback: bool = False

    @property
    def acknowledged(self) -> bool:
        """Whether the webhook should be answered with a success status."""
        return self.state in ACKNOWLEDGED_STATES


class FulfillmentService:
    """
    Runs one payment webhook through ingestion, acknowledgement generation and
    receipt delivery. Holds no per-event state; concurrent events only share
    the injected collaborators.
    """

    def __init__(
        self,
        content_generator: ContentGenerator,
        notification_service: NotificationService,
        idempotency_store: IdempotencyStore
    ):
        self.content_generator = content_generator
        self.notification_service = notification_service
        self.idempotency_store = idempotency_store

    async def handle_payment_event(self, raw_event: Any) -> FulfillmentOutcome:
        logger.debug("Payment event received.", extra={"state": FulfillmentState.RECEIVED.value})
        result = ingest(raw_event)

        if isinstance(result, Ignored):
            logger.info(f"Received unhandled event type: {result.event_type}", extra={"event_type": result.event_type})
            return FulfillmentOutcome(state=FulfillmentState.IGNORED, detail=result.event_type)

        if isinstance(result, Invalid):
            logger.warning(
                f"Rejected malformed payment event: {result.reason}",
                extra={"event_id": raw_event.get("id") if isinstance(raw_event, dict) else None},
            )
            return FulfillmentOutcome(state=FulfillmentState.FAILED, detail=result.reason)

        return await self._fulfill(result)

    async def _fulfill(self, donation: ValidatedDonation) -> FulfillmentOutcome:
        capture_id = donation.capture_id
        context = {"capture_id": capture_id, "event_id": donation.event_id}
        logger.debug("Event validated.", extra={**context, "state": FulfillmentState.VALIDATED.value})
        logger.info(f"Processing donation: {donation.amount} from {donation.donor.name} ({donation.donor.email})", extra=context)

        if not await self.idempotency_store.claim(capture_id):
            logger.info(f"Skipped duplicate processing for capture {capture_id}.", extra=context)
            return FulfillmentOutcome(state=FulfillmentState.DUPLICATE, capture_id=capture_id)

        try:
            logger.debug("Generating acknowledgement.", extra={**context, "state": FulfillmentState.GENERATING.value})
            acknowledgement = await self.content_generator.generate(
                donation.donor.name, donation.amount, donation.donor.message
            )

            logger.debug("Dispatching receipt.", extra={**context, "state": FulfillmentState.DISPATCHING.value})
            dispatch = await self.notification_service.dispatch(
                donor_email=donation.donor.email,
                donor_name=donation.donor.name,
                amount=donation.amount,
                transaction_id=capture_id,
                acknowledgement=acknowledgement.text,
            )
        except BaseException:
            # Crash or cancellation mid-flight: free the claim so a redelivery can retry.
            await self.idempotency_store.release(capture_id)
            raise
        used_fallback = isinstance(acknowledgement, FellBack)

        if isinstance(dispatch, Failed):
            await self.idempotency_store.release(capture_id)
            logger.error(f"Fulfillment failed for capture {capture_id}: {dispatch.error}", extra=context)
            return FulfillmentOutcome(
                state=FulfillmentState.FAILED,
                capture_id=capture_id,
                detail=str(dispatch.error),
                used_fallback=used_fallback,
            )

        try:
            await self.idempotency_store.complete(capture_id)
        except Exception:
            # The receipt is already out; the in-progress claim blocks redelivery until it expires.
            logger.exception(f"Could not mark capture {capture_id} as completed.", extra=context)

        logger.info(f"Successfully processed payment {capture_id} (fallback acknowledgement: {used_fallback}).", extra=context)
        return FulfillmentOutcome(state=FulfillmentState.COMPLETED, capture_id=capture_id, used_fallback=used_fallback)
