import json
import logging
from typing import Any

from pydantic import ValidationError

from core.exceptions import EventValidationError
from models.donation import CAPTURE_COMPLETED, CaptureResource, DonorIntent, ValidatedDonation
from models.results import Ignored, IngestionResult, Invalid

logger = logging.getLogger(__name__)


def _describe(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "<root>"
        parts.append(f"{location}: {error['msg']}")
    return "; ".join(parts)


def _invalid(reason: str) -> Invalid:
    return Invalid(error=EventValidationError(reason))


def parse_donor_intent(custom_id: str) -> DonorIntent:
    """Decode the JSON donor metadata stored in a purchase unit's custom_id."""
    try:
        data = json.loads(custom_id)
    except json.JSONDecodeError as e:
        raise EventValidationError(f"custom_id is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise EventValidationError("custom_id must encode a JSON object")

    try:
        return DonorIntent.model_validate(data)
    except ValidationError as e:
        raise EventValidationError(f"donor metadata is incomplete: {_describe(e)}") from e


def ingest(raw_event: Any) -> IngestionResult:
    """
    Classify a raw PayPal webhook body.

    Events other than a completed capture are Ignored. A completed capture
    becomes a ValidatedDonation when the capture id, amount and the donor
    metadata in purchase_units[0].custom_id are all present and well formed,
    otherwise Invalid.
    """
    if not isinstance(raw_event, dict):
        return _invalid("webhook body must be a JSON object")

    event_type = raw_event.get("event_type")
    if event_type != CAPTURE_COMPLETED:
        return Ignored(event_type=None if event_type is None else str(event_type))

    resource = raw_event.get("resource")
    if not isinstance(resource, dict):
        return _invalid("event has no resource object")

    try:
        capture = CaptureResource.model_validate(resource)
    except ValidationError as e:
        return _invalid(f"capture resource is malformed: {_describe(e)}")

    try:
        donor = parse_donor_intent(capture.purchase_units[0].custom_id)
    except EventValidationError as e:
        return Invalid(error=e)

    event_id = raw_event.get("id")
    return ValidatedDonation(
        capture_id=capture.id,
        amount=capture.amount.value,
        donor=donor,
        event_id=event_id if isinstance(event_id, str) else None,
    )
