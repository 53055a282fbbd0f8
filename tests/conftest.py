"""
Shared fixtures. Every external collaborator (Gemini, SMTP/SES, PayPal) is
faked; no test touches the network.
"""

import asyncio
import json
import os

import httpx
import pytest

# Keep a developer's .env or shell from switching transports under the tests.
for _var in ("MAIL_TRANSPORT", "IDEMPOTENCY_TABLE_NAME", "PAYPAL_WEBHOOK_ID"):
    os.environ.pop(_var, None)

from core.exceptions import DeliveryError
from data_access.idempotency import InMemoryIdempotencyStore
from models.donation import CAPTURE_COMPLETED
from services.content_generator import ContentGenerator
from services.fulfillment_service import FulfillmentService
from services.notification_service import NotificationService


class RecordingTransport:
    """Mail transport that keeps every message it is asked to send."""

    def __init__(self, fail: bool = False, delay: float = 0):
        self.fail = fail
        self.delay = delay
        self.sent = []
        self.attempts = 0

    async def send(self, message) -> None:
        self.attempts += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise DeliveryError("550 recipient rejected")
        self.sent.append(message)


class GeminiStub:
    """httpx handler standing in for the generateContent endpoint."""

    def __init__(self, text: str | None = "Thank you, Ada, for lighting up a classroom!", status_code: int = 200):
        self.text = text
        self.status_code = status_code
        self.error: Exception | None = None
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if self.text is None:
            return httpx.Response(self.status_code, json={"candidates": []})
        return httpx.Response(
            self.status_code,
            json={"candidates": [{"content": {"parts": [{"text": f"  {self.text}\n"}]}}]},
        )

    @property
    def calls(self) -> int:
        return len(self.requests)

    def last_prompt(self) -> str:
        body = json.loads(self.requests[-1].content)
        return body["contents"][0]["parts"][0]["text"]


def make_capture_event(
    custom_id: str | None = None,
    amount: str = "25.00",
    capture_id: str = "CAP-8F2A",
    event_type: str = CAPTURE_COMPLETED,
) -> dict:
    """Build a minimal PAYMENT.CAPTURE.COMPLETED webhook body."""
    if custom_id is None:
        custom_id = json.dumps({"name": "Ada", "email": "ada@x.com"})
    return {
        "id": "WH-EVT-1",
        "event_type": event_type,
        "resource": {
            "id": capture_id,
            "status": "COMPLETED",
            "amount": {"currency_code": "USD", "value": amount},
            "purchase_units": [{"custom_id": custom_id}],
        },
    }


@pytest.fixture
def capture_event():
    return make_capture_event


@pytest.fixture
def gemini():
    return GeminiStub()


@pytest.fixture
def make_gemini():
    return GeminiStub


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def failing_transport():
    return RecordingTransport(fail=True)


@pytest.fixture
def make_transport():
    return RecordingTransport


@pytest.fixture
def make_generator():
    def _make(stub: GeminiStub, api_key: str | None = "test-key", timeout_seconds: float = 5.0) -> ContentGenerator:
        client = httpx.AsyncClient(transport=httpx.MockTransport(stub))
        return ContentGenerator(client, api_key=api_key, timeout_seconds=timeout_seconds)
    return _make


@pytest.fixture
def make_service(make_generator):
    def _make(stub: GeminiStub, mail_transport: RecordingTransport, store=None) -> FulfillmentService:
        return FulfillmentService(
            content_generator=make_generator(stub),
            notification_service=NotificationService(mail_transport, from_email="donations@hopespring.org"),
            idempotency_store=store or InMemoryIdempotencyStore(),
        )
    return _make
