import boto3
import httpx
from fastapi import Request

from core.config import Settings
from data_access.dynamodb import DynamoIdempotencyStore
from data_access.idempotency import IdempotencyStore, InMemoryIdempotencyStore
from services.content_generator import ContentGenerator
from services.fulfillment_service import FulfillmentService
from services.mail_transport import MailTransport, SesMailTransport, SmtpMailTransport
from services.notification_service import NotificationService
from services.paypal_client import PayPalWebhookVerifier


def get_boto_session(settings: Settings) -> boto3.Session:
    return boto3.Session(region_name=settings.AWS_REGION)

def build_mail_transport(settings: Settings) -> MailTransport:
    if settings.MAIL_TRANSPORT == "ses":
        ses_client = get_boto_session(settings).client('ses')
        return SesMailTransport(client=ses_client)
    return SmtpMailTransport(
        host=settings.SMTP_HOST,
        port=settings.SMTP_PORT,
        username=settings.SMTP_USER,
        password=settings.SMTP_PASS,
        start_tls=settings.SMTP_START_TLS
    )

def build_idempotency_store(settings: Settings) -> IdempotencyStore:
    if settings.IDEMPOTENCY_TABLE_NAME:
        dynamo_resource = get_boto_session(settings).resource('dynamodb')
        table = dynamo_resource.Table(settings.IDEMPOTENCY_TABLE_NAME)
        return DynamoIdempotencyStore(table=table, claim_ttl_seconds=settings.IDEMPOTENCY_CLAIM_TTL_SECONDS)
    return InMemoryIdempotencyStore()

def build_http_client() -> httpx.AsyncClient:
    # No client-level timeout; each call is bounded by its own asyncio.wait_for.
    return httpx.AsyncClient(timeout=None)

def build_fulfillment_service(settings: Settings, http_client: httpx.AsyncClient) -> FulfillmentService:
    content_generator = ContentGenerator(
        http_client=http_client,
        api_key=settings.GEMINI_API_KEY,
        model=settings.GEMINI_MODEL,
        api_base=settings.GEMINI_API_BASE,
        timeout_seconds=settings.GENERATION_TIMEOUT_SECONDS
    )
    notification_service = NotificationService(
        transport=build_mail_transport(settings),
        from_email=settings.EMAIL_FROM,
        from_name=settings.EMAIL_FROM_NAME,
        timeout_seconds=settings.DELIVERY_TIMEOUT_SECONDS
    )
    return FulfillmentService(
        content_generator=content_generator,
        notification_service=notification_service,
        idempotency_store=build_idempotency_store(settings)
    )

def build_webhook_verifier(settings: Settings, http_client: httpx.AsyncClient) -> PayPalWebhookVerifier | None:
    if not settings.webhook_verification_enabled:
        return None
    return PayPalWebhookVerifier(
        http_client=http_client,
        client_id=settings.PAYPAL_CLIENT_ID,
        client_secret=settings.PAYPAL_CLIENT_SECRET,
        webhook_id=settings.PAYPAL_WEBHOOK_ID,
        api_base=settings.PAYPAL_API_BASE
    )


# Request-scoped accessors for handles built once in the app lifespan.

def get_fulfillment_service(request: Request) -> FulfillmentService:
    return request.app.state.fulfillment_service

def get_webhook_verifier(request: Request) -> PayPalWebhookVerifier | None:
    return getattr(request.app.state, "webhook_verifier", None)
