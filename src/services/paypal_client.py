import asyncio
import logging
from typing import Any, Mapping

import httpx

from core.exceptions import WebhookVerificationError

logger = logging.getLogger(__name__)

# Transmission headers PayPal attaches to every webhook delivery.
TRANSMISSION_HEADERS = {
    "auth_algo": "paypal-auth-algo",
    "cert_url": "paypal-cert-url",
    "transmission_id": "paypal-transmission-id",
    "transmission_sig": "paypal-transmission-sig",
    "transmission_time": "paypal-transmission-time",
}


class PayPalWebhookVerifier:
    """Confirms webhook authenticity with PayPal's verify-webhook-signature API."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        client_id: str,
        client_secret: str,
        webhook_id: str,
        api_base: str = "https://api-m.sandbox.paypal.com",
        timeout_seconds: float = 10.0
    ):
        self.http_client = http_client
        self.client_id = client_id
        self.client_secret = client_secret
        self.webhook_id = webhook_id
        self.api_base = api_base.rstrip("/")
        self.timeout_seconds = timeout_seconds

    async def _access_token(self) -> str:
        response = await self.http_client.post(
            f"{self.api_base}/v1/oauth2/token",
            data={"grant_type": "client_credentials"},
            auth=(self.client_id, self.client_secret),
        )
        response.raise_for_status()
        return response.json()["access_token"]

    async def _verify(self, headers: Mapping[str, str], event: dict[str, Any]) -> str:
        body = {"webhook_id": self.webhook_id, "webhook_event": event}
        for field, header in TRANSMISSION_HEADERS.items():
            value = headers.get(header)
            if not value:
                raise WebhookVerificationError(f"Missing {header} header")
            body[field] = value

        token = await self._access_token()
        response = await self.http_client.post(
            f"{self.api_base}/v1/notifications/verify-webhook-signature",
            json=body,
            headers={"Authorization": f"Bearer {token}"},
        )
        response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, dict):
            raise WebhookVerificationError("PayPal returned a non-object verification response")
        return payload.get("verification_status", "")

    async def verify(self, headers: Mapping[str, str], event: dict[str, Any]) -> None:
        """Raise WebhookVerificationError unless PayPal reports SUCCESS."""
        try:
            status = await asyncio.wait_for(self._verify(headers, event), timeout=self.timeout_seconds)
        except WebhookVerificationError:
            raise
        except asyncio.TimeoutError as e:
            raise WebhookVerificationError("PayPal signature verification timed out") from e
        except (httpx.HTTPError, KeyError, TypeError, ValueError) as e:
            raise WebhookVerificationError(f"PayPal signature verification failed: {e!r}") from e

        if status != "SUCCESS":
            raise WebhookVerificationError(f"PayPal reported verification_status={status!r}")
