import asyncio
import logging

from core.exceptions import DeliveryError
from models.donation import OutboundEmail
from models.results import DispatchResult, Failed, Sent
from services.email_templates import RECEIPT_SUBJECT, render_receipt_html
from services.mail_transport import MailTransport

logger = logging.getLogger(__name__)

class NotificationService:
    def __init__(
        self,
        transport: MailTransport,
        from_email: str,
        from_name: str = "HopeSpring Foundation",
        timeout_seconds: float = 15.0
    ):
        self.transport = transport
        self.sender = f'"{from_name}" <{from_email}>'
        self.timeout_seconds = timeout_seconds

    def build_receipt(
        self, donor_email: str, donor_name: str, amount: str, transaction_id: str, acknowledgement: str
    ) -> OutboundEmail:
        return OutboundEmail(
            sender=self.sender,
            recipient=donor_email,
            subject=RECEIPT_SUBJECT,
            html=render_receipt_html(donor_name, amount, transaction_id, acknowledgement),
        )

    async def dispatch(
        self, donor_email: str, donor_name: str, amount: str, transaction_id: str, acknowledgement: str
    ) -> DispatchResult:
        """Send one receipt email. No retry: a transport failure comes back as Failed."""
        message = self.build_receipt(donor_email, donor_name, amount, transaction_id, acknowledgement)

        logger.info(f"Attempting to send receipt to {donor_email}...", extra={"capture_id": transaction_id})
        try:
            await asyncio.wait_for(self.transport.send(message), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            error = DeliveryError(f"Mail transport timed out after {self.timeout_seconds}s")
            logger.error(f"Failed to send receipt to {donor_email}: {error}", extra={"capture_id": transaction_id})
            return Failed(recipient=donor_email, error=error)
        except DeliveryError as error:
            logger.error(f"Failed to send receipt to {donor_email}: {error}", extra={"capture_id": transaction_id})
            return Failed(recipient=donor_email, error=error)

        logger.info(f"Successfully sent receipt to {donor_email}", extra={"capture_id": transaction_id})
        return Sent(recipient=donor_email)
