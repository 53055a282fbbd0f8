import asyncio
import logging
from email.message import EmailMessage
from typing import Protocol

import aiosmtplib
from botocore.exceptions import BotoCoreError, ClientError

from core.exceptions import DeliveryError
from models.donation import OutboundEmail

logger = logging.getLogger(__name__)


class MailTransport(Protocol):
    async def send(self, message: OutboundEmail) -> None:
        """Deliver one message or raise DeliveryError."""
        ...


class SmtpMailTransport:
    def __init__(
        self,
        host: str,
        port: int,
        username: str | None = None,
        password: str | None = None,
        start_tls: bool = True
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.start_tls = start_tls

    @staticmethod
    def to_mime(message: OutboundEmail) -> EmailMessage:
        mime = EmailMessage()
        mime["From"] = message.sender
        mime["To"] = message.recipient
        mime["Subject"] = message.subject
        mime.set_content("Thank you for your donation! Please view this message in an HTML-capable mail client.")
        mime.add_alternative(message.html, subtype="html")
        return mime

    async def send(self, message: OutboundEmail) -> None:
        try:
            await aiosmtplib.send(
                self.to_mime(message),
                hostname=self.host,
                port=self.port,
                username=self.username,
                password=self.password,
                start_tls=self.start_tls,
            )
        except aiosmtplib.SMTPException as e:
            raise DeliveryError(f"SMTP delivery to {message.recipient} failed: {e}") from e
        except OSError as e:
            raise DeliveryError(f"Could not reach SMTP server {self.host}:{self.port}: {e}") from e


class SesMailTransport:
    def __init__(self, client):
        self.ses_client = client

    def _send_email(self, message: OutboundEmail) -> None:
        self.ses_client.send_email(
            Source=message.sender,
            Destination={'ToAddresses': [message.recipient]},
            Message={
                'Subject': {'Data': message.subject},
                'Body': {'Html': {'Data': message.html, 'Charset': 'UTF-8'}}
            }
        )

    async def send(self, message: OutboundEmail) -> None:
        try:
            await asyncio.to_thread(self._send_email, message)
        except ClientError as e:
            code = e.response.get('Error', {}).get('Code', 'Unknown')
            raise DeliveryError(f"SES rejected message to {message.recipient} ({code}): {e}") from e
        except BotoCoreError as e:
            raise DeliveryError(f"SES delivery to {message.recipient} failed: {e}") from e
