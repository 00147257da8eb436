from email.message import EmailMessage
from email.utils import formataddr
from typing import Optional
import logging

import aiosmtplib

from app.core.config import settings
from app.core.exceptions import NotifierError

logger = logging.getLogger(__name__)


class Notifier:
    """Outbound email capability injected into the OTP issuer"""

    async def send(self, to_email: str, subject: str, body: str, html: Optional[str] = None) -> None:
        """Deliver one message; raise NotifierError when delivery fails"""
        raise NotImplementedError


class SMTPNotifier(Notifier):
    """Delivers email through an SMTP relay"""

    def __init__(
        self,
        hostname: str,
        port: int = 587,
        username: Optional[str] = None,
        password: Optional[str] = None,
        start_tls: bool = True,
        sender: str = settings.EMAIL_FROM,
        sender_name: str = settings.EMAIL_FROM_NAME,
    ):
        self.hostname = hostname
        self.port = port
        self.username = username
        self.password = password
        self.start_tls = start_tls
        self.sender = sender
        self.sender_name = sender_name

    def build_message(self, to_email: str, subject: str, body: str, html: Optional[str] = None) -> EmailMessage:
        message = EmailMessage()
        message["From"] = formataddr((self.sender_name, self.sender))
        message["To"] = to_email
        message["Subject"] = subject
        message.set_content(body)
        if html:
            message.add_alternative(html, subtype="html")
        return message

    async def send(self, to_email: str, subject: str, body: str, html: Optional[str] = None) -> None:
        message = self.build_message(to_email, subject, body, html)
        try:
            await aiosmtplib.send(
                message,
                hostname=self.hostname,
                port=self.port,
                username=self.username,
                password=self.password,
                start_tls=self.start_tls,
                timeout=10,
            )
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.error(f"SMTP delivery to {to_email} failed: {e}")
            raise NotifierError() from e

        logger.info(f"Email sent to {to_email}")


class ConsoleNotifier(Notifier):
    """Writes messages to the log instead of sending them (local development)"""

    async def send(self, to_email: str, subject: str, body: str, html: Optional[str] = None) -> None:
        logger.warning(f"SMTP_HOST not configured, email to {to_email} not sent: {subject}\n{body}")


def build_notifier() -> Notifier:
    """Select the notifier for the configured environment"""
    if settings.SMTP_HOST:
        return SMTPNotifier(
            hostname=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            username=settings.SMTP_USERNAME,
            password=settings.SMTP_PASSWORD,
            start_tls=settings.SMTP_START_TLS,
        )
    return ConsoleNotifier()
