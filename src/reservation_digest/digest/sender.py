"""Email delivery.

Every transport exposes ``async deliver(recipient, subject, html, text)`` and
raises on failure. ``send_digest`` wraps any failure into a DispatchError.
"""

import asyncio
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Protocol

import httpx

from ..config import Config
from ..errors import DispatchError
from ..models import DigestType
from .generator import build_subject

logger = logging.getLogger(__name__)


class EmailTransport(Protocol):
    async def deliver(self, recipient: str, subject: str, html: str, text: str) -> None:
        ...


class LoggingTransport:
    """Logs the email instead of sending it."""

    async def deliver(self, recipient: str, subject: str, html: str, text: str) -> None:
        logger.info(f"Sending email to {recipient}:")
        logger.info(f"Subject: {subject}")
        logger.info(f"Content: {html[:200]}...")


class SmtpTransport:
    """Email sending via SMTP over SSL."""

    def __init__(self, host: str, port: int, username: str, password: str, sender: str = ""):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.sender = sender or username

    def _send(self, recipient: str, subject: str, html: str, text: str):
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.sender
        msg["To"] = recipient

        # Attach text and HTML parts
        msg.attach(MIMEText(text, "plain", "utf-8"))
        msg.attach(MIMEText(html, "html", "utf-8"))

        with smtplib.SMTP_SSL(self.host, self.port) as server:
            server.login(self.username, self.password)
            server.sendmail(self.sender, recipient, msg.as_string())

    async def deliver(self, recipient: str, subject: str, html: str, text: str) -> None:
        # smtplib blocks, so each send runs in the default executor
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._send, recipient, subject, html, text)
        logger.info(f"Email sent successfully to {recipient}")


class HttpApiTransport:
    """Email sending through a JSON HTTP API (Resend, SendGrid-style)."""

    def __init__(self, api_url: str, api_key: str, sender: str = "", client: httpx.AsyncClient | None = None):
        self.api_url = api_url
        self.api_key = api_key
        self.sender = sender
        self._client = client

    async def deliver(self, recipient: str, subject: str, html: str, text: str) -> None:
        payload = {"to": recipient, "subject": subject, "html": html, "text": text}
        if self.sender:
            payload["from"] = self.sender
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }

        if self._client is not None:
            response = await self._client.post(self.api_url, json=payload, headers=headers)
        else:
            async with httpx.AsyncClient(timeout=30.0) as client:
                response = await client.post(self.api_url, json=payload, headers=headers)

        response.raise_for_status()
        logger.info(f"Email accepted by API for {recipient}")


def get_transport(config: Config) -> EmailTransport:
    """Build the transport selected by EMAIL_TRANSPORT."""
    name = config.email_transport
    if name == "log":
        return LoggingTransport()
    if name == "smtp":
        if not config.smtp_username or not config.smtp_password:
            raise ValueError("EMAIL_TRANSPORT=smtp requires SMTP_USERNAME and SMTP_PASSWORD")
        return SmtpTransport(
            host=config.smtp_host,
            port=config.smtp_port,
            username=config.smtp_username,
            password=config.smtp_password,
            sender=config.email_from,
        )
    if name == "http":
        if not config.email_api_url or not config.email_api_key:
            raise ValueError("EMAIL_TRANSPORT=http requires EMAIL_API_URL and EMAIL_API_KEY")
        return HttpApiTransport(
            api_url=config.email_api_url,
            api_key=config.email_api_key,
            sender=config.email_from,
        )
    raise ValueError(f"Unknown EMAIL_TRANSPORT: {name!r}")


async def send_digest(
    transport: EmailTransport,
    recipient: str,
    html: str,
    text: str,
    digest_type: DigestType,
    branding: dict,
) -> None:
    """Deliver one digest email. Raises DispatchError on any failure."""
    if not recipient:
        raise DispatchError("<no address>", "recipient has no email address")

    subject = build_subject(digest_type, branding)
    try:
        await transport.deliver(recipient, subject, html, text)
    except Exception as e:
        raise DispatchError(recipient, str(e) or type(e).__name__) from e
