# tasks/email_sender.py
"""
SMTP delivery for notification emails
Builds RFC-compliant multipart messages and sends them with aiosmtplib:
- implicit TLS on port 465, STARTTLS on port 587
- one connection per message, no retries
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Mapping, Optional
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr, formatdate

import aiosmtplib

from config.settings import SMTP_SERVICES

logger = logging.getLogger(__name__)


class EmailSenderError(Exception):
    """Base exception for email sending operations"""
    pass


class SMTPConfigurationError(EmailSenderError):
    """SMTP configuration related errors"""
    pass


@dataclass
class SMTPSettings:
    """Connection settings resolved from application config"""
    host: str
    port: int
    username: Optional[str]
    password: Optional[str]
    from_address: str
    from_name: str
    timeout: float = 30

    @property
    def domain(self) -> str:
        return self.from_address.rpartition('@')[2] or 'localhost'

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> 'SMTPSettings':
        service = (config.get('EMAIL_SERVICE') or 'gmail').lower()
        preset_host, preset_port = SMTP_SERVICES.get(service, (None, 587))

        host = config.get('EMAIL_HOST') or preset_host
        if not host:
            raise SMTPConfigurationError(
                f"Unknown EMAIL_SERVICE '{service}' and no EMAIL_HOST configured"
            )

        username = config.get('EMAIL_USER')
        return cls(
            host=host,
            port=int(config.get('EMAIL_PORT') or preset_port),
            username=username,
            password=config.get('EMAIL_PASSWORD'),
            from_address=username or '',
            from_name=config.get('SITE_NAME') or '',
            timeout=config.get('EMAIL_TIMEOUT', 30),
        )


def build_message(settings: SMTPSettings,
                  recipient: str,
                  subject: str,
                  html_body: str,
                  text_body: str,
                  reply_to: Optional[str] = None) -> MIMEMultipart:
    """Create a multipart/alternative message with text and HTML parts"""
    msg = MIMEMultipart('alternative')

    msg['Subject'] = subject
    msg['From'] = formataddr((settings.from_name, settings.from_address))
    msg['To'] = recipient
    msg['Date'] = formatdate(localtime=True)
    msg['Message-ID'] = f"<{uuid.uuid4()}@{settings.domain}>"

    if reply_to:
        msg['Reply-To'] = reply_to

    # Plain text first; clients pick the last part they can render
    msg.attach(MIMEText(text_body, 'plain', 'utf-8'))
    msg.attach(MIMEText(html_body, 'html', 'utf-8'))
    return msg


async def _async_send_smtp(msg: MIMEMultipart, settings: SMTPSettings) -> None:
    try:
        await aiosmtplib.send(
            msg,
            hostname=settings.host,
            port=settings.port,
            username=settings.username,
            password=settings.password,
            use_tls=settings.port == 465,  # Implicit TLS for port 465
            start_tls=True if settings.port == 587 else None,
            timeout=settings.timeout,
        )
    except aiosmtplib.SMTPException as e:
        raise EmailSenderError(f"SMTP delivery to {msg['To']} failed: {e}") from e


def send_email(settings: SMTPSettings, msg: MIMEMultipart) -> None:
    """
    Send one message synchronously

    Raises:
        EmailSenderError: when the SMTP exchange fails
    """
    logger.debug(f"Sending email to {msg['To']} via {settings.host}:{settings.port}")
    asyncio.run(_async_send_smtp(msg, settings))
