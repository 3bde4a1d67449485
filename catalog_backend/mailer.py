"""
Contact-form mailer.

Renders the contact / product-inquiry message with Jinja2 and hands it to a
pluggable backend: console (development, default) or SMTP via aiosmtplib.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from pathlib import Path
from typing import Optional

import aiosmtplib
from jinja2 import Environment, FileSystemLoader, select_autoescape

from catalog_backend.config import Settings

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"


@dataclass
class OutgoingEmail:
    to: str
    subject: str
    html_body: str
    text_body: str
    from_address: str
    from_name: str


class EmailBackend(ABC):
    """Abstract base class for email backends."""

    @abstractmethod
    async def send_email(self, email: OutgoingEmail) -> bool:
        """Send an email; returns True when the backend accepted it."""


@dataclass
class ConsoleEmailBackend(EmailBackend):
    """Logs emails instead of sending them and keeps them for inspection."""

    sent: list[OutgoingEmail] = field(default_factory=list)

    async def send_email(self, email: OutgoingEmail) -> bool:
        logger.info(
            "EMAIL (console) to=%s from=%s <%s> subject=%s\n%s",
            email.to,
            email.from_name,
            email.from_address,
            email.subject,
            email.text_body,
        )
        self.sent.append(email)
        return True


class SMTPEmailBackend(EmailBackend):
    """Sends through an SMTP server; port 465 uses implicit TLS, others STARTTLS."""

    def __init__(
        self,
        host: str,
        port: int,
        username: Optional[str],
        password: Optional[str],
        use_tls: bool = True,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls

    async def send_email(self, email: OutgoingEmail) -> bool:
        message = MIMEMultipart("alternative")
        message["From"] = f"{email.from_name} <{email.from_address}>"
        message["To"] = email.to
        message["Subject"] = email.subject
        message.attach(MIMEText(email.text_body, "plain"))
        message.attach(MIMEText(email.html_body, "html"))

        implicit_tls = self.use_tls and self.port == 465
        try:
            await aiosmtplib.send(
                message,
                hostname=self.host,
                port=self.port,
                username=self.username,
                password=self.password,
                use_tls=implicit_tls,
                start_tls=self.use_tls and not implicit_tls,
            )
        except aiosmtplib.SMTPException as exc:
            logger.error("Failed to send email via SMTP: %s", exc)
            return False
        logger.info("Email sent via SMTP to %s", email.to)
        return True


def create_backend(settings: Settings) -> EmailBackend:
    if settings.email_backend == "smtp":
        if not settings.smtp_host:
            raise ValueError("SMTP_HOST is required for the smtp email backend")
        return SMTPEmailBackend(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_username,
            password=settings.smtp_password,
            use_tls=settings.smtp_use_tls,
        )
    return ConsoleEmailBackend()


class ContactMailer:
    """Builds contact-form emails addressed to the site inbox."""

    def __init__(
        self,
        backend: EmailBackend,
        *,
        recipient: str,
        from_address: str,
        from_name: str,
    ):
        self.backend = backend
        self.recipient = recipient
        self.from_address = from_address
        self.from_name = from_name
        self.env = Environment(
            loader=FileSystemLoader(str(TEMPLATE_DIR)),
            autoescape=select_autoescape(["html"]),
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "ContactMailer":
        return cls(
            create_backend(settings),
            recipient=settings.contact_recipient,
            from_address=settings.contact_from_address,
            from_name=settings.contact_from_name,
        )

    def build(self, context: dict) -> OutgoingEmail:
        is_inquiry = bool(context.get("product_name") and context.get("prod_id"))
        if is_inquiry:
            subject = f"Product Inquiry: {context['product_name']} (ID: {context['prod_id']})"
        else:
            subject = "New Contact Form Message"
        context = {**context, "is_inquiry": is_inquiry}
        return OutgoingEmail(
            to=self.recipient,
            subject=subject,
            html_body=self.env.get_template("contact.html").render(**context),
            text_body=self.env.get_template("contact.txt").render(**context),
            from_address=self.from_address,
            from_name=self.from_name,
        )

    async def send_contact(self, context: dict) -> bool:
        return await self.backend.send_email(self.build(context))
