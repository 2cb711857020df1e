"""
Email Service for contact-form submissions
"""
from __future__ import annotations

import html
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Mapping

from services.errors import MailDeliveryError

logger = logging.getLogger(__name__)


class Mailer:
    def __init__(
        self,
        host: str,
        port: int,
        user: str | None = None,
        password: str | None = None,
        use_tls: bool = True,
        timeout: float = 10.0,
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: Mapping) -> "Mailer":
        return cls(
            host=config.get("SMTP_HOST", "smtp.gmail.com"),
            port=int(config.get("SMTP_PORT", 587)),
            user=config.get("EMAIL_USER"),
            password=config.get("EMAIL_APP_PASSWORD"),
            use_tls=bool(config.get("SMTP_USE_TLS", True)),
            timeout=float(config.get("SMTP_TIMEOUT_SECONDS", 10)),
        )

    def send(self, to_email: str, subject: str, body_text: str, body_html: str) -> None:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.user or ""
        msg["To"] = to_email
        msg.attach(MIMEText(body_text, "plain"))
        msg.attach(MIMEText(body_html, "html"))

        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                if self.use_tls:
                    server.starttls()
                if self.user and self.password:
                    server.login(self.user, self.password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as exc:
            logger.exception("Error sending email to %s", to_email)
            raise MailDeliveryError("Failed to send email") from exc

    def send_contact_email(self, name: str, email: str, message: str) -> None:
        """Forward a contact-form submission to the site owner's inbox."""
        body_text = (
            f"Name: {name}\n"
            f"Email: {email}\n"
            "\n"
            "Message:\n"
            f"{message}\n"
        )
        body_html = (
            "<h3>New Contact Form Submission</h3>"
            f"<p><strong>Name:</strong> {html.escape(name)}</p>"
            f"<p><strong>Email:</strong> {html.escape(email)}</p>"
            "<p><strong>Message:</strong></p>"
            f"<p>{html.escape(message).replace(chr(10), '<br>')}</p>"
        )
        self.send(self.user or "", f"Portfolio Contact: {name}", body_text, body_html)
