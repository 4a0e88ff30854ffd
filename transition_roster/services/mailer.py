from __future__ import annotations

import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Protocol

from ..models.config_models import SmtpConfig

"""Reminder e-mail delivery.

``SmtpMailer`` sends through the configured SMTP relay; credentials come from
``ROSTER_SMTP_USER`` / ``ROSTER_SMTP_PASSWORD`` (see the CLI ``.env``
handling). ``LogMailer`` only prints the message and is used for dry runs.
"""

__all__ = [
    "EmailPayload",
    "MailerError",
    "Mailer",
    "SmtpMailer",
    "LogMailer",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmailPayload:
    recipients: tuple[str, ...]
    subject: str
    body: str
    email_type: str  # student_list / no_students


class MailerError(Exception):
    """Raised when a message could not be delivered."""


class Mailer(Protocol):
    def send(self, payload: EmailPayload) -> None: ...


class SmtpMailer:
    def __init__(
        self, smtp: SmtpConfig, user: str | None = None, password: str | None = None, timeout: float = 30.0
    ) -> None:
        self.smtp = smtp
        self.user = user
        self.password = password
        self.timeout = timeout

    def _message(self, payload: EmailPayload) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = payload.subject
        msg["From"] = self.smtp.sender or self.user or ""
        msg["To"] = ", ".join(payload.recipients)
        msg.set_content(payload.body)
        return msg

    def send(self, payload: EmailPayload) -> None:
        if not payload.recipients:
            raise MailerError("no recipients configured")
        msg = self._message(payload)
        try:
            with smtplib.SMTP(self.smtp.host, self.smtp.port, timeout=self.timeout) as server:
                if self.smtp.use_tls:
                    server.starttls()
                if self.user and self.password:
                    server.login(self.user, self.password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            raise MailerError(f"smtp send failed: {e}") from e
        logger.info(f"sent {payload.email_type} email to {len(payload.recipients)} recipients")


class LogMailer:
    """Prints the message instead of sending it."""

    def __init__(self) -> None:
        self.sent: list[EmailPayload] = []

    def send(self, payload: EmailPayload) -> None:
        self.sent.append(payload)
        logger.info("=== DRY RUN EMAIL ===")
        logger.info(f"To: {', '.join(payload.recipients)}")
        logger.info(f"Subject: {payload.subject}")
        for line in payload.body.splitlines():
            logger.info(line)
        logger.info("=== END DRY RUN EMAIL ===")
