"""E-mail via SMTP (chamado sempre a partir do pool de I/O bloqueante)."""

from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from config.settings import ServerProperties

logger = logging.getLogger(__name__)


class MailWrapper:
    """Envia e-mails pelo servidor SMTP configurado.

    Args:
        props: Bundle ``mail.properties`` (``mail.smtp.host``,
            ``mail.smtp.port``, ``mail.smtp.username``,
            ``mail.smtp.password``, ``mail.smtp.starttls``, ``mail.from``).
    """

    def __init__(self, props: ServerProperties) -> None:
        self.host = props.get("mail.smtp.host", "")
        self.port = props.get_int("mail.smtp.port", 587)
        self.username = props.get("mail.smtp.username", "")
        self._password = props.get("mail.smtp.password", "")
        self.starttls = props.get_bool("mail.smtp.starttls", True)
        self.sender = props.get("mail.from", self.username)
        self.timeout = props.get_float("mail.smtp.timeout.seconds", 30.0)

    @property
    def is_configured(self) -> bool:
        return bool(self.host and self.sender)

    def build_message(self, to: str, subject: str, body: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = to
        message["Subject"] = subject
        message.set_content(body)
        return message

    def send(self, to: str, subject: str, body: str) -> None:
        """Envia de forma síncrona.

        Raises:
            ValueError: Se SMTP não configurado.
            smtplib.SMTPException: Falha no servidor SMTP.
        """
        if not self.is_configured:
            raise ValueError("mail.smtp.host/mail.from não configurados")
        message = self.build_message(to, subject, body)
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
            if self.starttls:
                smtp.starttls()
            if self.username:
                smtp.login(self.username, self._password)
            smtp.send_message(message)
        logger.debug("mail_sent", extra={"channel": "mail"})
