"""
SMTP email sender adapter - Implements EmailSender protocol via smtplib.

Each call opens its own connection; there is no pooling or retry.
Transport faults are logged with their cause and re-raised as
DeliveryFailed, which carries only a generic caller-facing message.
"""

import logging
import smtplib
from email.message import EmailMessage

from src.domain.exceptions import DeliveryFailed
from src.domain.ports import OtpPurpose

from .message import render_code_email

logger = logging.getLogger(__name__)


class SmtpEmailSender:
    """
    Implements EmailSender protocol over SMTP (STARTTLS + login).

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(
        self,
        host: str,
        port: int,
        username: str = "",
        password: str = "",
        sender: str = "",
        use_tls: bool = True,
        timeout: float = 10.0,
        ttl_minutes: int = 10,
    ) -> None:
        self._host = host
        self._port = port
        self._username = username
        self._password = password
        self._sender = sender or username
        self._use_tls = use_tls
        self._timeout = timeout
        self._ttl_minutes = ttl_minutes

    def send_code(self, email: str, code: str, purpose: OtpPurpose) -> None:
        """
        Render and send the code email.

        Raises:
            DeliveryFailed: On any SMTP or socket error
        """
        message = self._build_message(email, code, purpose)
        try:
            with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as server:
                if self._use_tls:
                    server.starttls()
                if self._username and self._password:
                    server.login(self._username, self._password)
                server.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("SMTP error sending %s code to %s: %s", purpose.value, email, e)
            raise DeliveryFailed() from e

        logger.info("Sent %s code email to %s", purpose.value, email)

    def _build_message(self, email: str, code: str, purpose: OtpPurpose) -> EmailMessage:
        rendered = render_code_email(code, purpose, self._ttl_minutes)
        message = EmailMessage()
        message["From"] = self._sender
        message["To"] = email
        message["Subject"] = rendered.subject
        message.set_content(rendered.text)
        message.add_alternative(rendered.html, subtype="html")
        return message
