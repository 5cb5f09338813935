from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from email.utils import make_msgid
from typing import Optional, Tuple

from core.config import AppSettings, settings


logger = logging.getLogger(__name__)


class EmailService:
    """SMTP email sender (supports Gmail / generic SMTP)."""
    def __init__(self, cfg: Optional[AppSettings] = None) -> None:
        cfg = cfg or settings
        self.smtp_host = cfg.smtp_host
        self.smtp_port = cfg.smtp_port
        self.smtp_user = cfg.email_user
        self.smtp_pass = cfg.email_pass
        self.from_email = cfg.email_user

    def send(self, to_email: str, subject: str, body: str) -> Tuple[bool, str | None]:
        """Deliver one plain-text message.

        Returns ``(True, message_id)`` on success and ``(False, error)`` when
        building or sending the message fails.
        """
        if not self.smtp_user or not self.smtp_pass:
            logger.warning("email_send.skipped", extra={"reason": "missing SMTP credentials", "to": to_email})
            return True, None
        try:
            msg = EmailMessage()
            msg["From"] = self.from_email
            msg["To"] = to_email
            msg["Subject"] = subject
            message_id = make_msgid()
            msg["Message-ID"] = message_id
            msg.set_content(body)
            with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=30) as s:
                s.ehlo(); s.starttls(); s.ehlo(); s.login(self.smtp_user, self.smtp_pass); s.send_message(msg)
            logger.info("email_send.ok", extra={"to": to_email, "subject": subject})
            return True, message_id
        except Exception as exc:
            logger.error("email_send.failed", extra={"to": to_email, "error": str(exc)})
            return False, str(exc)
