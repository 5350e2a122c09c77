"""
email_sender.py — Outbound quote email via SMTP

Pipeline position:
  create quote → render PDF → render email → SEND

The sender keeps a per-day send count and refuses to connect once the
daily limit is used up (QuotaExceededError), the same way a hosted mail
service reports an exhausted quota.
"""

import os
import logging
import smtplib
import threading
from datetime import date
from email import encoders
from email.mime.base import MIMEBase
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr

from ..core.errors import QuotaExceededError, ValidationError
from ..core.quotes import get_quote
from ..core.secrets import mail_config
from ..core.settings import get_all_settings
from ..forms.quote_email import build_quote_email

log = logging.getLogger("catering.email")


class EmailSender:
    """Send quote emails via SMTP with STARTTLS."""

    def __init__(self, config):
        self.smtp_host = config.get("smtp_host", "smtp.gmail.com")
        self.smtp_port = int(config.get("smtp_port", 587))
        self.smtp_user = config.get("smtp_user", "")
        self.password = config.get("smtp_password", "")
        self.email_addr = config.get("email") or self.smtp_user
        self.daily_limit = int(config.get("daily_limit", 100))
        self._sent_day = date.today()
        self._sent_count = 0
        self._lock = threading.Lock()

    def _roll_day(self):
        today = date.today()
        if today != self._sent_day:
            self._sent_day = today
            self._sent_count = 0

    def remaining_daily_quota(self) -> int:
        with self._lock:
            self._roll_day()
            return max(0, self.daily_limit - self._sent_count)

    def build_message(self, to, subject, body, attachments=None,
                      sender_display_name=""):
        msg = MIMEMultipart("mixed")
        msg["From"] = formataddr((sender_display_name, self.email_addr)) \
            if sender_display_name else self.email_addr
        msg["To"] = to
        msg["Subject"] = subject
        msg.attach(MIMEText(body, "plain"))

        for filename, data in attachments or []:
            part = MIMEBase("application", "pdf" if filename.endswith(".pdf") else "octet-stream")
            part.set_payload(data)
            encoders.encode_base64(part)
            part.add_header("Content-Disposition", f"attachment; filename={os.path.basename(filename)}")
            msg.attach(part)
        return msg

    def send_email(self, to, subject, body, attachments=None,
                   sender_display_name="", bcc=None) -> bool:
        """Send one message. attachments: [(filename, bytes)]."""
        if not to:
            raise ValidationError("Recipient email is required")
        with self._lock:
            self._roll_day()
            if self._sent_count >= self.daily_limit:
                raise QuotaExceededError(
                    f"Daily email limit reached ({self.daily_limit}/day)")

            msg = self.build_message(to, subject, body, attachments,
                                     sender_display_name)
            recipients = [to] + ([bcc] if bcc else [])

            with smtplib.SMTP(self.smtp_host, self.smtp_port) as server:
                server.starttls()
                if self.smtp_user:
                    server.login(self.smtp_user, self.password)
                server.send_message(msg, from_addr=self.email_addr, to_addrs=recipients)

            self._sent_count += 1
        log.info("Email sent to %s: %s (%d attachment(s)%s)", to, subject,
                 len(attachments or []), ", bcc" if bcc else "")
        return True


_sender = None


def get_sender() -> EmailSender:
    """Process-wide sender built from env config."""
    global _sender
    if _sender is None:
        _sender = EmailSender(mail_config())
    return _sender


def send_quote(quote_id: str, to: str = None, sender: EmailSender = None) -> dict:
    """Render quote `quote_id` with its PDF attached and send it."""
    quote = get_quote(quote_id)
    message = build_quote_email(quote, get_all_settings(), to=to)
    sender = sender or get_sender()
    sender.send_email(
        message["to"], message["subject"], message["body"],
        attachments=message["attachments"],
        sender_display_name=message["sender_display_name"],
        bcc=message.get("bcc"),
    )
    return {"ok": True, "quote_id": quote_id, "to": message["to"],
            "subject": message["subject"], "bcc": bool(message.get("bcc"))}
