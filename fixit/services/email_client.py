# fil: fixit/services/email_client.py

from __future__ import annotations

import smtplib
from email.message import EmailMessage
from typing import Callable, List, Optional

from fixit.core.errors import NotificationFailure
from fixit.services.notifications import NotificationChannel

SUBJECT = "New repair request"


class EmailChannel(NotificationChannel):
    name = "email"

    def __init__(
        self,
        *,
        host: str,
        port: int,
        sender: str,
        recipients: List[str],
        username: Optional[str] = None,
        password: Optional[str] = None,
        starttls: bool = True,
        timeout: float = 5.0,
        smtp_factory: Callable[..., smtplib.SMTP] = smtplib.SMTP,
    ) -> None:
        self.host = host
        self.port = port
        self.sender = sender
        self.recipients = list(recipients)
        self.username = username
        self.password = password
        self.starttls = starttls
        self.timeout = timeout
        self._smtp_factory = smtp_factory

    def build_message(self, text: str) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = SUBJECT
        msg["From"] = self.sender
        msg["To"] = ", ".join(self.recipients)
        msg.set_content(text)
        return msg

    def send(self, text: str) -> None:
        msg = self.build_message(text)
        try:
            with self._smtp_factory(self.host, self.port, timeout=self.timeout) as smtp:
                if self.starttls:
                    smtp.starttls()
                if self.username:
                    smtp.login(self.username, self.password or "")
                smtp.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            raise NotificationFailure(self.name, str(e) or type(e).__name__) from e
