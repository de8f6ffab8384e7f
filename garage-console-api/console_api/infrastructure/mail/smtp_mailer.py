# console_api/infrastructure/mail/smtp_mailer.py

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from console_api.core.interfaces.mailer import EmailMessage

logger = logging.getLogger(__name__)


class SmtpMailer:
    def __init__(
        self,
        *,
        host: str,
        port: int,
        from_email: str,
        from_name: str | None = None,
        username: str | None = None,
        password: str | None = None,
        starttls: bool = False,
        timeout: float = 10.0,
    ) -> None:
        self._host = host
        self._port = port
        self._from_email = from_email
        self._from_name = from_name
        self._username = username
        self._password = password
        self._starttls = starttls
        self._timeout = timeout

    def _build(self, message: EmailMessage) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = message.subject
        msg["From"] = f"{self._from_name} <{self._from_email}>" if self._from_name else self._from_email
        msg["To"] = message.to

        msg.attach(MIMEText(message.text, "plain", "utf-8"))
        if message.html:
            msg.attach(MIMEText(message.html, "html", "utf-8"))
        return msg

    def send(self, message: EmailMessage) -> None:
        msg = self._build(message)

        with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as server:
            if self._starttls:
                server.starttls()
            # local relays (mailpit, mailhog) accept unauthenticated mail
            if self._username and self._password:
                server.login(self._username, self._password)
            server.send_message(msg)

        logger.info("Mail sent", extra={"extra_data": {"to": message.to, "subject": message.subject}})
