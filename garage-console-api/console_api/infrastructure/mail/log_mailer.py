# console_api/infrastructure/mail/log_mailer.py

import logging

from console_api.core.interfaces.mailer import EmailMessage

logger = logging.getLogger(__name__)


class LogMailer:
    """Used when no SMTP host is configured: the message goes to the log instead."""

    def send(self, message: EmailMessage) -> None:
        logger.info(
            "Mail not delivered (no SMTP host configured)",
            extra={"extra_data": {"to": message.to, "subject": message.subject, "body": message.text}},
        )
