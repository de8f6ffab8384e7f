# console_api/infrastructure/mail/delivery.py

import logging
from typing import Iterable

from console_api.core.interfaces.mailer import EmailMessage, Mailer

logger = logging.getLogger(__name__)


def deliver(mailer: Mailer, messages: Iterable[EmailMessage]) -> int:
    """
    Sends messages for state that is already committed.

    A failed delivery is logged and skipped. Returns how many were sent.
    """
    sent = 0
    for message in messages:
        try:
            mailer.send(message)
        except Exception:
            logger.exception(
                "Email delivery failed",
                extra={"extra_data": {"event": "mail_failed", "subject": message.subject}},
            )
            continue
        sent += 1
    return sent
