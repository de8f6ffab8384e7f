# console_api/infrastructure/mail/factory.py

from console_api.core.interfaces.mailer import Mailer
from console_api.infrastructure.mail.log_mailer import LogMailer
from console_api.infrastructure.mail.smtp_mailer import SmtpMailer


def build_mailer(settings) -> Mailer:
    if not settings.mailer_smtp_host:
        return LogMailer()

    return SmtpMailer(
        host=settings.mailer_smtp_host,
        port=settings.mailer_smtp_port,
        from_email=settings.mailer_from_email,
        from_name=settings.mailer_from_name,
        username=settings.mailer_smtp_username,
        password=settings.mailer_smtp_password,
        starttls=settings.mailer_smtp_starttls,
    )
