# Mail dispatch used by the password reset flow.
# SmtpMailer sends through the configured SMTP server with a bounded timeout;
# LogMailer is used when no SMTP host is configured and only logs the message.

import logging
import smtplib
from email.message import EmailMessage

from app.core.config import Settings

logger = logging.getLogger("app")


class MailDeliveryError(Exception):
    pass


class LogMailer:
    def send(self, to: str, subject: str, html: str) -> None:
        logger.info(f"Mail transport not configured; message for {to}: {subject}\n{html}")


class SmtpMailer:
    def __init__(self, settings: Settings):
        self.host = settings.SMTP_HOST
        self.port = settings.SMTP_PORT
        self.user = settings.SMTP_USER
        self.password = settings.SMTP_PASSWORD
        self.use_tls = settings.SMTP_USE_TLS
        self.sender = settings.MAIL_FROM
        self.timeout = settings.MAIL_TIMEOUT_SECONDS

    def send(self, to: str, subject: str, html: str) -> None:
        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = to
        message["Subject"] = subject
        message.set_content("This message requires an HTML capable mail client.")
        message.add_alternative(html, subtype="html")

        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
                if self.use_tls:
                    smtp.starttls()
                if self.user:
                    smtp.login(self.user, self.password)
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            raise MailDeliveryError(f"Failed to send mail to {to}: {e}") from e
        logger.info(f"Mail sent to {to}: {subject}")


def build_mailer(settings: Settings):
    if settings.SMTP_HOST:
        return SmtpMailer(settings)
    logger.warning("SMTP_HOST is not set; outgoing mail will be logged instead of sent")
    return LogMailer()
