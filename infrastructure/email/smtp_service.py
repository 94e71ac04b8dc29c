"""
SMTP Email Service
==================

EmailServiceInterface implementation on Django's configured email backend.
"""

import logging
from smtplib import SMTPException

from django.conf import settings
from django.core.mail import EmailMultiAlternatives

from .interface import EmailException, EmailMessage, EmailServiceInterface


logger = logging.getLogger(__name__)


class SMTPEmailService(EmailServiceInterface):
    """
    Django email backend implementation.

    Configuration (in settings.py):
        EMAIL_BACKEND, EMAIL_HOST, EMAIL_PORT, EMAIL_HOST_USER,
        EMAIL_HOST_PASSWORD, EMAIL_USE_TLS, DEFAULT_FROM_EMAIL
    """

    def __init__(self):
        self.default_from = getattr(settings, "DEFAULT_FROM_EMAIL", "noreply@example.com")

    def send(self, message: EmailMessage) -> bool:
        msg = EmailMultiAlternatives(
            subject=message.subject,
            body=message.body,
            from_email=message.from_email or self.default_from,
            to=message.to,
        )
        if message.html_body:
            msg.attach_alternative(message.html_body, "text/html")

        try:
            num_sent = msg.send(fail_silently=False)
        except (SMTPException, OSError) as e:
            logger.error(f"Failed to send email to {message.to}: {e}")
            raise EmailException(f"Email send failed: {e}") from e

        if num_sent > 0:
            logger.info(f"Email sent to {message.to} ({', '.join(message.tags) or 'untagged'})")
            return True

        logger.warning(f"Email backend accepted no messages for {message.to}")
        return False
