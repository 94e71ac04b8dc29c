"""
Email Service Abstraction Layer
================================

Outgoing email behind one interface: SMTP in production, an in-memory mock
in development and tests. Used for notification copies and order emails.
"""

from .factory import EmailFactory
from .interface import EmailException, EmailMessage, EmailServiceInterface
from .mock_service import MockEmailService
from .smtp_service import SMTPEmailService

__all__ = [
    "EmailServiceInterface",
    "EmailMessage",
    "EmailException",
    "SMTPEmailService",
    "MockEmailService",
    "EmailFactory",
]
