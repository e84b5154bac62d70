"""Email module for sending emails via Gmail API."""

from .schemas import EmailMessage, SendEmailResponse
from .service import EmailSender, EmailService, LogOnlyEmailService


__all__ = [
    "EmailMessage",
    "EmailSender",
    "EmailService",
    "LogOnlyEmailService",
    "SendEmailResponse",
]
