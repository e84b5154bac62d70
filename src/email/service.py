"""Email service using Gmail API with Service Account.

Uses domain-wide delegation to send emails on behalf of a Google Workspace user.
The service account must have domain-wide delegation enabled in Google Admin Console
with scope https://www.googleapis.com/auth/gmail.send.

When email is disabled, ``LogOnlyEmailService`` stands in and writes the
message to the log instead.
"""

import asyncio
import base64
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from src.core.logging import get_logger

from .schemas import EmailMessage, SendEmailResponse


if TYPE_CHECKING:
    from googleapiclient._apis.gmail.v1 import GmailResource


logger = get_logger(__name__)

GMAIL_SCOPES = ["https://www.googleapis.com/auth/gmail.send"]


class EmailSender(Protocol):
    async def send(self, message: EmailMessage) -> SendEmailResponse: ...


class EmailService:
    """Sends emails via the Gmail API."""

    def __init__(
        self,
        credentials_path: str,
        sender_address: str,
        sender_name: str = "LearnPath",
    ):
        """Initialize Gmail API service.

        Args:
            credentials_path: Path to service account JSON file
            sender_address: Email address to send from (must be in Google Workspace)
            sender_name: Display name for sender
        """
        self.credentials_path = credentials_path
        self.sender_address = sender_address
        self.sender_name = sender_name
        self._service: GmailResource | None = None

        if not Path(credentials_path).exists():
            logger.warning(
                "email_credentials_not_found",
                path=credentials_path,
                message="Gmail API will not be available",
            )

    def _get_service(self) -> "GmailResource":
        """Get or lazily build the Gmail API client.

        Raises:
            FileNotFoundError: If credentials file doesn't exist
        """
        if self._service is not None:
            return self._service

        credentials_file = Path(self.credentials_path)
        if not credentials_file.exists():
            msg = f"Credentials file not found: {self.credentials_path}"
            raise FileNotFoundError(msg)

        credentials = service_account.Credentials.from_service_account_file(
            str(credentials_file),
            scopes=GMAIL_SCOPES,
        )
        self._service = build(
            "gmail",
            "v1",
            credentials=credentials.with_subject(self.sender_address),
            cache_discovery=False,
        )
        logger.info("gmail_service_initialized", sender=self.sender_address)
        return self._service

    def _create_message(self, message: EmailMessage) -> dict:
        """Build the Gmail ``{"raw": ...}`` body."""
        mime = MIMEMultipart("alternative")
        mime["From"] = f"{self.sender_name} <{self.sender_address}>"
        mime["To"] = (
            f"{message.to_name} <{message.to}>" if message.to_name else message.to
        )
        mime["Subject"] = message.subject

        # Plain text first, then HTML (clients prefer the last part)
        mime.attach(MIMEText(message.body_text, "plain", "utf-8"))
        if message.body_html:
            mime.attach(MIMEText(message.body_html, "html", "utf-8"))

        return {"raw": base64.urlsafe_b64encode(mime.as_bytes()).decode("utf-8")}

    def _send_blocking(self, body: dict) -> dict:
        service = self._get_service()
        return service.users().messages().send(userId="me", body=body).execute()

    async def send(self, message: EmailMessage) -> SendEmailResponse:
        """Send an email.

        Returns:
            SendEmailResponse; delivery failures are reported, not raised
        """
        try:
            result = await asyncio.to_thread(
                self._send_blocking, self._create_message(message)
            )
        except HttpError as e:
            logger.exception(
                "email_send_failed",
                error=str(e),
                to=message.to,
                subject=message.subject[:50],
            )
            return SendEmailResponse(success=False, error=f"Gmail API error: {e}")
        except FileNotFoundError as e:
            logger.error("email_credentials_missing", error=str(e))
            return SendEmailResponse(
                success=False,
                error="Email service not configured: credentials file missing",
            )

        logger.info(
            "email_sent",
            message_id=result.get("id"),
            to=message.to,
            subject=message.subject[:50],
        )
        return SendEmailResponse(success=True, message_id=result.get("id"))


class LogOnlyEmailService:
    """Development stand-in that logs emails instead of sending them."""

    async def send(self, message: EmailMessage) -> SendEmailResponse:
        logger.info(
            "email_logged",
            to=message.to,
            subject=message.subject,
            body=message.body_text,
        )
        return SendEmailResponse(success=True)
