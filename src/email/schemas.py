"""Email payload schemas."""

from pydantic import BaseModel, EmailStr, Field


class EmailMessage(BaseModel):
    """A single outgoing email."""

    to: EmailStr = Field(..., description="Recipient email address")
    to_name: str | None = Field(None, description="Recipient display name")
    subject: str = Field(..., min_length=1, max_length=998, description="Email subject")
    body_text: str = Field(..., min_length=1, description="Plain text body")
    body_html: str | None = Field(None, description="HTML body (optional)")


class SendEmailResponse(BaseModel):
    """Result of a send attempt."""

    success: bool = Field(..., description="Whether the email was sent successfully")
    message_id: str | None = Field(None, description="Gmail message ID")
    error: str | None = Field(None, description="Error message if failed")
