"""Pydantic schemas for certificates."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from src.certificates.models import Certificate, CertificateType, VerificationStatus


class CertificateResponse(BaseModel):
    """Certificate with the title of what it certifies."""

    id: UUID = Field(description="Certificate ID")
    type: CertificateType = Field(description="COURSE or PATH")
    reference_id: UUID = Field(description="Course or path ID")
    title: str | None = Field(None, description="Course or path title")
    is_valid: bool = Field(description="False once revoked")
    issued_at: datetime = Field(description="Issue timestamp")
    user_id: UUID = Field(description="Recipient user ID")
    user_name: str | None = Field(None, description="Recipient name")
    user_email: str | None = Field(None, description="Recipient email")

    @classmethod
    def from_certificate(
        cls,
        certificate: Certificate,
        title: str | None = None,
        user_name: str | None = None,
        user_email: str | None = None,
    ) -> "CertificateResponse":
        return cls(
            id=certificate.certificate_id,
            type=certificate.certificate_type,
            reference_id=certificate.reference_id,
            title=title,
            is_valid=certificate.is_valid,
            issued_at=certificate.issued_at,
            user_id=certificate.user_id,
            user_name=user_name,
            user_email=user_email,
        )


class CertificateVerification(BaseModel):
    """Public verification answer."""

    status: VerificationStatus = Field(description="VALID, REVOKED or NOT_FOUND")
    certificate_id: UUID = Field(description="Certificate ID that was checked")
    type: CertificateType | None = Field(None, description="COURSE or PATH")
    title: str | None = Field(None, description="Course or path title")
    recipient_name: str | None = Field(None, description="Recipient name")
    issued_at: datetime | None = Field(None, description="Issue timestamp")
