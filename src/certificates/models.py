"""Database models for certificates.

Cassandra table definitions for:
- certificates_by_user: uniqueness key (user, type, reference); the
  ``IF NOT EXISTS`` insert here decides which concurrent issuer wins
- certificates: lookup by certificate id for public verification
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from src.utils import ensure_utc_aware, utc_now


class CertificateType(str, Enum):
    COURSE = "COURSE"
    PATH = "PATH"


class VerificationStatus(str, Enum):
    VALID = "VALID"
    REVOKED = "REVOKED"
    NOT_FOUND = "NOT_FOUND"


CERTIFICATES_BY_USER_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.certificates_by_user (
    user_id UUID,
    certificate_type TEXT,
    reference_id UUID,
    certificate_id UUID,
    is_valid BOOLEAN,
    issued_at TIMESTAMP,
    PRIMARY KEY ((user_id), certificate_type, reference_id)
)
"""

CERTIFICATES_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.certificates (
    certificate_id UUID PRIMARY KEY,
    user_id UUID,
    certificate_type TEXT,
    reference_id UUID,
    is_valid BOOLEAN,
    issued_at TIMESTAMP
)
"""

CERTIFICATES_TABLES_CQL = [
    CERTIFICATES_BY_USER_TABLE_CQL,
    CERTIFICATES_TABLE_CQL,
]


@dataclass
class Certificate:
    """Certificate entity, shared by both tables."""

    certificate_id: UUID
    user_id: UUID
    certificate_type: CertificateType
    reference_id: UUID
    is_valid: bool
    issued_at: datetime

    @classmethod
    def issue(
        cls, user_id: UUID, certificate_type: CertificateType, reference_id: UUID
    ) -> "Certificate":
        """Build a new, valid certificate stamped now."""
        return cls(
            certificate_id=uuid4(),
            user_id=user_id,
            certificate_type=certificate_type,
            reference_id=reference_id,
            is_valid=True,
            issued_at=utc_now(),
        )

    @classmethod
    def from_row(cls, row: Any) -> "Certificate":
        return cls(
            certificate_id=row.certificate_id,
            user_id=row.user_id,
            certificate_type=CertificateType(row.certificate_type),
            reference_id=row.reference_id,
            is_valid=bool(row.is_valid),
            issued_at=ensure_utc_aware(row.issued_at),
        )

    def __repr__(self) -> str:
        state = "valid" if self.is_valid else "revoked"
        return (
            f"<Certificate {self.certificate_id} {self.certificate_type.value} "
            f"ref={self.reference_id} {state}>"
        )
