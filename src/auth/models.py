"""User directory table.

Users are provisioned by the organisation's identity service; this service
only reads names and emails for certificates, grading queues and email.
"""

from datetime import datetime
from typing import Any
from uuid import UUID

from src.auth.permissions import UserRole
from src.utils import ensure_utc_aware


USER_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.users (
    id UUID PRIMARY KEY,
    email TEXT,
    name TEXT,
    role TEXT,
    is_active BOOLEAN,
    created_at TIMESTAMP
)
"""

AUTH_TABLES_CQL = [USER_TABLE_CQL]


class User:
    """User as seen by the learning service.

    Attributes:
        id: Unique identifier (UUID)
        email: Email address, used for notification emails
        name: Full name, printed on certificates
        role: Organisation role
        is_active: Account status
        created_at: Account creation timestamp
    """

    def __init__(
        self,
        id: UUID,
        email: str = "",
        name: str = "",
        role: str = UserRole.EMPLOYEE.value,
        is_active: bool = True,
        created_at: datetime | None = None,
    ):
        self.id = id
        self.email = (email or "").lower().strip()
        self.name = name or ""
        self.role = role
        self.is_active = is_active
        self.created_at = ensure_utc_aware(created_at)

    @classmethod
    def from_row(cls, row: Any) -> "User":
        """Create User instance from Cassandra row."""
        return cls(
            id=row.id,
            email=row.email,
            name=row.name,
            role=row.role,
            is_active=row.is_active,
            created_at=row.created_at,
        )

    def __repr__(self) -> str:
        return f"<User {self.email} ({self.role})>"
