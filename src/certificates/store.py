"""Cassandra access for certificates."""

from typing import TYPE_CHECKING
from uuid import UUID

from cassandra.query import BatchStatement, BatchType

from .models import Certificate, CertificateType


if TYPE_CHECKING:
    from cassandra.cluster import Session


class CertificateStore:
    def __init__(self, session: "Session", keyspace: str):
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        self._insert_by_user = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.certificates_by_user
            (user_id, certificate_type, reference_id, certificate_id, is_valid, issued_at)
            VALUES (?, ?, ?, ?, ?, ?)
            IF NOT EXISTS
        """)

        self._insert_by_id = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.certificates
            (certificate_id, user_id, certificate_type, reference_id, is_valid, issued_at)
            VALUES (?, ?, ?, ?, ?, ?)
            IF NOT EXISTS
        """)

        self._get_by_key = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.certificates_by_user
            WHERE user_id = ? AND certificate_type = ? AND reference_id = ?
        """)

        self._get_by_user = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.certificates_by_user WHERE user_id = ?
        """)

        self._get_by_id = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.certificates WHERE certificate_id = ?
        """)

        self._get_all = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.certificates
        """)

        self._revoke_by_id = self.session.prepare(f"""
            UPDATE {self.keyspace}.certificates SET is_valid = false
            WHERE certificate_id = ?
        """)

        self._revoke_by_user = self.session.prepare(f"""
            UPDATE {self.keyspace}.certificates_by_user SET is_valid = false
            WHERE user_id = ? AND certificate_type = ? AND reference_id = ?
        """)

    @staticmethod
    def _values(certificate: Certificate) -> list:
        return [
            certificate.certificate_id,
            certificate.user_id,
            certificate.certificate_type.value,
            certificate.reference_id,
            certificate.is_valid,
            certificate.issued_at,
        ]

    async def insert_if_absent(self, certificate: Certificate) -> bool:
        """Claim the (user, type, reference) key for ``certificate``.

        Returns:
            True if this certificate won the key
        """
        result = await self.session.aexecute(
            self._insert_by_user,
            [
                certificate.user_id,
                certificate.certificate_type.value,
                certificate.reference_id,
                certificate.certificate_id,
                certificate.is_valid,
                certificate.issued_at,
            ],
        )
        return result.was_applied

    async def ensure_indexed(self, certificate: Certificate) -> None:
        """Make the certificate resolvable by id (no-op when already present)."""
        await self.session.aexecute(self._insert_by_id, self._values(certificate))

    async def get(
        self, user_id: UUID, certificate_type: CertificateType, reference_id: UUID
    ) -> Certificate | None:
        result = await self.session.aexecute(
            self._get_by_key, [user_id, certificate_type.value, reference_id]
        )
        row = result.one()
        return Certificate.from_row(row) if row else None

    async def get_by_id(self, certificate_id: UUID) -> Certificate | None:
        result = await self.session.aexecute(self._get_by_id, [certificate_id])
        row = result.one()
        return Certificate.from_row(row) if row else None

    async def list_by_user(self, user_id: UUID) -> list[Certificate]:
        result = await self.session.aexecute(self._get_by_user, [user_id])
        return [Certificate.from_row(row) for row in result]

    async def list_all(self) -> list[Certificate]:
        result = await self.session.aexecute(self._get_all)
        return [Certificate.from_row(row) for row in result]

    async def revoke(self, certificate: Certificate) -> None:
        """Mark both copies invalid in one logged batch."""
        batch = BatchStatement(batch_type=BatchType.LOGGED)
        batch.add(self._revoke_by_id, [certificate.certificate_id])
        batch.add(
            self._revoke_by_user,
            [
                certificate.user_id,
                certificate.certificate_type.value,
                certificate.reference_id,
            ],
        )
        await self.session.aexecute(batch)
