"""Certificate issuing, revocation and verification."""

from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from src.auth.permissions import Capability
from src.core.errors import AccessDeniedError, NotFoundError, UnauthenticatedError

from .models import Certificate, CertificateType, VerificationStatus
from .schemas import CertificateResponse, CertificateVerification


if TYPE_CHECKING:
    from src.auth.schemas import Identity
    from src.auth.service import UserDirectory
    from src.courses.service import CourseCatalog
    from src.learning_paths.store import LearningPathStore

    from .store import CertificateStore


logger = structlog.get_logger(__name__)


class CertificateService:
    """Issues at most one certificate per (user, type, reference)."""

    def __init__(
        self,
        store: "CertificateStore",
        catalog: "CourseCatalog",
        paths: "LearningPathStore",
        users: "UserDirectory",
    ):
        self.store = store
        self.catalog = catalog
        self.paths = paths
        self.users = users

    async def generate_certificate(
        self,
        user_id: UUID,
        certificate_type: CertificateType,
        reference_id: UUID,
    ) -> Certificate:
        """Find or create the certificate for (user, type, reference).

        Concurrent callers all receive the same certificate: the loser of
        the insert race re-reads and returns the winner's row.
        """
        candidate = Certificate.issue(user_id, certificate_type, reference_id)
        if await self.store.insert_if_absent(candidate):
            await self.store.ensure_indexed(candidate)
            logger.info(
                "certificate_issued",
                certificate_id=str(candidate.certificate_id),
                user_id=str(user_id),
                certificate_type=certificate_type.value,
                reference_id=str(reference_id),
            )
            return candidate

        existing = await self.store.get(user_id, certificate_type, reference_id)
        if existing is None:
            msg = "Certificate insert was rejected but no row exists"
            raise RuntimeError(msg)
        # Repairs a by-id row lost to a crash between the two inserts
        await self.store.ensure_indexed(existing)
        return existing

    async def _title_of(self, certificate: Certificate) -> str | None:
        if certificate.certificate_type == CertificateType.COURSE:
            course = await self.catalog.get_course(certificate.reference_id)
            return course.title if course else None
        path = await self.paths.get_path(certificate.reference_id)
        return path.title if path else None

    async def revoke(self, caller: "Identity | None", certificate_id: UUID) -> Certificate:
        if caller is None:
            raise UnauthenticatedError
        if not caller.can(Capability.MANAGE_CERTIFICATES):
            raise AccessDeniedError

        certificate = await self.store.get_by_id(certificate_id)
        if certificate is None:
            raise NotFoundError("Sertifikat tidak ditemukan")

        await self.store.revoke(certificate)
        certificate.is_valid = False
        logger.info(
            "certificate_revoked",
            certificate_id=str(certificate_id),
            revoked_by=str(caller.user_id),
        )
        return certificate

    async def verify(self, certificate_id: UUID) -> CertificateVerification:
        """Public lookup; unknown ids answer NOT_FOUND rather than an error."""
        certificate = await self.store.get_by_id(certificate_id)
        if certificate is None:
            return CertificateVerification(
                status=VerificationStatus.NOT_FOUND, certificate_id=certificate_id
            )

        user = await self.users.get_user(certificate.user_id)
        return CertificateVerification(
            status=VerificationStatus.VALID
            if certificate.is_valid
            else VerificationStatus.REVOKED,
            certificate_id=certificate_id,
            type=certificate.certificate_type,
            title=await self._title_of(certificate),
            recipient_name=user.name if user else None,
            issued_at=certificate.issued_at,
        )

    async def get_my_certificates(
        self, caller: "Identity | None"
    ) -> list[CertificateResponse]:
        if caller is None:
            raise UnauthenticatedError

        certificates = await self.store.list_by_user(caller.user_id)
        certificates.sort(key=lambda c: c.issued_at, reverse=True)
        return [
            CertificateResponse.from_certificate(c, title=await self._title_of(c))
            for c in certificates
        ]

    async def get_all_certificates(
        self, caller: "Identity | None"
    ) -> list[CertificateResponse]:
        if caller is None:
            raise UnauthenticatedError
        if not caller.can(Capability.MANAGE_CERTIFICATES):
            raise AccessDeniedError

        certificates = await self.store.list_all()
        certificates.sort(key=lambda c: c.issued_at, reverse=True)
        users = await self.users.get_users({c.user_id for c in certificates})

        responses = []
        for certificate in certificates:
            user = users.get(certificate.user_id)
            responses.append(
                CertificateResponse.from_certificate(
                    certificate,
                    title=await self._title_of(certificate),
                    user_name=user.name if user else None,
                    user_email=user.email if user else None,
                )
            )
        return responses
