"""Tests for certificate issuing, revocation and verification."""

from uuid import uuid4

import pytest

from src.auth.schemas import Identity
from src.certificates.models import CertificateType, VerificationStatus
from src.certificates.service import CertificateService
from src.core.errors import AccessDeniedError, NotFoundError, UnauthenticatedError
from tests.fakes import FakeCatalog, FakeCertificateStore, FakePathStore


class TestGenerateCertificate:
    """Tests for generate_certificate."""

    @pytest.mark.asyncio
    async def test_same_key_same_certificate(
        self,
        certificate_service: CertificateService,
        certificate_store: FakeCertificateStore,
        learner: Identity,
    ) -> None:
        course_id = uuid4()

        first = await certificate_service.generate_certificate(
            learner.user_id, CertificateType.COURSE, course_id
        )
        second = await certificate_service.generate_certificate(
            learner.user_id, CertificateType.COURSE, course_id
        )

        assert first.certificate_id == second.certificate_id
        assert first.is_valid is True
        assert len(certificate_store.by_key) == 1
        assert len(certificate_store.by_id) == 1

    @pytest.mark.asyncio
    async def test_type_is_part_of_the_key(
        self, certificate_service: CertificateService, learner: Identity
    ) -> None:
        reference_id = uuid4()

        course_cert = await certificate_service.generate_certificate(
            learner.user_id, CertificateType.COURSE, reference_id
        )
        path_cert = await certificate_service.generate_certificate(
            learner.user_id, CertificateType.PATH, reference_id
        )

        assert course_cert.certificate_id != path_cert.certificate_id

    @pytest.mark.asyncio
    async def test_missing_index_row_is_repaired(
        self,
        certificate_service: CertificateService,
        certificate_store: FakeCertificateStore,
        learner: Identity,
    ) -> None:
        course_id = uuid4()
        issued = await certificate_service.generate_certificate(
            learner.user_id, CertificateType.COURSE, course_id
        )
        certificate_store.by_id.clear()

        again = await certificate_service.generate_certificate(
            learner.user_id, CertificateType.COURSE, course_id
        )

        assert again.certificate_id == issued.certificate_id
        assert issued.certificate_id in certificate_store.by_id


class TestVerify:
    """Tests for public verification."""

    @pytest.mark.asyncio
    async def test_valid(
        self,
        certificate_service: CertificateService,
        catalog: FakeCatalog,
        learner: Identity,
    ) -> None:
        course = catalog.add_course(title="Dasar K3")
        issued = await certificate_service.generate_certificate(
            learner.user_id, CertificateType.COURSE, course.id
        )

        verification = await certificate_service.verify(issued.certificate_id)

        assert verification.status == VerificationStatus.VALID
        assert verification.title == "Dasar K3"
        assert verification.recipient_name == "Budi Santoso"
        assert verification.type == CertificateType.COURSE

    @pytest.mark.asyncio
    async def test_path_title(
        self,
        certificate_service: CertificateService,
        path_store: FakePathStore,
        learner: Identity,
    ) -> None:
        path = path_store.add_path([], title="Onboarding")
        issued = await certificate_service.generate_certificate(
            learner.user_id, CertificateType.PATH, path.path_id
        )

        verification = await certificate_service.verify(issued.certificate_id)

        assert verification.title == "Onboarding"

    @pytest.mark.asyncio
    async def test_unknown_id(self, certificate_service: CertificateService) -> None:
        certificate_id = uuid4()

        verification = await certificate_service.verify(certificate_id)

        assert verification.status == VerificationStatus.NOT_FOUND
        assert verification.certificate_id == certificate_id
        assert verification.title is None

    @pytest.mark.asyncio
    async def test_revoked(
        self,
        certificate_service: CertificateService,
        learner: Identity,
        hr_admin: Identity,
    ) -> None:
        issued = await certificate_service.generate_certificate(
            learner.user_id, CertificateType.COURSE, uuid4()
        )

        revoked = await certificate_service.revoke(hr_admin, issued.certificate_id)

        assert revoked.is_valid is False
        verification = await certificate_service.verify(issued.certificate_id)
        assert verification.status == VerificationStatus.REVOKED


class TestRevoke:
    @pytest.mark.asyncio
    async def test_requires_manage_capability(
        self,
        certificate_service: CertificateService,
        learner: Identity,
        mentor: Identity,
    ) -> None:
        issued = await certificate_service.generate_certificate(
            learner.user_id, CertificateType.COURSE, uuid4()
        )

        with pytest.raises(AccessDeniedError):
            await certificate_service.revoke(mentor, issued.certificate_id)
        with pytest.raises(UnauthenticatedError):
            await certificate_service.revoke(None, issued.certificate_id)

    @pytest.mark.asyncio
    async def test_unknown_certificate(
        self, certificate_service: CertificateService, hr_admin: Identity
    ) -> None:
        with pytest.raises(NotFoundError):
            await certificate_service.revoke(hr_admin, uuid4())

    @pytest.mark.asyncio
    async def test_revoked_certificate_is_not_reissued(
        self,
        certificate_service: CertificateService,
        learner: Identity,
        hr_admin: Identity,
    ) -> None:
        course_id = uuid4()
        issued = await certificate_service.generate_certificate(
            learner.user_id, CertificateType.COURSE, course_id
        )
        await certificate_service.revoke(hr_admin, issued.certificate_id)

        again = await certificate_service.generate_certificate(
            learner.user_id, CertificateType.COURSE, course_id
        )

        assert again.certificate_id == issued.certificate_id
        assert again.is_valid is False


class TestListing:
    @pytest.mark.asyncio
    async def test_my_certificates(
        self,
        certificate_service: CertificateService,
        catalog: FakeCatalog,
        learner: Identity,
        mentor: Identity,
    ) -> None:
        course = catalog.add_course(title="Etika Bisnis")
        await certificate_service.generate_certificate(
            learner.user_id, CertificateType.COURSE, course.id
        )
        await certificate_service.generate_certificate(
            mentor.user_id, CertificateType.COURSE, course.id
        )

        mine = await certificate_service.get_my_certificates(learner)

        assert len(mine) == 1
        assert mine[0].title == "Etika Bisnis"
        assert mine[0].user_id == learner.user_id

    @pytest.mark.asyncio
    async def test_all_certificates_for_admins(
        self,
        certificate_service: CertificateService,
        learner: Identity,
        hr_admin: Identity,
    ) -> None:
        await certificate_service.generate_certificate(
            learner.user_id, CertificateType.COURSE, uuid4()
        )

        listed = await certificate_service.get_all_certificates(hr_admin)

        assert [c.user_email for c in listed] == ["learner@example.com"]
        with pytest.raises(AccessDeniedError):
            await certificate_service.get_all_certificates(learner)
