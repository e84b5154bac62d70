"""Certificate API endpoints.

Verification is public; listing and revocation require a caller.
"""

from uuid import UUID

from fastapi import APIRouter

from src.auth.dependencies import CallerDep
from src.core.results import ActionResult

from .dependencies import CertificateServiceDep
from .schemas import CertificateResponse, CertificateVerification


router = APIRouter(prefix="/v1/certificates", tags=["certificates"])


@router.get(
    "/me",
    response_model=ActionResult[list[CertificateResponse]],
    summary="List my certificates",
)
async def get_my_certificates(
    caller: CallerDep,
    service: CertificateServiceDep,
) -> ActionResult[list[CertificateResponse]]:
    return ActionResult.ok(await service.get_my_certificates(caller))


@router.get(
    "",
    response_model=ActionResult[list[CertificateResponse]],
    summary="List all certificates (admin)",
)
async def get_all_certificates(
    caller: CallerDep,
    service: CertificateServiceDep,
) -> ActionResult[list[CertificateResponse]]:
    return ActionResult.ok(await service.get_all_certificates(caller))


@router.get(
    "/{certificate_id}/verify",
    response_model=ActionResult[CertificateVerification],
    summary="Verify a certificate",
)
async def verify_certificate(
    certificate_id: UUID,
    service: CertificateServiceDep,
) -> ActionResult[CertificateVerification]:
    """Public check answering VALID, REVOKED or NOT_FOUND."""
    return ActionResult.ok(await service.verify(certificate_id))


@router.post(
    "/{certificate_id}/revoke",
    response_model=ActionResult[CertificateResponse],
    summary="Revoke a certificate",
)
async def revoke_certificate(
    certificate_id: UUID,
    caller: CallerDep,
    service: CertificateServiceDep,
) -> ActionResult[CertificateResponse]:
    certificate = await service.revoke(caller, certificate_id)
    return ActionResult.ok(CertificateResponse.from_certificate(certificate))
