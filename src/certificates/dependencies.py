"""FastAPI dependencies for certificates."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from .service import CertificateService


async def get_certificate_service(request: Request) -> CertificateService:
    service = getattr(request.app.state, "certificate_service", None)
    if not service:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Layanan sertifikat tidak tersedia",
        )
    return service


CertificateServiceDep = Annotated[CertificateService, Depends(get_certificate_service)]
