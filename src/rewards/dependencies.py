"""FastAPI dependencies for the points ledger."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from .service import PointsService


async def get_points_service(request: Request) -> PointsService:
    service = getattr(request.app.state, "points_service", None)
    if not service:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Layanan poin tidak tersedia",
        )
    return service


PointsServiceDep = Annotated[PointsService, Depends(get_points_service)]
