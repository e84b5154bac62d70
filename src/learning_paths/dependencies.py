"""FastAPI dependencies for learning paths."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from .service import LearningPathService


async def get_learning_path_service(request: Request) -> LearningPathService:
    service = getattr(request.app.state, "learning_path_service", None)
    if not service:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Layanan learning path tidak tersedia",
        )
    return service


LearningPathServiceDep = Annotated[
    LearningPathService, Depends(get_learning_path_service)
]
