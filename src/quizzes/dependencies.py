"""FastAPI dependencies for quizzes."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from .grading import EssayGradingService
from .service import QuizAttemptService


def _unavailable() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="Layanan kuis tidak tersedia",
    )


async def get_quiz_service(request: Request) -> QuizAttemptService:
    service = getattr(request.app.state, "quiz_service", None)
    if not service:
        raise _unavailable()
    return service


async def get_grading_service(request: Request) -> EssayGradingService:
    service = getattr(request.app.state, "grading_service", None)
    if not service:
        raise _unavailable()
    return service


QuizServiceDep = Annotated[QuizAttemptService, Depends(get_quiz_service)]
GradingServiceDep = Annotated[EssayGradingService, Depends(get_grading_service)]
