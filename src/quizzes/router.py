"""Quiz taking and essay grading API endpoints."""

from uuid import UUID

from fastapi import APIRouter

from src.auth.dependencies import CallerDep
from src.core.results import ActionResult

from .dependencies import GradingServiceDep, QuizServiceDep
from .schemas import (
    AttemptResultResponse,
    AttemptSummary,
    EssayToGrade,
    GradeEssayRequest,
    GradeEssayResponse,
    QuizForTakingResponse,
    StartAttemptRequest,
    StartAttemptResponse,
    SubmitAttemptRequest,
    SubmitAttemptResponse,
)


router = APIRouter(prefix="/v1/quizzes", tags=["quizzes"])
grading_router = APIRouter(prefix="/v1/grading", tags=["grading"])


# ==============================================================================
# Learner Endpoints
# ==============================================================================


@router.get(
    "/{quiz_id}",
    response_model=ActionResult[QuizForTakingResponse],
    summary="Get quiz for taking",
)
async def get_quiz_for_taking(
    quiz_id: UUID,
    caller: CallerDep,
    service: QuizServiceDep,
) -> ActionResult[QuizForTakingResponse]:
    return ActionResult.ok(await service.get_quiz_for_taking(caller, quiz_id))


@router.post(
    "/{quiz_id}/attempts",
    response_model=ActionResult[StartAttemptResponse],
    status_code=201,
    summary="Start an attempt",
)
async def start_attempt(
    quiz_id: UUID,
    request: StartAttemptRequest,
    caller: CallerDep,
    service: QuizServiceDep,
) -> ActionResult[StartAttemptResponse]:
    attempt_id = await service.start_attempt(caller, quiz_id, request.course_id)
    return ActionResult.ok(StartAttemptResponse(attempt_id=attempt_id))


@router.post(
    "/attempts/{attempt_id}/submit",
    response_model=ActionResult[SubmitAttemptResponse],
    summary="Submit answers",
)
async def submit_attempt(
    attempt_id: UUID,
    request: SubmitAttemptRequest,
    caller: CallerDep,
    service: QuizServiceDep,
) -> ActionResult[SubmitAttemptResponse]:
    """Score a submission; essay answers leave the score pending."""
    result = await service.submit_attempt(caller, attempt_id, request.answers)
    return ActionResult.ok(result)


@router.get(
    "/attempts/{attempt_id}/result",
    response_model=ActionResult[AttemptResultResponse],
    summary="Get attempt result",
)
async def get_attempt_result(
    attempt_id: UUID,
    caller: CallerDep,
    service: QuizServiceDep,
) -> ActionResult[AttemptResultResponse]:
    """Attempt detail; ``data`` is null for unknown or foreign attempts."""
    return ActionResult.ok(await service.get_attempt_result(caller, attempt_id))


@router.get(
    "/courses/{course_id}/attempts",
    response_model=ActionResult[list[AttemptSummary]],
    summary="List my attempts in a course",
)
async def get_my_attempts(
    course_id: UUID,
    caller: CallerDep,
    service: QuizServiceDep,
) -> ActionResult[list[AttemptSummary]]:
    return ActionResult.ok(await service.get_my_attempts(caller, course_id))


# ==============================================================================
# Grading Endpoints
# ==============================================================================


@grading_router.get(
    "/quizzes/{quiz_id}/essays",
    response_model=ActionResult[list[EssayToGrade]],
    summary="List essays to grade",
)
async def get_essays_to_grade(
    quiz_id: UUID,
    caller: CallerDep,
    service: GradingServiceDep,
) -> ActionResult[list[EssayToGrade]]:
    return ActionResult.ok(await service.get_essays_to_grade(caller, quiz_id))


@grading_router.post(
    "/answers/{answer_id}",
    response_model=ActionResult[GradeEssayResponse],
    summary="Grade an essay answer",
)
async def grade_essay(
    answer_id: UUID,
    request: GradeEssayRequest,
    caller: CallerDep,
    service: GradingServiceDep,
) -> ActionResult[GradeEssayResponse]:
    result = await service.grade_essay(
        caller, answer_id, request.score, request.feedback
    )
    return ActionResult.ok(result)
