"""Lesson progress and course enrollment API endpoints.

Provides routes for:
- Lesson completion
- Resume position updates
- Course enrollment
- Progress queries
"""

from uuid import UUID

from fastapi import APIRouter

from src.auth.dependencies import CallerDep
from src.core.errors import UnauthenticatedError
from src.core.results import ActionResult

from .dependencies import ProgressServiceDep
from .schemas import (
    CompletedLessonsResponse,
    EnrollmentResponse,
    LastAccessedRequest,
    LessonCompleteResponse,
)


router = APIRouter(prefix="/v1/progress", tags=["progress"])
enrollments_router = APIRouter(prefix="/v1/enrollments", tags=["enrollments"])


# ==============================================================================
# Lesson Progress Endpoints
# ==============================================================================


@router.post(
    "/courses/{course_id}/lessons/{lesson_id}/complete",
    response_model=ActionResult[LessonCompleteResponse],
    summary="Complete a lesson",
)
async def complete_lesson(
    course_id: UUID,
    lesson_id: UUID,
    caller: CallerDep,
    service: ProgressServiceDep,
) -> ActionResult[LessonCompleteResponse]:
    """Mark a lesson completed and return the new course progress."""
    progress = await service.complete_lesson(caller, course_id, lesson_id)
    return ActionResult.ok(LessonCompleteResponse(progress=progress))


@router.put(
    "/courses/{course_id}/last-accessed",
    response_model=ActionResult[None],
    summary="Update resume lesson",
)
async def update_last_accessed(
    course_id: UUID,
    request: LastAccessedRequest,
    caller: CallerDep,
    service: ProgressServiceDep,
) -> ActionResult[None]:
    await service.update_last_accessed(caller, course_id, request.lesson_id)
    return ActionResult.ok()


@router.get(
    "/courses/{course_id}/completed-lessons",
    response_model=ActionResult[CompletedLessonsResponse],
    summary="List completed lessons",
)
async def get_completed_lessons(
    course_id: UUID,
    caller: CallerDep,
    service: ProgressServiceDep,
) -> ActionResult[CompletedLessonsResponse]:
    if caller is None:
        raise UnauthenticatedError
    lesson_ids = await service.get_completed_lesson_ids(caller.user_id, course_id)
    return ActionResult.ok(CompletedLessonsResponse(lesson_ids=lesson_ids))


# ==============================================================================
# Enrollment Endpoints
# ==============================================================================


@enrollments_router.post(
    "/{course_id}",
    response_model=ActionResult[EnrollmentResponse],
    status_code=201,
    summary="Enroll in a course",
)
async def enroll(
    course_id: UUID,
    caller: CallerDep,
    service: ProgressServiceDep,
) -> ActionResult[EnrollmentResponse]:
    enrollment = await service.enroll(caller, course_id)
    return ActionResult.ok(EnrollmentResponse.from_entity(enrollment))


@enrollments_router.delete(
    "/{course_id}",
    response_model=ActionResult[None],
    summary="Leave a course",
)
async def unenroll(
    course_id: UUID,
    caller: CallerDep,
    service: ProgressServiceDep,
) -> ActionResult[None]:
    await service.unenroll(caller, course_id)
    return ActionResult.ok()


@enrollments_router.get(
    "",
    response_model=ActionResult[list[EnrollmentResponse]],
    summary="List my enrollments",
)
async def get_my_enrollments(
    caller: CallerDep,
    service: ProgressServiceDep,
) -> ActionResult[list[EnrollmentResponse]]:
    """All enrollments of the caller, newest first."""
    return ActionResult.ok(await service.get_my_enrollments(caller))
