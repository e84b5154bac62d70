"""Lesson completion tracking service layer.

Business logic for:
- Course enrollment management
- Idempotent lesson completion with monotonic progress
- The single transition to COMPLETED and what it triggers
"""

from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from src.certificates.models import CertificateType
from src.core.errors import (
    AlreadyEnrolledError,
    NotEnrolledError,
    NotFoundError,
    UnauthenticatedError,
)
from src.notifications.models import NotificationType
from src.utils import percentage, utc_now

from .models import Enrollment, EnrollmentStatus
from .schemas import EnrollmentResponse


if TYPE_CHECKING:
    from src.auth.schemas import Identity
    from src.certificates.service import CertificateService
    from src.courses.service import CourseCatalog
    from src.learning_paths.service import LearningPathService
    from src.rewards.hooks import RewardHooks

    from .store import ProgressStore


logger = structlog.get_logger(__name__)

COURSE_NOT_FOUND = "Kursus tidak ditemukan"
LESSON_NOT_FOUND = "Materi tidak ditemukan"


# ==============================================================================
# Progress Service
# ==============================================================================


class ProgressService:
    """Service for enrollment and lesson completion tracking."""

    def __init__(
        self,
        store: "ProgressStore",
        catalog: "CourseCatalog",
        paths: "LearningPathService",
        certificates: "CertificateService",
        hooks: "RewardHooks",
        course_completion_points: int = 100,
    ):
        self.store = store
        self.catalog = catalog
        self.paths = paths
        self.certificates = certificates
        self.hooks = hooks
        self.course_completion_points = course_completion_points

    # ==========================================================================
    # Enrollment Operations
    # ==========================================================================

    async def enroll(self, caller: "Identity | None", course_id: UUID) -> Enrollment:
        """Enroll the caller in a published course.

        Raises:
            NotFoundError: If the course does not exist or is not published
            AlreadyEnrolledError: If the caller is already enrolled
        """
        if caller is None:
            raise UnauthenticatedError

        course = await self.catalog.get_course(course_id)
        if course is None or not course.is_published:
            raise NotFoundError(COURSE_NOT_FOUND)

        enrollment = Enrollment(
            user_id=caller.user_id,
            course_id=course_id,
            status=EnrollmentStatus.ENROLLED.value,
        )
        if not await self.store.create_enrollment(enrollment):
            raise AlreadyEnrolledError

        logger.info(
            "user_enrolled",
            user_id=str(caller.user_id),
            course_id=str(course_id),
            enrollment_id=str(enrollment.enrollment_id),
        )
        return enrollment

    async def unenroll(self, caller: "Identity | None", course_id: UUID) -> None:
        if caller is None:
            raise UnauthenticatedError

        enrollment = await self.store.get_enrollment(caller.user_id, course_id)
        if enrollment is None or not await self.store.delete_enrollment(enrollment):
            raise NotEnrolledError

        logger.info(
            "user_unenrolled",
            user_id=str(caller.user_id),
            course_id=str(course_id),
        )

    async def get_my_enrollments(
        self, caller: "Identity | None"
    ) -> list[EnrollmentResponse]:
        """All of the caller's enrollments, newest first."""
        if caller is None:
            raise UnauthenticatedError

        enrollments = await self.store.list_enrollments(caller.user_id)
        enrollments.sort(key=lambda e: e.enrolled_at, reverse=True)
        titles = await self.catalog.get_titles([e.course_id for e in enrollments])
        return [
            EnrollmentResponse.from_entity(e, titles.get(e.course_id))
            for e in enrollments
        ]

    async def _require_enrollment(self, user_id: UUID, course_id: UUID) -> Enrollment:
        enrollment = await self.store.get_enrollment(user_id, course_id)
        if enrollment is None:
            raise NotEnrolledError
        return enrollment

    # ==========================================================================
    # Lesson Progress
    # ==========================================================================

    async def complete_lesson(
        self,
        caller: "Identity | None",
        course_id: UUID,
        lesson_id: UUID,
    ) -> int:
        """Mark a lesson completed and return the course progress.

        Progress is recomputed from the stored completions of lessons that
        are currently in the course and never drops below the stored value.
        Reaching 100 runs the path cascade and issues the course certificate
        before the COMPLETED status is written; that conditional write is
        the last step, so a retry after any failure re-runs the idempotent
        steps and points are awarded only by the caller whose write lands.

        Raises:
            NotEnrolledError: If the caller is not enrolled in the course
            NotFoundError: If the lesson is not part of the course
        """
        if caller is None:
            raise UnauthenticatedError
        user_id = caller.user_id

        enrollment = await self._require_enrollment(user_id, course_id)
        lesson_ids = set(await self.catalog.get_lesson_ids(course_id))
        if lesson_id not in lesson_ids:
            raise NotFoundError(LESSON_NOT_FOUND)

        now = utc_now()
        await self.store.add_lesson_completion(enrollment.enrollment_id, lesson_id, now)
        completed = await self.store.get_completed_lesson_ids(enrollment.enrollment_id)
        computed = percentage(len(completed & lesson_ids), len(lesson_ids))
        progress = max(enrollment.progress, computed)

        if enrollment.is_completed:
            await self.store.touch(enrollment, lesson_id, now)
            return enrollment.progress

        if progress < 100:
            await self.store.record_progress(enrollment, progress, lesson_id, now)
            logger.info(
                "lesson_completed",
                user_id=str(user_id),
                course_id=str(course_id),
                lesson_id=str(lesson_id),
                progress=progress,
            )
            return progress

        await self.paths.on_course_completed(user_id, course_id)
        await self.certificates.generate_certificate(
            user_id, CertificateType.COURSE, course_id
        )

        if await self.store.mark_completed(enrollment, lesson_id, now):
            logger.info(
                "course_completed",
                user_id=str(user_id),
                course_id=str(course_id),
                lesson_id=str(lesson_id),
            )
            await self._reward_course_completion(user_id, course_id)

        return 100

    async def _reward_course_completion(self, user_id: UUID, course_id: UUID) -> None:
        course = await self.catalog.get_course(course_id)
        title = course.title if course else ""
        await self.hooks.award_points(
            user_id,
            self.course_completion_points,
            f"Menyelesaikan kursus: {title}",
        )
        await self.hooks.notify(
            user_id,
            NotificationType.ACHIEVEMENT,
            "Kursus Selesai",
            f'Selamat! Anda telah menyelesaikan kursus "{title}".',
            self.hooks.portal_url("certificates"),
        )

    async def update_last_accessed(
        self,
        caller: "Identity | None",
        course_id: UUID,
        lesson_id: UUID,
    ) -> None:
        """Remember where the learner is; ENROLLED becomes IN_PROGRESS."""
        if caller is None:
            raise UnauthenticatedError

        enrollment = await self._require_enrollment(caller.user_id, course_id)
        await self.store.touch(enrollment, lesson_id, utc_now())

    async def get_completed_lesson_ids(
        self, user_id: UUID, course_id: UUID
    ) -> list[UUID]:
        """Completed lesson ids, empty when the user is not enrolled."""
        enrollment = await self.store.get_enrollment(user_id, course_id)
        if enrollment is None:
            return []
        return sorted(
            await self.store.get_completed_lesson_ids(enrollment.enrollment_id),
            key=str,
        )
