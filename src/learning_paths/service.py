"""Learning path service layer.

Business logic for:
- Unlocking the next course of every path a completed course belongs to
- Recording path completion and issuing the PATH certificate
- Path enrollment and the learner's path view with lock state
"""

from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from src.certificates.models import CertificateType
from src.core.errors import NotFoundError, UnauthenticatedError
from src.email.templates import render_path_completed, render_path_enrolled
from src.notifications.models import NotificationType
from src.progress.models import Enrollment, EnrollmentStatus
from src.utils import utc_now

from .models import LearningPath, PathCourse, PathEnrollment
from .schemas import PathCourseDetail, PathDetailResponse, PathSummary


if TYPE_CHECKING:
    from src.auth.schemas import Identity
    from src.auth.service import UserDirectory
    from src.certificates.service import CertificateService
    from src.courses.service import CourseCatalog
    from src.progress.store import ProgressStore
    from src.rewards.hooks import RewardHooks

    from .store import LearningPathStore


logger = structlog.get_logger(__name__)

PATH_NOT_FOUND = "Learning path tidak ditemukan"


class LearningPathService:
    """Path unlock cascade and path enrollment."""

    def __init__(
        self,
        store: "LearningPathStore",
        progress: "ProgressStore",
        catalog: "CourseCatalog",
        certificates: "CertificateService",
        users: "UserDirectory",
        hooks: "RewardHooks",
    ):
        self.store = store
        self.progress = progress
        self.catalog = catalog
        self.certificates = certificates
        self.users = users
        self.hooks = hooks

    # ==========================================================================
    # Cascade
    # ==========================================================================

    async def on_course_completed(self, user_id: UUID, course_id: UUID) -> None:
        """React to ``course_id`` being completed by ``user_id``.

        The completed course is treated as COMPLETED even if its own status
        write has not landed yet. Safe to run more than once.
        """
        for path_id in await self.store.get_path_ids_for_course(course_id):
            if await self.store.get_path_enrollment(user_id, path_id) is None:
                continue

            path_courses = await self.store.get_path_courses(path_id)
            course_ids = [pc.course_id for pc in path_courses]
            if course_id not in course_ids:
                # Reverse lookup is stale for this path
                continue

            index = course_ids.index(course_id)
            if index < len(course_ids) - 1:
                await self._unlock_course(user_id, path_id, course_ids[index + 1])

            await self._complete_path_if_done(user_id, path_id, course_ids, course_id)

    async def _unlock_course(self, user_id: UUID, path_id: UUID, course_id: UUID) -> None:
        created = await self.progress.create_enrollment(
            Enrollment(
                user_id=user_id,
                course_id=course_id,
                status=EnrollmentStatus.ENROLLED.value,
            )
        )
        if not created:
            return

        logger.info(
            "path_course_unlocked",
            user_id=str(user_id),
            path_id=str(path_id),
            course_id=str(course_id),
        )
        course = await self.catalog.get_course(course_id)
        await self.hooks.notify(
            user_id,
            NotificationType.INFO,
            "Kursus Baru Terbuka",
            f'Kursus "{course.title if course else "berikutnya"}" kini dapat Anda ikuti.',
            self.hooks.portal_url(f"my-courses/{course_id}"),
        )

    async def _complete_path_if_done(
        self,
        user_id: UUID,
        path_id: UUID,
        course_ids: list[UUID],
        just_completed: UUID,
    ) -> None:
        enrollments = await self.progress.get_enrollments_for_courses(user_id, course_ids)
        all_completed = all(
            cid == just_completed
            or (cid in enrollments and enrollments[cid].is_completed)
            for cid in course_ids
        )
        if not all_completed:
            return

        await self.certificates.generate_certificate(
            user_id, CertificateType.PATH, path_id
        )
        if not await self.store.mark_path_completed(user_id, path_id, utc_now()):
            return

        logger.info("path_completed", user_id=str(user_id), path_id=str(path_id))

        path = await self.store.get_path(path_id)
        title = path.title if path else ""
        await self.hooks.notify(
            user_id,
            NotificationType.ACHIEVEMENT,
            "Learning Path Selesai",
            f'Selamat! Anda telah menyelesaikan learning path "{title}".',
            self.hooks.portal_url("certificates"),
        )
        user = await self.users.get_user(user_id)
        if user is not None:
            subject, body, html = render_path_completed(user.name, title)
            await self.hooks.send_email(user.email, subject, body, html, user.name)

    # ==========================================================================
    # Enrollment
    # ==========================================================================

    async def _get_published_path(self, path_id: UUID) -> LearningPath:
        path = await self.store.get_path(path_id)
        if path is None or not path.is_published:
            raise NotFoundError(PATH_NOT_FOUND)
        return path

    async def enroll_in_path(self, caller: "Identity | None", path_id: UUID) -> None:
        """Enroll the caller in a path and in its first course.

        Re-enrolling is harmless: existing rows are left untouched.
        """
        if caller is None:
            raise UnauthenticatedError

        path = await self._get_published_path(path_id)
        now = utc_now()
        await self.store.create_path_enrollment(caller.user_id, path_id, now)

        path_courses = await self.store.get_path_courses(path_id)
        if path_courses:
            await self.progress.create_enrollment(
                Enrollment(
                    user_id=caller.user_id,
                    course_id=path_courses[0].course_id,
                    status=EnrollmentStatus.ENROLLED.value,
                    enrolled_at=now,
                )
            )

        logger.info(
            "path_enrolled",
            user_id=str(caller.user_id),
            path_id=str(path_id),
        )

        await self.hooks.notify(
            caller.user_id,
            NotificationType.INFO,
            "Pendaftaran Learning Path Berhasil",
            f'Anda telah terdaftar di learning path "{path.title}".',
            self.hooks.portal_url(f"learning-paths/{path_id}"),
        )
        if caller.email:
            name = caller.name or caller.email
            subject, body, html = render_path_enrolled(name, path.title)
            await self.hooks.send_email(str(caller.email), subject, body, html, caller.name)

    # ==========================================================================
    # Queries
    # ==========================================================================

    async def get_path_detail(
        self, caller: "Identity | None", path_id: UUID
    ) -> PathDetailResponse:
        """Ordered courses with lock state.

        A course is locked when the caller is not enrolled in the path or
        the course before it is not completed; the first course is unlocked
        for every path member.
        """
        if caller is None:
            raise UnauthenticatedError

        path = await self._get_published_path(path_id)
        path_enrollment = await self.store.get_path_enrollment(caller.user_id, path_id)
        path_courses = await self.store.get_path_courses(path_id)
        course_ids = [pc.course_id for pc in path_courses]
        enrollments = await self.progress.get_enrollments_for_courses(
            caller.user_id, course_ids
        )
        titles = await self.catalog.get_titles(course_ids)

        return PathDetailResponse(
            id=path.path_id,
            title=path.title,
            description=path.description,
            is_enrolled=path_enrollment is not None,
            enrolled_at=path_enrollment.enrolled_at if path_enrollment else None,
            completed_at=path_enrollment.completed_at if path_enrollment else None,
            courses=self._course_details(
                path_courses, path_enrollment, enrollments, titles
            ),
        )

    @staticmethod
    def _course_details(
        path_courses: list[PathCourse],
        path_enrollment: PathEnrollment | None,
        enrollments: dict[UUID, Enrollment],
        titles: dict[UUID, str],
    ) -> list[PathCourseDetail]:
        details = []
        previous_completed = True
        for pc in path_courses:
            enrollment = enrollments.get(pc.course_id)
            is_completed = enrollment is not None and enrollment.is_completed
            details.append(
                PathCourseDetail(
                    course_id=pc.course_id,
                    position=pc.position,
                    title=titles.get(pc.course_id),
                    is_locked=path_enrollment is None or not previous_completed,
                    is_completed=is_completed,
                    enrollment_status=enrollment.status if enrollment else None,
                    progress=enrollment.progress if enrollment else 0,
                )
            )
            previous_completed = is_completed
        return details

    async def list_paths(self, caller: "Identity | None") -> list[PathSummary]:
        """Published paths, newest first, with the caller's enrollment state."""
        if caller is None:
            raise UnauthenticatedError

        paths = [p for p in await self.store.list_paths() if p.is_published]
        paths.sort(key=lambda p: p.created_at or utc_now(), reverse=True)
        enrolled = {
            pe.path_id: pe for pe in await self.store.list_path_enrollments(caller.user_id)
        }

        summaries = []
        for path in paths:
            path_enrollment = enrolled.get(path.path_id)
            summaries.append(
                PathSummary(
                    id=path.path_id,
                    title=path.title,
                    description=path.description,
                    course_count=len(await self.store.get_path_courses(path.path_id)),
                    is_enrolled=path_enrollment is not None,
                    is_completed=path_enrollment is not None
                    and path_enrollment.is_completed,
                )
            )
        return summaries
