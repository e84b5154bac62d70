"""Cassandra access for enrollments and lesson completions."""

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from .models import OPEN_STATUSES, Enrollment, EnrollmentStatus


if TYPE_CHECKING:
    from cassandra.cluster import Session


class ProgressStore:
    """Prepared statements over ``enrollments`` and ``lesson_completions``."""

    def __init__(self, session: "Session", keyspace: str):
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient execution."""
        self._get_enrollment = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.enrollments
            WHERE user_id = ? AND course_id = ?
        """)

        self._get_enrollments_for_courses = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.enrollments
            WHERE user_id = ? AND course_id IN ?
        """)

        self._get_user_enrollments = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.enrollments
            WHERE user_id = ?
        """)

        self._insert_enrollment = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.enrollments
            (user_id, course_id, enrollment_id, status, progress,
             last_lesson_id, enrolled_at, completed_at, last_accessed_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            IF NOT EXISTS
        """)

        self._delete_enrollment = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.enrollments
            WHERE user_id = ? AND course_id = ?
            IF EXISTS
        """)

        # Progress only moves forward and never reopens a completed course
        self._record_progress = self.session.prepare(f"""
            UPDATE {self.keyspace}.enrollments
            SET progress = ?, status = ?, last_lesson_id = ?, last_accessed_at = ?
            WHERE user_id = ? AND course_id = ?
            IF progress <= ? AND status IN (?, ?, ?)
        """)

        # Exactly one writer records the completion transition
        self._mark_completed = self.session.prepare(f"""
            UPDATE {self.keyspace}.enrollments
            SET progress = 100, status = ?, completed_at = ?,
                last_lesson_id = ?, last_accessed_at = ?
            WHERE user_id = ? AND course_id = ?
            IF status IN (?, ?, ?)
        """)

        self._touch_and_start = self.session.prepare(f"""
            UPDATE {self.keyspace}.enrollments
            SET last_lesson_id = ?, status = ?, last_accessed_at = ?
            WHERE user_id = ? AND course_id = ?
            IF status IN (?, ?)
        """)

        self._touch = self.session.prepare(f"""
            UPDATE {self.keyspace}.enrollments
            SET last_lesson_id = ?, last_accessed_at = ?
            WHERE user_id = ? AND course_id = ?
            IF EXISTS
        """)

        self._insert_completion = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.lesson_completions
            (enrollment_id, lesson_id, completed_at)
            VALUES (?, ?, ?)
            IF NOT EXISTS
        """)

        self._get_completions = self.session.prepare(f"""
            SELECT lesson_id FROM {self.keyspace}.lesson_completions
            WHERE enrollment_id = ?
        """)

        self._delete_completions = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.lesson_completions
            WHERE enrollment_id = ?
        """)

    # ==========================================================================
    # Enrollments
    # ==========================================================================

    async def get_enrollment(self, user_id: UUID, course_id: UUID) -> Enrollment | None:
        result = await self.session.aexecute(self._get_enrollment, [user_id, course_id])
        row = result.one()
        return Enrollment.from_row(row) if row else None

    async def get_enrollments_for_courses(
        self, user_id: UUID, course_ids: list[UUID]
    ) -> dict[UUID, Enrollment]:
        """Enrollments of one learner keyed by course id."""
        if not course_ids:
            return {}
        result = await self.session.aexecute(
            self._get_enrollments_for_courses, [user_id, list(course_ids)]
        )
        enrollments = [Enrollment.from_row(row) for row in result]
        return {enrollment.course_id: enrollment for enrollment in enrollments}

    async def list_enrollments(self, user_id: UUID) -> list[Enrollment]:
        result = await self.session.aexecute(self._get_user_enrollments, [user_id])
        return [Enrollment.from_row(row) for row in result]

    async def create_enrollment(self, enrollment: Enrollment) -> bool:
        """Insert the enrollment unless one exists for (user, course).

        Returns:
            True if this call created the row
        """
        result = await self.session.aexecute(
            self._insert_enrollment,
            [
                enrollment.user_id,
                enrollment.course_id,
                enrollment.enrollment_id,
                enrollment.status,
                enrollment.progress,
                enrollment.last_lesson_id,
                enrollment.enrolled_at,
                enrollment.completed_at,
                enrollment.last_accessed_at,
            ],
        )
        return result.was_applied

    async def delete_enrollment(self, enrollment: Enrollment) -> bool:
        result = await self.session.aexecute(
            self._delete_enrollment, [enrollment.user_id, enrollment.course_id]
        )
        if result.was_applied:
            await self.session.aexecute(
                self._delete_completions, [enrollment.enrollment_id]
            )
        return result.was_applied

    async def record_progress(
        self,
        enrollment: Enrollment,
        progress: int,
        last_lesson_id: UUID,
        now: datetime,
    ) -> bool:
        result = await self.session.aexecute(
            self._record_progress,
            [
                progress,
                EnrollmentStatus.IN_PROGRESS.value,
                last_lesson_id,
                now,
                enrollment.user_id,
                enrollment.course_id,
                progress,
                *OPEN_STATUSES,
            ],
        )
        return result.was_applied

    async def mark_completed(
        self,
        enrollment: Enrollment,
        last_lesson_id: UUID,
        now: datetime,
    ) -> bool:
        """Record the transition to COMPLETED.

        Returns:
            True only for the single caller whose write moved the status
        """
        result = await self.session.aexecute(
            self._mark_completed,
            [
                EnrollmentStatus.COMPLETED.value,
                now,
                last_lesson_id,
                now,
                enrollment.user_id,
                enrollment.course_id,
                *OPEN_STATUSES,
            ],
        )
        return result.was_applied

    async def touch(
        self,
        enrollment: Enrollment,
        lesson_id: UUID,
        now: datetime,
    ) -> bool:
        """Record the resume lesson; a not-yet-started course becomes IN_PROGRESS."""
        if enrollment.status in (
            EnrollmentStatus.ENROLLED.value,
            EnrollmentStatus.IN_PROGRESS.value,
        ):
            result = await self.session.aexecute(
                self._touch_and_start,
                [
                    lesson_id,
                    EnrollmentStatus.IN_PROGRESS.value,
                    now,
                    enrollment.user_id,
                    enrollment.course_id,
                    EnrollmentStatus.ENROLLED.value,
                    EnrollmentStatus.IN_PROGRESS.value,
                ],
            )
            if result.was_applied:
                return True

        result = await self.session.aexecute(
            self._touch,
            [lesson_id, now, enrollment.user_id, enrollment.course_id],
        )
        return result.was_applied

    # ==========================================================================
    # Lesson completions
    # ==========================================================================

    async def add_lesson_completion(
        self, enrollment_id: UUID, lesson_id: UUID, now: datetime
    ) -> bool:
        """Insert the completion; repeated calls leave the first timestamp."""
        result = await self.session.aexecute(
            self._insert_completion, [enrollment_id, lesson_id, now]
        )
        return result.was_applied

    async def get_completed_lesson_ids(self, enrollment_id: UUID) -> set[UUID]:
        result = await self.session.aexecute(self._get_completions, [enrollment_id])
        return {row.lesson_id for row in result}
