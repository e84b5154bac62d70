"""Cassandra access for learning paths and path enrollments."""

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from .models import LearningPath, PathCourse, PathEnrollment


if TYPE_CHECKING:
    from cassandra.cluster import Session


class LearningPathStore:
    def __init__(self, session: "Session", keyspace: str):
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        self._get_path = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.learning_paths WHERE path_id = ?
        """)

        self._get_all_paths = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.learning_paths
        """)

        self._get_path_courses = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.path_courses WHERE path_id = ?
        """)

        self._get_paths_by_course = self.session.prepare(f"""
            SELECT path_id FROM {self.keyspace}.paths_by_course WHERE course_id = ?
        """)

        self._get_path_enrollment = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.path_enrollments
            WHERE user_id = ? AND path_id = ?
        """)

        self._get_user_path_enrollments = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.path_enrollments WHERE user_id = ?
        """)

        self._insert_path_enrollment = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.path_enrollments
            (user_id, path_id, enrolled_at, completed_at)
            VALUES (?, ?, ?, null)
            IF NOT EXISTS
        """)

        self._mark_path_completed = self.session.prepare(f"""
            UPDATE {self.keyspace}.path_enrollments SET completed_at = ?
            WHERE user_id = ? AND path_id = ?
            IF completed_at = null
        """)

    async def get_path(self, path_id: UUID) -> LearningPath | None:
        result = await self.session.aexecute(self._get_path, [path_id])
        row = result.one()
        return LearningPath.from_row(row) if row else None

    async def list_paths(self) -> list[LearningPath]:
        result = await self.session.aexecute(self._get_all_paths)
        return [LearningPath.from_row(row) for row in result]

    async def get_path_courses(self, path_id: UUID) -> list[PathCourse]:
        """Courses of a path in ascending order."""
        result = await self.session.aexecute(self._get_path_courses, [path_id])
        return sorted(
            (PathCourse.from_row(row) for row in result), key=lambda pc: pc.position
        )

    async def get_path_ids_for_course(self, course_id: UUID) -> list[UUID]:
        result = await self.session.aexecute(self._get_paths_by_course, [course_id])
        return [row.path_id for row in result]

    async def get_path_enrollment(
        self, user_id: UUID, path_id: UUID
    ) -> PathEnrollment | None:
        result = await self.session.aexecute(
            self._get_path_enrollment, [user_id, path_id]
        )
        row = result.one()
        return PathEnrollment.from_row(row) if row else None

    async def list_path_enrollments(self, user_id: UUID) -> list[PathEnrollment]:
        result = await self.session.aexecute(self._get_user_path_enrollments, [user_id])
        return [PathEnrollment.from_row(row) for row in result]

    async def create_path_enrollment(
        self, user_id: UUID, path_id: UUID, now: datetime
    ) -> bool:
        """Insert the path enrollment unless one exists.

        Returns:
            True if this call created it
        """
        result = await self.session.aexecute(
            self._insert_path_enrollment, [user_id, path_id, now]
        )
        return result.was_applied

    async def mark_path_completed(
        self, user_id: UUID, path_id: UUID, now: datetime
    ) -> bool:
        """Stamp ``completed_at`` once; later calls are not applied."""
        result = await self.session.aexecute(
            self._mark_path_completed, [now, user_id, path_id]
        )
        return result.was_applied
