"""Course catalog lookups used by progress tracking and certificates."""

from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from src.courses.models import Course, Lesson


if TYPE_CHECKING:
    from cassandra.cluster import Session


logger = structlog.get_logger(__name__)


class CourseCatalog:
    """Reads courses and their lessons."""

    def __init__(self, session: "Session", keyspace: str):
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        self.get_course_stmt = self.session.prepare(
            f"""
            SELECT id, title, slug, status, creator_id, created_at
            FROM {self.keyspace}.courses WHERE id = ?
            """
        )
        self.get_lessons_stmt = self.session.prepare(
            f"""
            SELECT course_id, lesson_id, module_id, title
            FROM {self.keyspace}.lessons_by_course WHERE course_id = ?
            """
        )

    async def get_course(self, course_id: UUID) -> Course | None:
        result = await self.session.aexecute(self.get_course_stmt, [course_id])
        row = result.one()
        return Course.from_row(row) if row else None

    async def get_lessons(self, course_id: UUID) -> list[Lesson]:
        """Lessons of a course in reading order."""
        result = await self.session.aexecute(self.get_lessons_stmt, [course_id])
        return [Lesson.from_row(row) for row in result]

    async def get_lesson_ids(self, course_id: UUID) -> list[UUID]:
        return [lesson.lesson_id for lesson in await self.get_lessons(course_id)]

    async def get_titles(self, course_ids: list[UUID]) -> dict[UUID, str]:
        titles: dict[UUID, str] = {}
        for course_id in course_ids:
            course = await self.get_course(course_id)
            if course is not None:
                titles[course_id] = course.title
        return titles
