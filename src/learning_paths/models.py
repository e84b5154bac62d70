"""Database models for learning paths.

Cassandra table definitions for:
- learning_paths: catalog of paths (authored elsewhere)
- path_courses: ordered courses of a path
- paths_by_course: reverse lookup "which paths contain this course?"
- path_enrollments: one row per (user, path)
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any
from uuid import UUID

from src.courses.models import ContentStatus
from src.utils import ensure_utc_aware, utc_now


LEARNING_PATHS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.learning_paths (
    path_id UUID PRIMARY KEY,
    title TEXT,
    description TEXT,
    status TEXT,
    created_at TIMESTAMP
)
"""

PATH_COURSES_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.path_courses (
    path_id UUID,
    position INT,
    course_id UUID,
    PRIMARY KEY ((path_id), position, course_id)
)
"""

PATHS_BY_COURSE_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.paths_by_course (
    course_id UUID,
    path_id UUID,
    position INT,
    PRIMARY KEY ((course_id), path_id)
)
"""

PATH_ENROLLMENTS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.path_enrollments (
    user_id UUID,
    path_id UUID,
    enrolled_at TIMESTAMP,
    completed_at TIMESTAMP,
    PRIMARY KEY ((user_id), path_id)
)
"""

LEARNING_PATHS_TABLES_CQL = [
    LEARNING_PATHS_TABLE_CQL,
    PATH_COURSES_TABLE_CQL,
    PATHS_BY_COURSE_TABLE_CQL,
    PATH_ENROLLMENTS_TABLE_CQL,
]


@dataclass
class LearningPath:
    path_id: UUID
    title: str
    description: str | None = None
    status: str = ContentStatus.DRAFT.value
    created_at: datetime | None = None

    @property
    def is_published(self) -> bool:
        return self.status == ContentStatus.PUBLISHED.value

    @classmethod
    def from_row(cls, row: Any) -> "LearningPath":
        return cls(
            path_id=row.path_id,
            title=row.title,
            description=row.description,
            status=row.status,
            created_at=ensure_utc_aware(row.created_at),
        )


@dataclass
class PathCourse:
    path_id: UUID
    position: int
    course_id: UUID

    @classmethod
    def from_row(cls, row: Any) -> "PathCourse":
        return cls(path_id=row.path_id, position=row.position, course_id=row.course_id)


class PathEnrollment:
    """A learner's enrollment in a learning path."""

    def __init__(
        self,
        user_id: UUID,
        path_id: UUID,
        enrolled_at: datetime | None = None,
        completed_at: datetime | None = None,
    ):
        self.user_id = user_id
        self.path_id = path_id
        self.enrolled_at = ensure_utc_aware(enrolled_at) or utc_now()
        self.completed_at = ensure_utc_aware(completed_at)

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None

    @classmethod
    def from_row(cls, row: Any) -> "PathEnrollment":
        return cls(
            user_id=row.user_id,
            path_id=row.path_id,
            enrolled_at=row.enrolled_at,
            completed_at=row.completed_at,
        )

    def __repr__(self) -> str:
        return f"<PathEnrollment user={self.user_id} path={self.path_id}>"
