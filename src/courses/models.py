"""Read-only course catalog tables.

Courses and lessons are authored elsewhere. Lessons are clustered by
module and lesson position so a single partition read returns a course's
lessons in reading order.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from src.utils import ensure_utc_aware


class ContentStatus(str, Enum):
    """Content publication status."""

    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


COURSES_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.courses (
    id UUID PRIMARY KEY,
    title TEXT,
    slug TEXT,
    status TEXT,
    creator_id UUID,
    created_at TIMESTAMP
)
"""

LESSONS_BY_COURSE_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.lessons_by_course (
    course_id UUID,
    module_position INT,
    lesson_position INT,
    lesson_id UUID,
    module_id UUID,
    title TEXT,
    PRIMARY KEY ((course_id), module_position, lesson_position, lesson_id)
)
"""

COURSES_TABLES_CQL = [COURSES_TABLE_CQL, LESSONS_BY_COURSE_TABLE_CQL]


@dataclass
class Course:
    id: UUID
    title: str
    status: str = ContentStatus.DRAFT.value
    slug: str | None = None
    creator_id: UUID | None = None
    created_at: datetime | None = None

    @property
    def is_published(self) -> bool:
        return self.status == ContentStatus.PUBLISHED.value

    @classmethod
    def from_row(cls, row: Any) -> "Course":
        return cls(
            id=row.id,
            title=row.title,
            status=row.status,
            slug=row.slug,
            creator_id=row.creator_id,
            created_at=ensure_utc_aware(row.created_at),
        )


@dataclass
class Lesson:
    course_id: UUID
    lesson_id: UUID
    title: str = ""
    module_id: UUID | None = None

    @classmethod
    def from_row(cls, row: Any) -> "Lesson":
        return cls(
            course_id=row.course_id,
            lesson_id=row.lesson_id,
            title=row.title,
            module_id=row.module_id,
        )
