"""Database models for course enrollment and lesson completion.

Cassandra table definitions for:
- Enrollments: one row per (user, course), partitioned by user
- Lesson completions: append-only, one row per (enrollment, lesson)

Every write to ``enrollments`` is a lightweight transaction so that
uniqueness, monotonic progress and the single completion transition are
decided by Cassandra rather than by read-then-write in the service.
"""

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from src.utils import ensure_utc_aware, utc_now


class EnrollmentStatus(str, Enum):
    """Course enrollment status."""

    ENROLLED = "enrolled"  # Terdaftar, belum mulai
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    DROPPED = "dropped"


# Statuses a completion transition may start from
OPEN_STATUSES = (
    EnrollmentStatus.ENROLLED.value,
    EnrollmentStatus.IN_PROGRESS.value,
    EnrollmentStatus.DROPPED.value,
)


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

# Partitioned by user: "which courses is this learner taking?"
ENROLLMENTS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.enrollments (
    user_id UUID,
    course_id UUID,
    enrollment_id UUID,
    status TEXT,
    progress INT,
    last_lesson_id UUID,
    enrolled_at TIMESTAMP,
    completed_at TIMESTAMP,
    last_accessed_at TIMESTAMP,
    PRIMARY KEY ((user_id), course_id)
)
"""

LESSON_COMPLETIONS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.lesson_completions (
    enrollment_id UUID,
    lesson_id UUID,
    completed_at TIMESTAMP,
    PRIMARY KEY ((enrollment_id), lesson_id)
)
"""

PROGRESS_TABLES_CQL = [
    ENROLLMENTS_TABLE_CQL,
    LESSON_COMPLETIONS_TABLE_CQL,
]


# ==============================================================================
# Entity Classes
# ==============================================================================


class Enrollment:
    """Course enrollment entity.

    Attributes:
        user_id: Learner UUID
        course_id: Course UUID
        enrollment_id: Stable id referenced by completions and quiz attempts
        status: Enrollment status (enrolled, in_progress, completed, dropped)
        progress: Overall course progress (0-100)
        last_lesson_id: Last accessed lesson UUID (for resume)
        enrolled_at: Enrollment timestamp
        completed_at: Course completion timestamp
        last_accessed_at: Last access timestamp
    """

    def __init__(
        self,
        user_id: UUID,
        course_id: UUID,
        enrollment_id: UUID | None = None,
        status: str = EnrollmentStatus.ENROLLED.value,
        progress: int = 0,
        last_lesson_id: UUID | None = None,
        enrolled_at: datetime | None = None,
        completed_at: datetime | None = None,
        last_accessed_at: datetime | None = None,
    ):
        self.user_id = user_id
        self.course_id = course_id
        self.enrollment_id = enrollment_id or uuid4()
        self.status = status
        self.progress = progress
        self.last_lesson_id = last_lesson_id
        self.enrolled_at = ensure_utc_aware(enrolled_at) or utc_now()
        self.completed_at = ensure_utc_aware(completed_at)
        self.last_accessed_at = ensure_utc_aware(last_accessed_at)

    @property
    def is_completed(self) -> bool:
        """Check if course is completed."""
        return self.status == EnrollmentStatus.COMPLETED.value

    @classmethod
    def from_row(cls, row: Any) -> "Enrollment":
        """Create Enrollment instance from Cassandra row."""
        return cls(
            user_id=row.user_id,
            course_id=row.course_id,
            enrollment_id=row.enrollment_id,
            status=row.status or EnrollmentStatus.ENROLLED.value,
            progress=row.progress or 0,
            last_lesson_id=row.last_lesson_id,
            enrolled_at=row.enrolled_at,
            completed_at=row.completed_at,
            last_accessed_at=row.last_accessed_at,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "enrollment_id": self.enrollment_id,
            "user_id": self.user_id,
            "course_id": self.course_id,
            "status": self.status,
            "progress": self.progress,
            "last_lesson_id": self.last_lesson_id,
            "enrolled_at": self.enrolled_at,
            "completed_at": self.completed_at,
            "last_accessed_at": self.last_accessed_at,
        }

    def __repr__(self) -> str:
        return (
            f"<Enrollment user={self.user_id} course={self.course_id} "
            f"{self.status} {self.progress}%>"
        )
