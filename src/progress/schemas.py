"""Pydantic schemas for enrollment and lesson progress."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from .models import Enrollment, EnrollmentStatus


class EnrollmentResponse(BaseModel):
    """Course enrollment response."""

    model_config = ConfigDict(from_attributes=True)

    enrollment_id: UUID = Field(description="Enrollment ID")
    course_id: UUID = Field(description="Course ID")
    course_title: str | None = Field(None, description="Course title")
    status: EnrollmentStatus = Field(description="Enrollment status")
    progress: int = Field(ge=0, le=100, description="Overall progress (0-100)")
    last_lesson_id: UUID | None = Field(None, description="Lesson to resume from")
    enrolled_at: datetime = Field(description="Enrollment timestamp")
    completed_at: datetime | None = Field(None, description="Completion timestamp")

    @classmethod
    def from_entity(
        cls, enrollment: Enrollment, course_title: str | None = None
    ) -> "EnrollmentResponse":
        return cls(
            enrollment_id=enrollment.enrollment_id,
            course_id=enrollment.course_id,
            course_title=course_title,
            status=EnrollmentStatus(enrollment.status),
            progress=enrollment.progress,
            last_lesson_id=enrollment.last_lesson_id,
            enrolled_at=enrollment.enrolled_at,
            completed_at=enrollment.completed_at,
        )


class LessonCompleteResponse(BaseModel):
    progress: int = Field(ge=0, le=100, description="Course progress after completion")


class LastAccessedRequest(BaseModel):
    lesson_id: UUID = Field(description="Lesson the learner is viewing")


class CompletedLessonsResponse(BaseModel):
    lesson_ids: list[UUID] = Field(description="Completed lesson IDs")
