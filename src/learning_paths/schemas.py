"""Pydantic schemas for learning paths."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class PathCourseDetail(BaseModel):
    """One course of a path as seen by the learner."""

    course_id: UUID = Field(description="Course ID")
    position: int = Field(description="Order within the path")
    title: str | None = Field(None, description="Course title")
    is_locked: bool = Field(description="Locked until the previous course is completed")
    is_completed: bool = Field(description="Learner completed this course")
    enrollment_status: str | None = Field(None, description="Course enrollment status")
    progress: int = Field(0, ge=0, le=100, description="Course progress (0-100)")


class PathDetailResponse(BaseModel):
    id: UUID = Field(description="Path ID")
    title: str = Field(description="Path title")
    description: str | None = Field(None, description="Path description")
    is_enrolled: bool = Field(description="Learner is enrolled in the path")
    enrolled_at: datetime | None = Field(None, description="Path enrollment timestamp")
    completed_at: datetime | None = Field(None, description="Path completion timestamp")
    courses: list[PathCourseDetail] = Field(description="Courses in order")


class PathSummary(BaseModel):
    id: UUID = Field(description="Path ID")
    title: str = Field(description="Path title")
    description: str | None = Field(None, description="Path description")
    course_count: int = Field(description="Number of courses")
    is_enrolled: bool = Field(description="Learner is enrolled in the path")
    is_completed: bool = Field(description="Learner completed the path")
