"""Pydantic schemas for quiz taking, results and grading."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from .models import QuestionType


# ==============================================================================
# Attempt Requests
# ==============================================================================


class StartAttemptRequest(BaseModel):
    course_id: UUID = Field(description="Course the quiz belongs to")


class StartAttemptResponse(BaseModel):
    attempt_id: UUID


class AnswerSubmission(BaseModel):
    """Learner's answer to one question."""

    question_id: UUID
    option_id: UUID | None = Field(None, description="Chosen option (multiple choice)")
    essay_text: str | None = Field(None, max_length=20000, description="Essay answer")


class SubmitAttemptRequest(BaseModel):
    answers: list[AnswerSubmission] = Field(default_factory=list)


class SubmitAttemptResponse(BaseModel):
    score: int | None = Field(None, ge=0, le=100, description="None while essays are ungraded")
    passed: bool | None = None
    pending_grading: bool = False


# ==============================================================================
# Quiz Taking
# ==============================================================================


class OptionForTaking(BaseModel):
    id: UUID
    text: str


class QuestionForTaking(BaseModel):
    id: UUID
    type: QuestionType
    text: str
    points: int
    options: list[OptionForTaking] = Field(default_factory=list)


class QuizForTakingResponse(BaseModel):
    """Quiz as shown to a learner; correct options are never included."""

    id: UUID
    course_id: UUID
    title: str
    passing_score: int
    duration_minutes: int | None = None
    max_attempts: int
    attempts_used: int
    remaining_attempts: int
    open_attempt_id: UUID | None = Field(None, description="Latest unsubmitted attempt")
    expires_at: datetime | None = Field(
        None, description="Advisory deadline of the open attempt"
    )
    questions: list[QuestionForTaking]


# ==============================================================================
# Results
# ==============================================================================


class OptionResult(BaseModel):
    id: UUID
    text: str
    is_correct: bool | None = Field(None, description="Withheld until revealed")


class AnswerResult(BaseModel):
    answer_id: UUID
    question_id: UUID
    question_text: str
    question_type: QuestionType
    points: int
    option_id: UUID | None = None
    essay_text: str | None = None
    score: int | None = None
    feedback: str | None = None
    options: list[OptionResult] = Field(default_factory=list)


class AttemptResultResponse(BaseModel):
    id: UUID
    quiz_id: UUID
    quiz_title: str
    passing_score: int
    score: int | None = None
    passed: bool | None = None
    started_at: datetime
    submitted_at: datetime | None = None
    answers: list[AnswerResult] = Field(default_factory=list)


class AttemptSummary(BaseModel):
    id: UUID
    quiz_id: UUID
    quiz_title: str | None = None
    passing_score: int | None = None
    score: int | None = None
    passed: bool | None = None
    started_at: datetime
    submitted_at: datetime | None = None


# ==============================================================================
# Grading
# ==============================================================================


class GradeEssayRequest(BaseModel):
    score: int = Field(description="Points awarded, 0 to the question's points")
    feedback: str | None = Field(None, max_length=5000)


class GradeEssayResponse(BaseModel):
    attempt_id: UUID
    attempt_score: int | None = Field(None, description="Set once every answer is graded")
    passed: bool | None = None


class EssayToGrade(BaseModel):
    answer_id: UUID
    attempt_id: UUID
    question_text: str
    points: int
    essay_text: str | None = None
    learner_name: str | None = None
    learner_email: str | None = None
    submitted_at: datetime
