"""Database models for quizzes, attempts and answers.

Cassandra table definitions for:
- Quizzes, questions and options (read-only catalog, authored elsewhere)
- Quiz attempts, looked up by id and listed per enrollment
- Attempt answers, clustered by question within an attempt
- Pending essays, a per-quiz grading queue ordered by submission time

Answers are written together with the attempt aggregate in one logged
batch after the attempt has been claimed with ``IF submitted_at = null``.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from src.utils import ensure_utc_aware, utc_now


class QuestionType(str, Enum):
    MULTIPLE_CHOICE = "multiple_choice"
    ESSAY = "essay"


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

QUIZZES_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.quizzes (
    quiz_id UUID PRIMARY KEY,
    course_id UUID,
    title TEXT,
    passing_score INT,
    duration_minutes INT,
    max_attempts INT,
    shuffle_questions BOOLEAN,
    show_result BOOLEAN,
    created_at TIMESTAMP
)
"""

QUIZ_QUESTIONS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.quiz_questions (
    quiz_id UUID,
    position INT,
    question_id UUID,
    type TEXT,
    text TEXT,
    points INT,
    PRIMARY KEY ((quiz_id), position, question_id)
)
"""

# Partitioned by quiz so one read returns the options of every question
QUIZ_QUESTION_OPTIONS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.quiz_question_options (
    quiz_id UUID,
    question_id UUID,
    position INT,
    option_id UUID,
    text TEXT,
    is_correct BOOLEAN,
    PRIMARY KEY ((quiz_id), question_id, position, option_id)
)
"""

QUIZ_ATTEMPTS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.quiz_attempts (
    attempt_id UUID PRIMARY KEY,
    quiz_id UUID,
    course_id UUID,
    enrollment_id UUID,
    user_id UUID,
    started_at TIMESTAMP,
    submitted_at TIMESTAMP,
    score INT,
    passed BOOLEAN,
    rewarded_at TIMESTAMP
)
"""

QUIZ_ATTEMPTS_BY_ENROLLMENT_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.quiz_attempts_by_enrollment (
    enrollment_id UUID,
    quiz_id UUID,
    attempt_id UUID,
    started_at TIMESTAMP,
    PRIMARY KEY ((enrollment_id), quiz_id, attempt_id)
)
"""

ATTEMPT_ANSWERS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.attempt_answers (
    attempt_id UUID,
    question_id UUID,
    answer_id UUID,
    option_id UUID,
    essay_text TEXT,
    score INT,
    feedback TEXT,
    PRIMARY KEY ((attempt_id), question_id)
)
"""

ATTEMPT_ANSWERS_BY_ID_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.attempt_answers_by_id (
    answer_id UUID PRIMARY KEY,
    attempt_id UUID,
    question_id UUID,
    quiz_id UUID
)
"""

# Grading queue: one row per ungraded essay, removed once graded
PENDING_ESSAYS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.pending_essays (
    quiz_id UUID,
    submitted_at TIMESTAMP,
    answer_id UUID,
    attempt_id UUID,
    question_id UUID,
    user_id UUID,
    PRIMARY KEY ((quiz_id), submitted_at, answer_id)
) WITH CLUSTERING ORDER BY (submitted_at ASC, answer_id ASC)
"""

QUIZZES_TABLES_CQL = [
    QUIZZES_TABLE_CQL,
    QUIZ_QUESTIONS_TABLE_CQL,
    QUIZ_QUESTION_OPTIONS_TABLE_CQL,
    QUIZ_ATTEMPTS_TABLE_CQL,
    QUIZ_ATTEMPTS_BY_ENROLLMENT_TABLE_CQL,
    ATTEMPT_ANSWERS_TABLE_CQL,
    ATTEMPT_ANSWERS_BY_ID_TABLE_CQL,
    PENDING_ESSAYS_TABLE_CQL,
]


# ==============================================================================
# Entity Classes
# ==============================================================================


@dataclass
class Quiz:
    """Quiz settings.

    Attributes:
        passing_score: Minimum score (0-100) to pass
        duration_minutes: Advisory time limit, None for untimed
        max_attempts: Attempts allowed per enrollment (>= 1)
        shuffle_questions: Present questions in random order
        show_result: Reveal correct options before the attempt is graded
    """

    quiz_id: UUID
    course_id: UUID
    title: str
    passing_score: int = 70
    duration_minutes: int | None = None
    max_attempts: int = 1
    shuffle_questions: bool = False
    show_result: bool = True

    @classmethod
    def from_row(cls, row: Any) -> "Quiz":
        return cls(
            quiz_id=row.quiz_id,
            course_id=row.course_id,
            title=row.title,
            passing_score=row.passing_score or 0,
            duration_minutes=row.duration_minutes,
            max_attempts=max(row.max_attempts or 1, 1),
            shuffle_questions=bool(row.shuffle_questions),
            show_result=row.show_result is not False,
        )


@dataclass
class QuestionOption:
    option_id: UUID
    text: str
    is_correct: bool = False


@dataclass
class Question:
    question_id: UUID
    type: QuestionType
    text: str
    points: int
    position: int = 0
    options: list[QuestionOption] = field(default_factory=list)

    @property
    def correct_option_id(self) -> UUID | None:
        for option in self.options:
            if option.is_correct:
                return option.option_id
        return None

    @classmethod
    def from_row(cls, row: Any) -> "Question":
        return cls(
            question_id=row.question_id,
            type=QuestionType(row.type),
            text=row.text,
            points=row.points or 0,
            position=row.position,
        )


@dataclass
class QuizAttempt:
    """One instance of a learner taking a quiz.

    ``score`` and ``passed`` stay None until every answer is graded.
    """

    quiz_id: UUID
    course_id: UUID
    enrollment_id: UUID
    user_id: UUID
    attempt_id: UUID = field(default_factory=uuid4)
    started_at: datetime = field(default_factory=utc_now)
    submitted_at: datetime | None = None
    score: int | None = None
    passed: bool | None = None

    @property
    def is_submitted(self) -> bool:
        return self.submitted_at is not None

    @property
    def is_graded(self) -> bool:
        return self.score is not None

    @classmethod
    def from_row(cls, row: Any) -> "QuizAttempt":
        return cls(
            attempt_id=row.attempt_id,
            quiz_id=row.quiz_id,
            course_id=row.course_id,
            enrollment_id=row.enrollment_id,
            user_id=row.user_id,
            started_at=ensure_utc_aware(row.started_at),
            submitted_at=ensure_utc_aware(row.submitted_at),
            score=row.score,
            passed=row.passed,
        )


@dataclass
class AttemptAnswer:
    attempt_id: UUID
    question_id: UUID
    answer_id: UUID = field(default_factory=uuid4)
    option_id: UUID | None = None
    essay_text: str | None = None
    score: int | None = None
    feedback: str | None = None

    @property
    def is_graded(self) -> bool:
        return self.score is not None

    @classmethod
    def from_row(cls, row: Any) -> "AttemptAnswer":
        return cls(
            attempt_id=row.attempt_id,
            question_id=row.question_id,
            answer_id=row.answer_id,
            option_id=row.option_id,
            essay_text=row.essay_text,
            score=row.score,
            feedback=row.feedback,
        )


@dataclass
class AnswerRef:
    """Where an answer lives, resolved from its id."""

    answer_id: UUID
    attempt_id: UUID
    question_id: UUID
    quiz_id: UUID


@dataclass
class PendingEssay:
    quiz_id: UUID
    submitted_at: datetime
    answer_id: UUID
    attempt_id: UUID
    question_id: UUID
    user_id: UUID

    @classmethod
    def from_row(cls, row: Any) -> "PendingEssay":
        return cls(
            quiz_id=row.quiz_id,
            submitted_at=ensure_utc_aware(row.submitted_at),
            answer_id=row.answer_id,
            attempt_id=row.attempt_id,
            question_id=row.question_id,
            user_id=row.user_id,
        )
