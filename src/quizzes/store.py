# ruff: noqa: S608 - All CQL queries use keyspace from config, not user input
"""Cassandra access for quizzes, attempts and answers."""

from collections import defaultdict
from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from cassandra.query import BatchStatement, BatchType

from .models import (
    AnswerRef,
    AttemptAnswer,
    PendingEssay,
    Question,
    QuestionOption,
    QuestionType,
    Quiz,
    QuizAttempt,
)


if TYPE_CHECKING:
    from cassandra.cluster import Session


class QuizStore:
    """Prepared statements over the quiz catalog and attempt tables."""

    def __init__(self, session: "Session", keyspace: str):
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient execution."""
        # Catalog
        self._get_quiz = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.quizzes WHERE quiz_id = ?
        """)

        self._get_quizzes = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.quizzes WHERE quiz_id IN ?
        """)

        self._get_questions = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.quiz_questions WHERE quiz_id = ?
        """)

        self._get_options = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.quiz_question_options WHERE quiz_id = ?
        """)

        # Attempts
        self._insert_attempt = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.quiz_attempts
            (attempt_id, quiz_id, course_id, enrollment_id, user_id, started_at)
            VALUES (?, ?, ?, ?, ?, ?)
        """)

        self._insert_attempt_by_enrollment = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.quiz_attempts_by_enrollment
            (enrollment_id, quiz_id, attempt_id, started_at)
            VALUES (?, ?, ?, ?)
        """)

        self._get_attempt = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.quiz_attempts WHERE attempt_id = ?
        """)

        self._get_attempts = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.quiz_attempts WHERE attempt_id IN ?
        """)

        self._count_attempts = self.session.prepare(f"""
            SELECT COUNT(*) AS attempts FROM {self.keyspace}.quiz_attempts_by_enrollment
            WHERE enrollment_id = ? AND quiz_id = ?
        """)

        self._get_enrollment_attempts = self.session.prepare(f"""
            SELECT attempt_id FROM {self.keyspace}.quiz_attempts_by_enrollment
            WHERE enrollment_id = ?
        """)

        # Only one submit may claim an attempt
        self._claim_submission = self.session.prepare(f"""
            UPDATE {self.keyspace}.quiz_attempts SET submitted_at = ?
            WHERE attempt_id = ?
            IF submitted_at = null
        """)

        self._release_submission = self.session.prepare(f"""
            UPDATE {self.keyspace}.quiz_attempts SET submitted_at = null
            WHERE attempt_id = ?
            IF submitted_at = ?
        """)

        self._set_score = self.session.prepare(f"""
            UPDATE {self.keyspace}.quiz_attempts SET score = ?, passed = ?
            WHERE attempt_id = ?
        """)

        # Points for an attempt are awarded at most once
        self._claim_reward = self.session.prepare(f"""
            UPDATE {self.keyspace}.quiz_attempts SET rewarded_at = ?
            WHERE attempt_id = ?
            IF rewarded_at = null
        """)

        # Answers
        self._insert_answer = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.attempt_answers
            (attempt_id, question_id, answer_id, option_id, essay_text, score, feedback)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        """)

        self._insert_answer_ref = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.attempt_answers_by_id
            (answer_id, attempt_id, question_id, quiz_id)
            VALUES (?, ?, ?, ?)
        """)

        self._get_answers = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.attempt_answers WHERE attempt_id = ?
        """)

        self._get_answer = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.attempt_answers
            WHERE attempt_id = ? AND question_id = ?
        """)

        self._get_answer_ref = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.attempt_answers_by_id WHERE answer_id = ?
        """)

        self._grade_answer = self.session.prepare(f"""
            UPDATE {self.keyspace}.attempt_answers SET score = ?, feedback = ?
            WHERE attempt_id = ? AND question_id = ?
        """)

        # Grading queue
        self._insert_pending = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.pending_essays
            (quiz_id, submitted_at, answer_id, attempt_id, question_id, user_id)
            VALUES (?, ?, ?, ?, ?, ?)
        """)

        self._delete_pending = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.pending_essays
            WHERE quiz_id = ? AND submitted_at = ? AND answer_id = ?
        """)

        self._get_pending = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.pending_essays WHERE quiz_id = ?
        """)

    # ==========================================================================
    # Catalog
    # ==========================================================================

    async def get_quiz(self, quiz_id: UUID) -> Quiz | None:
        result = await self.session.aexecute(self._get_quiz, [quiz_id])
        row = result.one()
        return Quiz.from_row(row) if row else None

    async def get_quizzes(self, quiz_ids: list[UUID]) -> dict[UUID, Quiz]:
        if not quiz_ids:
            return {}
        result = await self.session.aexecute(self._get_quizzes, [list(set(quiz_ids))])
        quizzes = [Quiz.from_row(row) for row in result]
        return {quiz.quiz_id: quiz for quiz in quizzes}

    async def get_questions(self, quiz_id: UUID) -> list[Question]:
        """Questions in order, each with its options in order."""
        question_rows = await self.session.aexecute(self._get_questions, [quiz_id])
        option_rows = await self.session.aexecute(self._get_options, [quiz_id])

        options: dict[UUID, list[QuestionOption]] = defaultdict(list)
        for row in option_rows:
            options[row.question_id].append(
                QuestionOption(
                    option_id=row.option_id,
                    text=row.text,
                    is_correct=bool(row.is_correct),
                )
            )

        questions = []
        for row in question_rows:
            question = Question.from_row(row)
            if question.type == QuestionType.MULTIPLE_CHOICE:
                question.options = options.get(question.question_id, [])
            questions.append(question)
        return questions

    # ==========================================================================
    # Attempts
    # ==========================================================================

    async def create_attempt(self, attempt: QuizAttempt) -> None:
        batch = BatchStatement(batch_type=BatchType.LOGGED)
        batch.add(
            self._insert_attempt,
            [
                attempt.attempt_id,
                attempt.quiz_id,
                attempt.course_id,
                attempt.enrollment_id,
                attempt.user_id,
                attempt.started_at,
            ],
        )
        batch.add(
            self._insert_attempt_by_enrollment,
            [
                attempt.enrollment_id,
                attempt.quiz_id,
                attempt.attempt_id,
                attempt.started_at,
            ],
        )
        await self.session.aexecute(batch)

    async def get_attempt(self, attempt_id: UUID) -> QuizAttempt | None:
        result = await self.session.aexecute(self._get_attempt, [attempt_id])
        row = result.one()
        return QuizAttempt.from_row(row) if row else None

    async def count_attempts(self, enrollment_id: UUID, quiz_id: UUID) -> int:
        result = await self.session.aexecute(
            self._count_attempts, [enrollment_id, quiz_id]
        )
        row = result.one()
        return row.attempts if row else 0

    async def list_attempts(self, enrollment_id: UUID) -> list[QuizAttempt]:
        id_rows = await self.session.aexecute(
            self._get_enrollment_attempts, [enrollment_id]
        )
        attempt_ids = [row.attempt_id for row in id_rows]
        if not attempt_ids:
            return []
        result = await self.session.aexecute(self._get_attempts, [attempt_ids])
        return [QuizAttempt.from_row(row) for row in result]

    async def claim_submission(self, attempt_id: UUID, now: datetime) -> bool:
        """Mark the attempt submitted.

        Returns:
            True only for the first submit of the attempt
        """
        result = await self.session.aexecute(self._claim_submission, [now, attempt_id])
        return result.was_applied

    async def release_submission(self, attempt_id: UUID, claimed_at: datetime) -> bool:
        """Undo a claim whose submission could not be stored.

        Only the claim made at ``claimed_at`` is released.
        """
        result = await self.session.aexecute(
            self._release_submission, [attempt_id, claimed_at]
        )
        return result.was_applied

    async def save_submission(
        self,
        attempt: QuizAttempt,
        answers: list[AttemptAnswer],
        score: int | None,
        passed: bool | None,
    ) -> None:
        """Write answers, grading queue entries and the aggregate together."""
        batch = BatchStatement(batch_type=BatchType.LOGGED)
        for answer in answers:
            batch.add(
                self._insert_answer,
                [
                    answer.attempt_id,
                    answer.question_id,
                    answer.answer_id,
                    answer.option_id,
                    answer.essay_text,
                    answer.score,
                    answer.feedback,
                ],
            )
            batch.add(
                self._insert_answer_ref,
                [answer.answer_id, answer.attempt_id, answer.question_id, attempt.quiz_id],
            )
            if not answer.is_graded:
                batch.add(
                    self._insert_pending,
                    [
                        attempt.quiz_id,
                        attempt.submitted_at,
                        answer.answer_id,
                        attempt.attempt_id,
                        answer.question_id,
                        attempt.user_id,
                    ],
                )
        batch.add(self._set_score, [score, passed, attempt.attempt_id])
        await self.session.aexecute(batch)

    async def set_score(self, attempt_id: UUID, score: int, passed: bool) -> None:
        await self.session.aexecute(self._set_score, [score, passed, attempt_id])

    async def claim_reward(self, attempt_id: UUID, now: datetime) -> bool:
        result = await self.session.aexecute(self._claim_reward, [now, attempt_id])
        return result.was_applied

    # ==========================================================================
    # Answers
    # ==========================================================================

    async def get_answers(self, attempt_id: UUID) -> list[AttemptAnswer]:
        result = await self.session.aexecute(self._get_answers, [attempt_id])
        return [AttemptAnswer.from_row(row) for row in result]

    async def get_answer(self, attempt_id: UUID, question_id: UUID) -> AttemptAnswer | None:
        result = await self.session.aexecute(self._get_answer, [attempt_id, question_id])
        row = result.one()
        return AttemptAnswer.from_row(row) if row else None

    async def get_answer_ref(self, answer_id: UUID) -> AnswerRef | None:
        result = await self.session.aexecute(self._get_answer_ref, [answer_id])
        row = result.one()
        if row is None:
            return None
        return AnswerRef(
            answer_id=row.answer_id,
            attempt_id=row.attempt_id,
            question_id=row.question_id,
            quiz_id=row.quiz_id,
        )

    async def grade_answer(
        self,
        ref: AnswerRef,
        submitted_at: datetime | None,
        score: int,
        feedback: str | None,
    ) -> None:
        """Store a grade and drop the answer from the grading queue."""
        batch = BatchStatement(batch_type=BatchType.LOGGED)
        batch.add(self._grade_answer, [score, feedback, ref.attempt_id, ref.question_id])
        if submitted_at is not None:
            batch.add(self._delete_pending, [ref.quiz_id, submitted_at, ref.answer_id])
        await self.session.aexecute(batch)

    async def list_pending_essays(self, quiz_id: UUID) -> list[PendingEssay]:
        """Ungraded essays of a quiz, oldest submission first."""
        result = await self.session.aexecute(self._get_pending, [quiz_id])
        return [PendingEssay.from_row(row) for row in result]
