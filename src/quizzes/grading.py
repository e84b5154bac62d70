"""Essay grading and attempt score recalculation.

Grading stores the answer's score, then recomputes the attempt aggregate
from every stored answer once none is left ungraded. Re-grading an answer
of an already scored attempt recomputes the aggregate again.
"""

from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from src.auth.permissions import Capability
from src.core.errors import (
    AccessDeniedError,
    NotFoundError,
    OutOfRangeError,
    UnauthenticatedError,
)

from .schemas import EssayToGrade, GradeEssayResponse
from .scoring import aggregate_score, is_passed
from .service import QUIZ_NOT_FOUND, reward_attempt


if TYPE_CHECKING:
    from src.auth.schemas import Identity
    from src.auth.service import UserDirectory
    from src.rewards.hooks import RewardHooks

    from .store import QuizStore


logger = structlog.get_logger(__name__)

ANSWER_NOT_FOUND = "Jawaban tidak ditemukan"


class EssayGradingService:
    """Service for grading essay answers."""

    def __init__(
        self,
        store: "QuizStore",
        users: "UserDirectory",
        hooks: "RewardHooks",
        quiz_points_cap: int = 50,
    ):
        self.store = store
        self.users = users
        self.hooks = hooks
        self.quiz_points_cap = quiz_points_cap

    @staticmethod
    def _require_grader(caller: "Identity | None") -> "Identity":
        if caller is None:
            raise UnauthenticatedError
        if not caller.can(Capability.GRADE_ESSAYS):
            raise AccessDeniedError
        return caller

    async def grade_essay(
        self,
        caller: "Identity | None",
        answer_id: UUID,
        score: int,
        feedback: str | None,
    ) -> GradeEssayResponse:
        """Grade one answer and finalize the attempt when nothing is left.

        Raises:
            AccessDeniedError: If the caller may not grade essays
            NotFoundError: If the answer (or its question) does not exist
            OutOfRangeError: If score is outside [0, question points]
        """
        grader = self._require_grader(caller)

        ref = await self.store.get_answer_ref(answer_id)
        if ref is None:
            raise NotFoundError(ANSWER_NOT_FOUND)
        attempt = await self.store.get_attempt(ref.attempt_id)
        quiz = await self.store.get_quiz(ref.quiz_id)
        if attempt is None or quiz is None:
            raise NotFoundError(ANSWER_NOT_FOUND)

        points_by_question = {
            q.question_id: q.points for q in await self.store.get_questions(quiz.quiz_id)
        }
        max_points = points_by_question.get(ref.question_id)
        if max_points is None:
            raise NotFoundError(ANSWER_NOT_FOUND)
        if score < 0 or score > max_points:
            raise OutOfRangeError(max_points)

        await self.store.grade_answer(ref, attempt.submitted_at, score, feedback)
        logger.info(
            "essay_graded",
            answer_id=str(answer_id),
            attempt_id=str(ref.attempt_id),
            grader_id=str(grader.user_id),
            score=score,
            max_points=max_points,
        )

        answers = await self.store.get_answers(ref.attempt_id)
        final_score = aggregate_score(answers, points_by_question)
        if final_score is None:
            return GradeEssayResponse(attempt_id=ref.attempt_id)

        passed = is_passed(final_score, quiz.passing_score)
        await self.store.set_score(ref.attempt_id, final_score, passed)
        logger.info(
            "attempt_scored",
            attempt_id=str(ref.attempt_id),
            score=final_score,
            passed=passed,
            previous_score=attempt.score,
        )

        await reward_attempt(
            self.store,
            self.hooks,
            attempt,
            final_score,
            passed,
            f"Lulus kuis (Essay Graded): {quiz.title} dengan nilai {final_score}",
            self.quiz_points_cap,
        )

        return GradeEssayResponse(
            attempt_id=ref.attempt_id,
            attempt_score=final_score,
            passed=passed,
        )

    async def get_essays_to_grade(
        self, caller: "Identity | None", quiz_id: UUID
    ) -> list[EssayToGrade]:
        """Ungraded essays of submitted attempts, oldest submission first."""
        self._require_grader(caller)

        if await self.store.get_quiz(quiz_id) is None:
            raise NotFoundError(QUIZ_NOT_FOUND)

        pending = await self.store.list_pending_essays(quiz_id)
        if not pending:
            return []

        questions = {q.question_id: q for q in await self.store.get_questions(quiz_id)}
        users = await self.users.get_users({p.user_id for p in pending})

        essays = []
        for entry in sorted(pending, key=lambda p: p.submitted_at):
            question = questions.get(entry.question_id)
            answer = await self.store.get_answer(entry.attempt_id, entry.question_id)
            if question is None or answer is None or answer.is_graded:
                continue
            user = users.get(entry.user_id)
            essays.append(
                EssayToGrade(
                    answer_id=entry.answer_id,
                    attempt_id=entry.attempt_id,
                    question_text=question.text,
                    points=question.points,
                    essay_text=answer.essay_text,
                    learner_name=user.name if user else None,
                    learner_email=user.email if user else None,
                    submitted_at=entry.submitted_at,
                )
            )
        return essays
