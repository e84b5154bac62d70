"""Quiz attempt service layer.

Business logic for:
- Starting attempts within the per-enrollment attempt limit
- Submitting answers with automatic multiple-choice scoring
- Attempt results, attempt history and the quiz as presented to a learner
"""

import random
from datetime import timedelta
from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from src.core.errors import (
    AccessDeniedError,
    AlreadySubmittedError,
    AttemptLimitReachedError,
    NotEnrolledError,
    NotFoundError,
    UnauthenticatedError,
)
from src.utils import utc_now

from .models import Question, Quiz, QuizAttempt
from .schemas import (
    AnswerResult,
    AnswerSubmission,
    AttemptResultResponse,
    AttemptSummary,
    OptionForTaking,
    OptionResult,
    QuestionForTaking,
    QuizForTakingResponse,
    SubmitAttemptResponse,
)
from .scoring import is_passed, reward_points, score_submission


if TYPE_CHECKING:
    from src.auth.schemas import Identity
    from src.progress.store import ProgressStore
    from src.rewards.hooks import RewardHooks

    from .store import QuizStore


logger = structlog.get_logger(__name__)

QUIZ_NOT_FOUND = "Quiz tidak ditemukan"
ATTEMPT_NOT_FOUND = "Attempt tidak ditemukan"


async def reward_attempt(
    store: "QuizStore",
    hooks: "RewardHooks",
    attempt: QuizAttempt,
    score: int | None,
    passed: bool | None,
    reason: str,
    cap: int,
) -> int:
    """Award points for a passed attempt, at most once per attempt.

    Returns:
        Points awarded by this call
    """
    amount = reward_points(score, passed, cap)
    if amount <= 0:
        return 0
    if not await store.claim_reward(attempt.attempt_id, utc_now()):
        return 0
    await hooks.award_points(attempt.user_id, amount, reason)
    return amount


class QuizAttemptService:
    """Service for taking quizzes."""

    def __init__(
        self,
        store: "QuizStore",
        progress: "ProgressStore",
        hooks: "RewardHooks",
        quiz_points_cap: int = 50,
        rng: random.Random | None = None,
    ):
        self.store = store
        self.progress = progress
        self.hooks = hooks
        self.quiz_points_cap = quiz_points_cap
        self.rng = rng or random.Random()

    async def _get_quiz(self, quiz_id: UUID) -> Quiz:
        quiz = await self.store.get_quiz(quiz_id)
        if quiz is None:
            raise NotFoundError(QUIZ_NOT_FOUND)
        return quiz

    # ==========================================================================
    # Attempt Lifecycle
    # ==========================================================================

    async def start_attempt(
        self, caller: "Identity | None", quiz_id: UUID, course_id: UUID
    ) -> UUID:
        """Open a new attempt and return its id.

        Raises:
            NotEnrolledError: If the caller is not enrolled in the course
            NotFoundError: If the quiz does not exist in the course
            AttemptLimitReachedError: If every attempt has been used
        """
        if caller is None:
            raise UnauthenticatedError

        enrollment = await self.progress.get_enrollment(caller.user_id, course_id)
        if enrollment is None:
            raise NotEnrolledError

        quiz = await self._get_quiz(quiz_id)
        if quiz.course_id != course_id:
            raise NotFoundError(QUIZ_NOT_FOUND)

        used = await self.store.count_attempts(enrollment.enrollment_id, quiz_id)
        if used >= quiz.max_attempts:
            raise AttemptLimitReachedError(quiz.max_attempts)

        attempt = QuizAttempt(
            quiz_id=quiz_id,
            course_id=course_id,
            enrollment_id=enrollment.enrollment_id,
            user_id=caller.user_id,
        )
        await self.store.create_attempt(attempt)

        logger.info(
            "attempt_started",
            attempt_id=str(attempt.attempt_id),
            quiz_id=str(quiz_id),
            user_id=str(caller.user_id),
            attempt_number=used + 1,
        )
        return attempt.attempt_id

    async def submit_attempt(
        self,
        caller: "Identity | None",
        attempt_id: UUID,
        answers: list[AnswerSubmission],
    ) -> SubmitAttemptResponse:
        """Score and store a submission.

        Multiple-choice answers are scored immediately. Any essay answer
        leaves the attempt score and passed flag unset until graded.

        Raises:
            NotFoundError: If the attempt or its quiz does not exist
            AccessDeniedError: If the caller does not own the attempt
            AlreadySubmittedError: If the attempt was submitted before
        """
        if caller is None:
            raise UnauthenticatedError

        attempt = await self.store.get_attempt(attempt_id)
        if attempt is None:
            raise NotFoundError(ATTEMPT_NOT_FOUND)
        if attempt.user_id != caller.user_id:
            raise AccessDeniedError
        if attempt.is_submitted:
            raise AlreadySubmittedError

        quiz = await self._get_quiz(attempt.quiz_id)
        questions = await self.store.get_questions(quiz.quiz_id)
        scored = score_submission(attempt.attempt_id, questions, answers)
        score = scored.score
        passed = is_passed(score, quiz.passing_score)

        now = utc_now()
        if not await self.store.claim_submission(attempt.attempt_id, now):
            raise AlreadySubmittedError
        attempt.submitted_at = now

        try:
            await self.store.save_submission(attempt, scored.answers, score, passed)
        except Exception as e:
            # Unclaimed again so the learner can resubmit the same attempt
            released = await self.store.release_submission(attempt.attempt_id, now)
            logger.warning(
                "attempt_submit_failed",
                attempt_id=str(attempt_id),
                user_id=str(caller.user_id),
                error=str(e),
                claim_released=released,
            )
            raise

        logger.info(
            "attempt_submitted",
            attempt_id=str(attempt_id),
            quiz_id=str(quiz.quiz_id),
            user_id=str(caller.user_id),
            answers=len(scored.answers),
            dropped=len(answers) - len(scored.answers),
            score=score,
            passed=passed,
            pending_grading=scored.pending_grading,
        )

        await reward_attempt(
            self.store,
            self.hooks,
            attempt,
            score,
            passed,
            f"Lulus kuis: {quiz.title} dengan nilai {score}",
            self.quiz_points_cap,
        )

        return SubmitAttemptResponse(
            score=score,
            passed=passed,
            pending_grading=scored.pending_grading,
        )

    # ==========================================================================
    # Queries
    # ==========================================================================

    async def get_attempt_result(
        self, caller: "Identity | None", attempt_id: UUID
    ) -> AttemptResultResponse | None:
        """Full attempt detail for its owner.

        Returns None for attempts that do not exist and for attempts owned
        by someone else alike. Correct options are withheld while the
        attempt is ungraded unless the quiz shows results.
        """
        if caller is None:
            raise UnauthenticatedError

        attempt = await self.store.get_attempt(attempt_id)
        if attempt is None or attempt.user_id != caller.user_id:
            return None

        quiz = await self.store.get_quiz(attempt.quiz_id)
        if quiz is None:
            return None

        questions = {q.question_id: q for q in await self.store.get_questions(quiz.quiz_id)}
        answers = await self.store.get_answers(attempt.attempt_id)
        reveal = attempt.is_submitted and (quiz.show_result or attempt.is_graded)

        results = []
        for answer in answers:
            question = questions.get(answer.question_id)
            if question is None:
                continue
            results.append(
                AnswerResult(
                    answer_id=answer.answer_id,
                    question_id=answer.question_id,
                    question_text=question.text,
                    question_type=question.type,
                    points=question.points,
                    option_id=answer.option_id,
                    essay_text=answer.essay_text,
                    score=answer.score,
                    feedback=answer.feedback,
                    options=[
                        OptionResult(
                            id=option.option_id,
                            text=option.text,
                            is_correct=option.is_correct if reveal else None,
                        )
                        for option in question.options
                    ],
                )
            )

        return AttemptResultResponse(
            id=attempt.attempt_id,
            quiz_id=quiz.quiz_id,
            quiz_title=quiz.title,
            passing_score=quiz.passing_score,
            score=attempt.score,
            passed=attempt.passed,
            started_at=attempt.started_at,
            submitted_at=attempt.submitted_at,
            answers=results,
        )

    async def get_my_attempts(
        self, caller: "Identity | None", course_id: UUID
    ) -> list[AttemptSummary]:
        """Caller's attempts in a course, newest first; empty if not enrolled."""
        if caller is None:
            raise UnauthenticatedError

        enrollment = await self.progress.get_enrollment(caller.user_id, course_id)
        if enrollment is None:
            return []

        attempts = await self.store.list_attempts(enrollment.enrollment_id)
        attempts.sort(key=lambda a: a.started_at, reverse=True)
        quizzes = await self.store.get_quizzes([a.quiz_id for a in attempts])

        summaries = []
        for attempt in attempts:
            quiz = quizzes.get(attempt.quiz_id)
            summaries.append(
                AttemptSummary(
                    id=attempt.attempt_id,
                    quiz_id=attempt.quiz_id,
                    quiz_title=quiz.title if quiz else None,
                    passing_score=quiz.passing_score if quiz else None,
                    score=attempt.score,
                    passed=attempt.passed,
                    started_at=attempt.started_at,
                    submitted_at=attempt.submitted_at,
                )
            )
        return summaries

    async def get_quiz_for_taking(
        self, caller: "Identity | None", quiz_id: UUID
    ) -> QuizForTakingResponse:
        """The quiz without correct options, plus the caller's attempt state.

        ``expires_at`` is the advisory deadline of the latest open attempt;
        it is not enforced on submit.
        """
        if caller is None:
            raise UnauthenticatedError

        quiz = await self._get_quiz(quiz_id)
        enrollment = await self.progress.get_enrollment(caller.user_id, quiz.course_id)
        if enrollment is None:
            raise NotEnrolledError

        attempts = [
            a
            for a in await self.store.list_attempts(enrollment.enrollment_id)
            if a.quiz_id == quiz_id
        ]
        open_attempts = sorted(
            (a for a in attempts if not a.is_submitted),
            key=lambda a: a.started_at,
            reverse=True,
        )
        open_attempt = open_attempts[0] if open_attempts else None

        expires_at = None
        if open_attempt is not None and quiz.duration_minutes:
            expires_at = open_attempt.started_at + timedelta(minutes=quiz.duration_minutes)

        questions = list(await self.store.get_questions(quiz_id))
        if quiz.shuffle_questions:
            self.rng.shuffle(questions)

        return QuizForTakingResponse(
            id=quiz.quiz_id,
            course_id=quiz.course_id,
            title=quiz.title,
            passing_score=quiz.passing_score,
            duration_minutes=quiz.duration_minutes,
            max_attempts=quiz.max_attempts,
            attempts_used=len(attempts),
            remaining_attempts=max(quiz.max_attempts - len(attempts), 0),
            open_attempt_id=open_attempt.attempt_id if open_attempt else None,
            expires_at=expires_at,
            questions=[self._question_for_taking(q) for q in questions],
        )

    @staticmethod
    def _question_for_taking(question: Question) -> QuestionForTaking:
        return QuestionForTaking(
            id=question.question_id,
            type=question.type,
            text=question.text,
            points=question.points,
            options=[
                OptionForTaking(id=option.option_id, text=option.text)
                for option in question.options
            ],
        )
