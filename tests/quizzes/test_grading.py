"""Tests for essay grading and score recalculation."""

from uuid import UUID, uuid4

import pytest

from src.auth.schemas import Identity
from src.core.errors import (
    AccessDeniedError,
    NotFoundError,
    OutOfRangeError,
    UnauthenticatedError,
)
from src.progress.models import Enrollment
from src.quizzes.grading import EssayGradingService
from src.quizzes.schemas import AnswerSubmission
from src.quizzes.service import QuizAttemptService
from tests.fakes import (
    FakeCatalog,
    FakeProgressStore,
    FakeQuizStore,
    RecordingHooks,
    make_essay,
)


@pytest.fixture
def essay_quiz(
    catalog: FakeCatalog,
    progress_store: FakeProgressStore,
    quiz_store: FakeQuizStore,
    learner: Identity,
):
    """Two 10-point essays, passing score 70, learner enrolled."""
    course = catalog.add_course()
    progress_store.enrollments[(learner.user_id, course.id)] = Enrollment(
        user_id=learner.user_id, course_id=course.id
    )
    questions = [make_essay(10, "Jelaskan K3"), make_essay(10, "Jelaskan APD")]
    quiz = quiz_store.add_quiz(
        course.id, questions, title="Esai K3", passing_score=70
    )
    return course, quiz, questions


async def _submit_essays(
    quiz_service: QuizAttemptService, learner: Identity, essay_quiz
) -> UUID:
    course, quiz, questions = essay_quiz
    attempt_id = await quiz_service.start_attempt(learner, quiz.quiz_id, course.id)
    await quiz_service.submit_attempt(
        learner,
        attempt_id,
        [
            AnswerSubmission(question_id=q.question_id, essay_text=f"Jawaban {i}")
            for i, q in enumerate(questions)
        ],
    )
    return attempt_id


def _answer_ids(quiz_store: FakeQuizStore, attempt_id: UUID, questions) -> list[UUID]:
    by_question = {a.question_id: a.answer_id for a in quiz_store.answers_of(attempt_id)}
    return [by_question[q.question_id] for q in questions]


class TestGradeEssay:
    """Tests for grade_essay."""

    @pytest.mark.asyncio
    async def test_score_set_after_last_essay(
        self,
        quiz_service: QuizAttemptService,
        grading_service: EssayGradingService,
        quiz_store: FakeQuizStore,
        hooks: RecordingHooks,
        learner: Identity,
        mentor: Identity,
        essay_quiz,
    ) -> None:
        attempt_id = await _submit_essays(quiz_service, learner, essay_quiz)
        first, second = _answer_ids(quiz_store, attempt_id, essay_quiz[2])

        partial = await grading_service.grade_essay(mentor, first, 8, "Bagus")
        assert partial.attempt_score is None
        assert quiz_store.attempts[attempt_id].score is None
        assert hooks.points == []

        final = await grading_service.grade_essay(mentor, second, 7, None)

        assert final.attempt_score == 75
        assert final.passed is True
        assert quiz_store.attempts[attempt_id].score == 75
        assert quiz_store.attempts[attempt_id].passed is True
        assert hooks.points == [
            (
                learner.user_id,
                37,
                "Lulus kuis (Essay Graded): Esai K3 dengan nilai 75",
            )
        ]

    @pytest.mark.asyncio
    async def test_regrade_recomputes_without_second_award(
        self,
        quiz_service: QuizAttemptService,
        grading_service: EssayGradingService,
        quiz_store: FakeQuizStore,
        hooks: RecordingHooks,
        learner: Identity,
        mentor: Identity,
        essay_quiz,
    ) -> None:
        attempt_id = await _submit_essays(quiz_service, learner, essay_quiz)
        first, second = _answer_ids(quiz_store, attempt_id, essay_quiz[2])
        await grading_service.grade_essay(mentor, first, 8, None)
        await grading_service.grade_essay(mentor, second, 7, None)

        regraded = await grading_service.grade_essay(mentor, second, 10, "Direvisi")

        assert regraded.attempt_score == 90
        assert quiz_store.attempts[attempt_id].score == 90
        assert len(hooks.points) == 1

    @pytest.mark.asyncio
    async def test_failing_grade(
        self,
        quiz_service: QuizAttemptService,
        grading_service: EssayGradingService,
        quiz_store: FakeQuizStore,
        hooks: RecordingHooks,
        learner: Identity,
        mentor: Identity,
        essay_quiz,
    ) -> None:
        attempt_id = await _submit_essays(quiz_service, learner, essay_quiz)
        first, second = _answer_ids(quiz_store, attempt_id, essay_quiz[2])
        await grading_service.grade_essay(mentor, first, 3, None)

        final = await grading_service.grade_essay(mentor, second, 4, None)

        assert final.attempt_score == 35
        assert final.passed is False
        assert hooks.points == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("score", [-1, 11])
    async def test_out_of_range(
        self,
        score: int,
        quiz_service: QuizAttemptService,
        grading_service: EssayGradingService,
        quiz_store: FakeQuizStore,
        learner: Identity,
        mentor: Identity,
        essay_quiz,
    ) -> None:
        attempt_id = await _submit_essays(quiz_service, learner, essay_quiz)
        first, _ = _answer_ids(quiz_store, attempt_id, essay_quiz[2])

        with pytest.raises(OutOfRangeError) as exc_info:
            await grading_service.grade_essay(mentor, first, score, None)

        assert exc_info.value.maximum == 10
        assert all(a.score is None for a in quiz_store.answers_of(attempt_id))

    @pytest.mark.asyncio
    @pytest.mark.parametrize("score", [0, 10])
    async def test_bounds_are_inclusive(
        self,
        score: int,
        quiz_service: QuizAttemptService,
        grading_service: EssayGradingService,
        quiz_store: FakeQuizStore,
        learner: Identity,
        mentor: Identity,
        essay_quiz,
    ) -> None:
        attempt_id = await _submit_essays(quiz_service, learner, essay_quiz)
        first, _ = _answer_ids(quiz_store, attempt_id, essay_quiz[2])

        await grading_service.grade_essay(mentor, first, score, None)

        graded = [a for a in quiz_store.answers_of(attempt_id) if a.answer_id == first]
        assert graded[0].score == score

    @pytest.mark.asyncio
    async def test_learner_cannot_grade(
        self,
        quiz_service: QuizAttemptService,
        grading_service: EssayGradingService,
        quiz_store: FakeQuizStore,
        learner: Identity,
        essay_quiz,
    ) -> None:
        attempt_id = await _submit_essays(quiz_service, learner, essay_quiz)
        first, _ = _answer_ids(quiz_store, attempt_id, essay_quiz[2])

        with pytest.raises(AccessDeniedError):
            await grading_service.grade_essay(learner, first, 10, None)
        with pytest.raises(UnauthenticatedError):
            await grading_service.grade_essay(None, first, 10, None)

    @pytest.mark.asyncio
    async def test_unknown_answer(
        self, grading_service: EssayGradingService, mentor: Identity
    ) -> None:
        with pytest.raises(NotFoundError, match="Jawaban tidak ditemukan"):
            await grading_service.grade_essay(mentor, uuid4(), 5, None)


class TestEssaysToGrade:
    """Tests for the grading queue."""

    @pytest.mark.asyncio
    async def test_queue_shrinks_as_essays_are_graded(
        self,
        quiz_service: QuizAttemptService,
        grading_service: EssayGradingService,
        quiz_store: FakeQuizStore,
        learner: Identity,
        mentor: Identity,
        essay_quiz,
    ) -> None:
        _, quiz, questions = essay_quiz
        attempt_id = await _submit_essays(quiz_service, learner, essay_quiz)

        queue = await grading_service.get_essays_to_grade(mentor, quiz.quiz_id)

        assert len(queue) == 2
        assert {e.question_text for e in queue} == {"Jelaskan K3", "Jelaskan APD"}
        assert queue[0].learner_name == "Budi Santoso"
        assert queue[0].learner_email == "learner@example.com"

        first, _ = _answer_ids(quiz_store, attempt_id, questions)
        await grading_service.grade_essay(mentor, first, 5, None)

        remaining = await grading_service.get_essays_to_grade(mentor, quiz.quiz_id)
        assert [e.answer_id for e in remaining] != [first]
        assert len(remaining) == 1

    @pytest.mark.asyncio
    async def test_requires_grader(
        self, grading_service: EssayGradingService, learner: Identity, essay_quiz
    ) -> None:
        with pytest.raises(AccessDeniedError):
            await grading_service.get_essays_to_grade(learner, essay_quiz[1].quiz_id)

    @pytest.mark.asyncio
    async def test_unknown_quiz(
        self, grading_service: EssayGradingService, mentor: Identity
    ) -> None:
        with pytest.raises(NotFoundError):
            await grading_service.get_essays_to_grade(mentor, uuid4())
