"""Pure scoring rules for quiz attempts.

Aggregate scores are always re-derived from per-answer scores rather than
maintained incrementally.
"""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from src.utils import percentage

from .models import AttemptAnswer, Question, QuestionType


CORRECT_FEEDBACK = "Benar"
INCORRECT_FEEDBACK = "Salah"


class SubmittedAnswer(Protocol):
    question_id: UUID
    option_id: UUID | None
    essay_text: str | None


@dataclass
class ScoredSubmission:
    answers: list[AttemptAnswer]
    total_points: int
    earned_points: int
    pending_grading: bool

    @property
    def score(self) -> int | None:
        if self.pending_grading:
            return None
        return percentage(self.earned_points, self.total_points)


def score_submission(
    attempt_id: UUID,
    questions: list[Question],
    submitted: list[SubmittedAnswer],
) -> ScoredSubmission:
    """Score a submission against the quiz's current questions.

    Answers to unknown questions are dropped; a question answered twice
    keeps its first answer. Unanswered questions do not count toward the
    total.
    """
    by_id = {question.question_id: question for question in questions}
    answers: list[AttemptAnswer] = []
    seen: set[UUID] = set()
    total = earned = 0
    pending = False

    for item in submitted:
        question = by_id.get(item.question_id)
        if question is None or item.question_id in seen:
            continue
        seen.add(item.question_id)
        total += question.points

        if question.type == QuestionType.MULTIPLE_CHOICE:
            correct_id = question.correct_option_id
            is_correct = item.option_id is not None and item.option_id == correct_id
            score = question.points if is_correct else 0
            earned += score
            answers.append(
                AttemptAnswer(
                    attempt_id=attempt_id,
                    question_id=item.question_id,
                    option_id=item.option_id,
                    score=score,
                    feedback=CORRECT_FEEDBACK if is_correct else INCORRECT_FEEDBACK,
                )
            )
        else:
            pending = True
            answers.append(
                AttemptAnswer(
                    attempt_id=attempt_id,
                    question_id=item.question_id,
                    essay_text=item.essay_text,
                )
            )

    return ScoredSubmission(
        answers=answers,
        total_points=total,
        earned_points=earned,
        pending_grading=pending,
    )


def aggregate_score(
    answers: list[AttemptAnswer], points_by_question: dict[UUID, int]
) -> int | None:
    """Score of a set of stored answers, None while any is ungraded.

    Answers whose question has since been removed from the quiz are ignored.
    """
    total = earned = 0
    for answer in answers:
        points = points_by_question.get(answer.question_id)
        if points is None:
            continue
        if answer.score is None:
            return None
        total += points
        earned += answer.score
    return percentage(earned, total)


def is_passed(score: int | None, passing_score: int) -> bool | None:
    if score is None:
        return None
    return score >= passing_score


def reward_points(score: int | None, passed: bool | None, cap: int = 50) -> int:
    """Points for a passed attempt: half the score, rounded down, capped."""
    if not passed or not score or score <= 0:
        return 0
    return min(score // 2, cap)
