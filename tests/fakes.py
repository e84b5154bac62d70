"""In-memory stand-ins for the Cassandra stores.

Each fake mirrors the conditional-write semantics of the real store
(``IF NOT EXISTS`` / ``IF ...`` answered through a boolean), so services
can be driven end to end without a cluster.
"""

import copy
from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from src.auth.models import User
from src.auth.permissions import UserRole
from src.auth.schemas import Identity
from src.certificates.models import Certificate, CertificateType
from src.courses.models import ContentStatus, Course
from src.learning_paths.models import LearningPath, PathCourse, PathEnrollment
from src.progress.models import OPEN_STATUSES, Enrollment, EnrollmentStatus
from src.quizzes.models import (
    AnswerRef,
    AttemptAnswer,
    PendingEssay,
    Question,
    QuestionOption,
    QuestionType,
    Quiz,
    QuizAttempt,
)


def make_identity(
    role: UserRole = UserRole.EMPLOYEE,
    user_id: UUID | None = None,
    email: str | None = "learner@example.com",
    name: str | None = "Budi Santoso",
) -> Identity:
    return Identity(user_id=user_id or uuid4(), role=role, email=email, name=name)


def make_mcq(points: int = 10, options: int = 3, text: str = "Pilih satu") -> Question:
    """Multiple-choice question whose first option is the correct one."""
    return Question(
        question_id=uuid4(),
        type=QuestionType.MULTIPLE_CHOICE,
        text=text,
        points=points,
        options=[
            QuestionOption(option_id=uuid4(), text=f"Opsi {i}", is_correct=i == 0)
            for i in range(options)
        ],
    )


def make_essay(points: int = 10, text: str = "Jelaskan") -> Question:
    return Question(
        question_id=uuid4(), type=QuestionType.ESSAY, text=text, points=points
    )


# ==============================================================================
# Catalog and users
# ==============================================================================


class FakeCatalog:
    def __init__(self) -> None:
        self.courses: dict[UUID, Course] = {}
        self.lessons: dict[UUID, list[UUID]] = {}

    def add_course(
        self,
        title: str = "Kursus",
        lessons: int = 3,
        status: ContentStatus = ContentStatus.PUBLISHED,
    ) -> Course:
        course = Course(id=uuid4(), title=title, status=status.value)
        self.courses[course.id] = course
        self.lessons[course.id] = [uuid4() for _ in range(lessons)]
        return course

    async def get_course(self, course_id: UUID) -> Course | None:
        return self.courses.get(course_id)

    async def get_lesson_ids(self, course_id: UUID) -> list[UUID]:
        return list(self.lessons.get(course_id, []))

    async def get_titles(self, course_ids: list[UUID]) -> dict[UUID, str]:
        return {cid: self.courses[cid].title for cid in course_ids if cid in self.courses}


class FakeUserDirectory:
    def __init__(self) -> None:
        self.users: dict[UUID, User] = {}

    def add(self, identity: Identity) -> User:
        user = User(
            id=identity.user_id,
            email=str(identity.email or ""),
            name=identity.name or "",
            role=identity.role.value,
        )
        self.users[user.id] = user
        return user

    async def get_user(self, user_id: UUID) -> User | None:
        return self.users.get(user_id)

    async def get_users(self, user_ids: set[UUID]) -> dict[UUID, User]:
        return {uid: self.users[uid] for uid in user_ids if uid in self.users}


# ==============================================================================
# Progress
# ==============================================================================


class FakeProgressStore:
    def __init__(self) -> None:
        self.enrollments: dict[tuple[UUID, UUID], Enrollment] = {}
        self.completions: dict[UUID, dict[UUID, datetime]] = {}
        self.mark_completed_calls = 0

    def stored(self, user_id: UUID, course_id: UUID) -> Enrollment | None:
        return self.enrollments.get((user_id, course_id))

    async def get_enrollment(self, user_id: UUID, course_id: UUID) -> Enrollment | None:
        enrollment = self.enrollments.get((user_id, course_id))
        return copy.copy(enrollment) if enrollment else None

    async def get_enrollments_for_courses(
        self, user_id: UUID, course_ids: list[UUID]
    ) -> dict[UUID, Enrollment]:
        return {
            cid: copy.copy(self.enrollments[(user_id, cid)])
            for cid in course_ids
            if (user_id, cid) in self.enrollments
        }

    async def list_enrollments(self, user_id: UUID) -> list[Enrollment]:
        return [copy.copy(e) for (uid, _), e in self.enrollments.items() if uid == user_id]

    async def create_enrollment(self, enrollment: Enrollment) -> bool:
        key = (enrollment.user_id, enrollment.course_id)
        if key in self.enrollments:
            return False
        self.enrollments[key] = copy.copy(enrollment)
        return True

    async def delete_enrollment(self, enrollment: Enrollment) -> bool:
        stored = self.enrollments.pop((enrollment.user_id, enrollment.course_id), None)
        if stored is None:
            return False
        self.completions.pop(stored.enrollment_id, None)
        return True

    async def record_progress(
        self, enrollment: Enrollment, progress: int, last_lesson_id: UUID, now: datetime
    ) -> bool:
        stored = self.enrollments.get((enrollment.user_id, enrollment.course_id))
        if stored is None or stored.progress > progress or stored.status not in OPEN_STATUSES:
            return False
        stored.progress = progress
        stored.status = EnrollmentStatus.IN_PROGRESS.value
        stored.last_lesson_id = last_lesson_id
        stored.last_accessed_at = now
        return True

    async def mark_completed(
        self, enrollment: Enrollment, last_lesson_id: UUID, now: datetime
    ) -> bool:
        self.mark_completed_calls += 1
        stored = self.enrollments.get((enrollment.user_id, enrollment.course_id))
        if stored is None or stored.status not in OPEN_STATUSES:
            return False
        stored.progress = 100
        stored.status = EnrollmentStatus.COMPLETED.value
        stored.completed_at = now
        stored.last_lesson_id = last_lesson_id
        stored.last_accessed_at = now
        return True

    async def touch(self, enrollment: Enrollment, lesson_id: UUID, now: datetime) -> bool:
        stored = self.enrollments.get((enrollment.user_id, enrollment.course_id))
        if stored is None:
            return False
        if stored.status == EnrollmentStatus.ENROLLED.value:
            stored.status = EnrollmentStatus.IN_PROGRESS.value
        stored.last_lesson_id = lesson_id
        stored.last_accessed_at = now
        return True

    async def add_lesson_completion(
        self, enrollment_id: UUID, lesson_id: UUID, now: datetime
    ) -> bool:
        completed = self.completions.setdefault(enrollment_id, {})
        if lesson_id in completed:
            return False
        completed[lesson_id] = now
        return True

    async def get_completed_lesson_ids(self, enrollment_id: UUID) -> set[UUID]:
        return set(self.completions.get(enrollment_id, {}))


# ==============================================================================
# Learning paths
# ==============================================================================


class FakePathStore:
    def __init__(self) -> None:
        self.paths: dict[UUID, LearningPath] = {}
        self.path_courses: dict[UUID, list[PathCourse]] = {}
        self.path_enrollments: dict[tuple[UUID, UUID], PathEnrollment] = {}

    def add_path(
        self,
        course_ids: list[UUID],
        title: str = "Jalur Belajar",
        status: ContentStatus = ContentStatus.PUBLISHED,
    ) -> LearningPath:
        path = LearningPath(path_id=uuid4(), title=title, status=status.value)
        self.paths[path.path_id] = path
        self.path_courses[path.path_id] = [
            PathCourse(path_id=path.path_id, position=i, course_id=cid)
            for i, cid in enumerate(course_ids)
        ]
        return path

    def join(self, user_id: UUID, path_id: UUID) -> PathEnrollment:
        enrollment = PathEnrollment(user_id=user_id, path_id=path_id)
        self.path_enrollments[(user_id, path_id)] = enrollment
        return enrollment

    async def get_path(self, path_id: UUID) -> LearningPath | None:
        return self.paths.get(path_id)

    async def list_paths(self) -> list[LearningPath]:
        return list(self.paths.values())

    async def get_path_courses(self, path_id: UUID) -> list[PathCourse]:
        return sorted(self.path_courses.get(path_id, []), key=lambda pc: pc.position)

    async def get_path_ids_for_course(self, course_id: UUID) -> list[UUID]:
        return [
            path_id
            for path_id, courses in self.path_courses.items()
            if any(pc.course_id == course_id for pc in courses)
        ]

    async def get_path_enrollment(
        self, user_id: UUID, path_id: UUID
    ) -> PathEnrollment | None:
        return self.path_enrollments.get((user_id, path_id))

    async def list_path_enrollments(self, user_id: UUID) -> list[PathEnrollment]:
        return [pe for (uid, _), pe in self.path_enrollments.items() if uid == user_id]

    async def create_path_enrollment(
        self, user_id: UUID, path_id: UUID, now: datetime
    ) -> bool:
        if (user_id, path_id) in self.path_enrollments:
            return False
        self.path_enrollments[(user_id, path_id)] = PathEnrollment(
            user_id=user_id, path_id=path_id, enrolled_at=now
        )
        return True

    async def mark_path_completed(
        self, user_id: UUID, path_id: UUID, now: datetime
    ) -> bool:
        enrollment = self.path_enrollments.get((user_id, path_id))
        if enrollment is None or enrollment.completed_at is not None:
            return False
        enrollment.completed_at = now
        return True


# ==============================================================================
# Certificates
# ==============================================================================


class FakeCertificateStore:
    def __init__(self) -> None:
        self.by_key: dict[tuple[UUID, str, UUID], Certificate] = {}
        self.by_id: dict[UUID, Certificate] = {}

    @staticmethod
    def _key(certificate: Certificate) -> tuple[UUID, str, UUID]:
        return (
            certificate.user_id,
            certificate.certificate_type.value,
            certificate.reference_id,
        )

    async def insert_if_absent(self, certificate: Certificate) -> bool:
        key = self._key(certificate)
        if key in self.by_key:
            return False
        self.by_key[key] = copy.copy(certificate)
        return True

    async def ensure_indexed(self, certificate: Certificate) -> None:
        self.by_id.setdefault(certificate.certificate_id, copy.copy(certificate))

    async def get(
        self, user_id: UUID, certificate_type: CertificateType, reference_id: UUID
    ) -> Certificate | None:
        found = self.by_key.get((user_id, certificate_type.value, reference_id))
        return copy.copy(found) if found else None

    async def get_by_id(self, certificate_id: UUID) -> Certificate | None:
        found = self.by_id.get(certificate_id)
        return copy.copy(found) if found else None

    async def list_by_user(self, user_id: UUID) -> list[Certificate]:
        return [copy.copy(c) for c in self.by_key.values() if c.user_id == user_id]

    async def list_all(self) -> list[Certificate]:
        return [copy.copy(c) for c in self.by_id.values()]

    async def revoke(self, certificate: Certificate) -> None:
        self.by_id[certificate.certificate_id].is_valid = False
        self.by_key[self._key(certificate)].is_valid = False


# ==============================================================================
# Quizzes
# ==============================================================================


class FakeQuizStore:
    def __init__(self) -> None:
        self.quizzes: dict[UUID, Quiz] = {}
        self.questions: dict[UUID, list[Question]] = {}
        self.attempts: dict[UUID, QuizAttempt] = {}
        self.answers: dict[UUID, dict[UUID, AttemptAnswer]] = {}
        self.refs: dict[UUID, AnswerRef] = {}
        self.pending: dict[UUID, list[PendingEssay]] = {}
        self.rewarded: set[UUID] = set()

    def add_quiz(self, course_id: UUID, questions: list[Question], **settings: Any) -> Quiz:
        quiz = Quiz(
            quiz_id=uuid4(),
            course_id=course_id,
            title=settings.pop("title", "Kuis Bab 1"),
            **settings,
        )
        self.quizzes[quiz.quiz_id] = quiz
        for position, question in enumerate(questions):
            question.position = position
        self.questions[quiz.quiz_id] = list(questions)
        return quiz

    def answers_of(self, attempt_id: UUID) -> list[AttemptAnswer]:
        return list(self.answers.get(attempt_id, {}).values())

    async def get_quiz(self, quiz_id: UUID) -> Quiz | None:
        return self.quizzes.get(quiz_id)

    async def get_quizzes(self, quiz_ids: list[UUID]) -> dict[UUID, Quiz]:
        return {qid: self.quizzes[qid] for qid in quiz_ids if qid in self.quizzes}

    async def get_questions(self, quiz_id: UUID) -> list[Question]:
        return list(self.questions.get(quiz_id, []))

    async def create_attempt(self, attempt: QuizAttempt) -> None:
        self.attempts[attempt.attempt_id] = copy.copy(attempt)

    async def get_attempt(self, attempt_id: UUID) -> QuizAttempt | None:
        attempt = self.attempts.get(attempt_id)
        return copy.copy(attempt) if attempt else None

    async def count_attempts(self, enrollment_id: UUID, quiz_id: UUID) -> int:
        return sum(
            1
            for a in self.attempts.values()
            if a.enrollment_id == enrollment_id and a.quiz_id == quiz_id
        )

    async def list_attempts(self, enrollment_id: UUID) -> list[QuizAttempt]:
        return [
            copy.copy(a) for a in self.attempts.values() if a.enrollment_id == enrollment_id
        ]

    async def claim_submission(self, attempt_id: UUID, now: datetime) -> bool:
        attempt = self.attempts[attempt_id]
        if attempt.submitted_at is not None:
            return False
        attempt.submitted_at = now
        return True

    async def release_submission(self, attempt_id: UUID, claimed_at: datetime) -> bool:
        attempt = self.attempts[attempt_id]
        if attempt.submitted_at != claimed_at:
            return False
        attempt.submitted_at = None
        return True

    async def save_submission(
        self,
        attempt: QuizAttempt,
        answers: list[AttemptAnswer],
        score: int | None,
        passed: bool | None,
    ) -> None:
        stored = self.answers.setdefault(attempt.attempt_id, {})
        for answer in answers:
            stored[answer.question_id] = copy.copy(answer)
            self.refs[answer.answer_id] = AnswerRef(
                answer_id=answer.answer_id,
                attempt_id=attempt.attempt_id,
                question_id=answer.question_id,
                quiz_id=attempt.quiz_id,
            )
            if not answer.is_graded:
                self.pending.setdefault(attempt.quiz_id, []).append(
                    PendingEssay(
                        quiz_id=attempt.quiz_id,
                        submitted_at=attempt.submitted_at,
                        answer_id=answer.answer_id,
                        attempt_id=attempt.attempt_id,
                        question_id=answer.question_id,
                        user_id=attempt.user_id,
                    )
                )
        await self.set_score(attempt.attempt_id, score, passed)

    async def set_score(self, attempt_id: UUID, score: int | None, passed: bool | None) -> None:
        self.attempts[attempt_id].score = score
        self.attempts[attempt_id].passed = passed

    async def claim_reward(self, attempt_id: UUID, now: datetime) -> bool:
        if attempt_id in self.rewarded:
            return False
        self.rewarded.add(attempt_id)
        return True

    async def get_answers(self, attempt_id: UUID) -> list[AttemptAnswer]:
        return [copy.copy(a) for a in self.answers_of(attempt_id)]

    async def get_answer(self, attempt_id: UUID, question_id: UUID) -> AttemptAnswer | None:
        answer = self.answers.get(attempt_id, {}).get(question_id)
        return copy.copy(answer) if answer else None

    async def get_answer_ref(self, answer_id: UUID) -> AnswerRef | None:
        return self.refs.get(answer_id)

    async def grade_answer(
        self,
        ref: AnswerRef,
        submitted_at: datetime | None,
        score: int,
        feedback: str | None,
    ) -> None:
        answer = self.answers[ref.attempt_id][ref.question_id]
        answer.score = score
        answer.feedback = feedback
        self.pending[ref.quiz_id] = [
            p for p in self.pending.get(ref.quiz_id, []) if p.answer_id != ref.answer_id
        ]

    async def list_pending_essays(self, quiz_id: UUID) -> list[PendingEssay]:
        return sorted(self.pending.get(quiz_id, []), key=lambda p: p.submitted_at)


# ==============================================================================
# Side effects
# ==============================================================================


class RecordingHooks:
    """Records side effects instead of performing them."""

    def __init__(self, portal_base_url: str = "/portal") -> None:
        self.portal_base_url = portal_base_url
        self.points: list[tuple[UUID, int, str]] = []
        self.notifications: list[dict[str, Any]] = []
        self.emails: list[dict[str, Any]] = []

    def portal_url(self, path: str) -> str:
        return f"{self.portal_base_url}/{path.lstrip('/')}"

    async def award_points(self, user_id: UUID, amount: int, reason: str) -> None:
        self.points.append((user_id, amount, reason))

    async def notify(
        self,
        user_id: UUID,
        notification_type: Any,
        title: str,
        message: str,
        action_url: str | None = None,
    ) -> None:
        self.notifications.append(
            {
                "user_id": user_id,
                "type": notification_type,
                "title": title,
                "message": message,
                "action_url": action_url,
            }
        )

    async def send_email(
        self,
        to: str | None,
        subject: str,
        body: str,
        html: str | None = None,
        to_name: str | None = None,
    ) -> None:
        self.emails.append({"to": to, "subject": subject, "body": body})

    def titles(self) -> list[str]:
        return [n["title"] for n in self.notifications]
