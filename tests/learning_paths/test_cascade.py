"""Tests for the learning path unlock cascade and path enrollment."""

from uuid import uuid4

import pytest

from src.auth.schemas import Identity
from src.certificates.models import CertificateType
from src.core.errors import NotFoundError
from src.courses.models import ContentStatus
from src.learning_paths.service import LearningPathService
from src.progress.models import EnrollmentStatus
from src.progress.service import ProgressService
from tests.fakes import (
    FakeCatalog,
    FakeCertificateStore,
    FakePathStore,
    FakeProgressStore,
    RecordingHooks,
)


@pytest.fixture
def path_courses(catalog: FakeCatalog):
    return [
        catalog.add_course(title=f"Modul {i}", lessons=2) for i in range(1, 4)
    ]


@pytest.fixture
def path(path_store: FakePathStore, path_courses):
    return path_store.add_path([c.id for c in path_courses], title="Onboarding")


async def _finish_course(
    progress_service: ProgressService, catalog: FakeCatalog, learner: Identity, course
) -> int:
    progress = 0
    for lesson in catalog.lessons[course.id]:
        progress = await progress_service.complete_lesson(learner, course.id, lesson)
    return progress


class TestEnrollInPath:
    """Tests for enroll_in_path."""

    @pytest.mark.asyncio
    async def test_enrolls_in_first_course_only(
        self,
        path_service: LearningPathService,
        path_store: FakePathStore,
        progress_store: FakeProgressStore,
        hooks: RecordingHooks,
        learner: Identity,
        path,
        path_courses,
    ) -> None:
        await path_service.enroll_in_path(learner, path.path_id)

        assert await path_store.get_path_enrollment(learner.user_id, path.path_id)
        assert progress_store.stored(learner.user_id, path_courses[0].id) is not None
        assert progress_store.stored(learner.user_id, path_courses[1].id) is None
        assert "Pendaftaran Learning Path Berhasil" in hooks.titles()
        [email] = hooks.emails
        assert email["to"] == "learner@example.com"

    @pytest.mark.asyncio
    async def test_reenrolling_keeps_progress(
        self,
        path_service: LearningPathService,
        progress_service: ProgressService,
        progress_store: FakeProgressStore,
        catalog: FakeCatalog,
        learner: Identity,
        path,
        path_courses,
    ) -> None:
        first = path_courses[0]
        await path_service.enroll_in_path(learner, path.path_id)
        await progress_service.complete_lesson(
            learner, first.id, catalog.lessons[first.id][0]
        )

        await path_service.enroll_in_path(learner, path.path_id)

        assert progress_store.stored(learner.user_id, first.id).progress == 50

    @pytest.mark.asyncio
    async def test_draft_path_is_not_found(
        self,
        path_service: LearningPathService,
        path_store: FakePathStore,
        path_courses,
        learner: Identity,
    ) -> None:
        draft = path_store.add_path(
            [c.id for c in path_courses], status=ContentStatus.DRAFT
        )
        with pytest.raises(NotFoundError):
            await path_service.enroll_in_path(learner, draft.path_id)
        with pytest.raises(NotFoundError):
            await path_service.enroll_in_path(learner, uuid4())


class TestCascade:
    """Tests for on_course_completed via lesson completion."""

    @pytest.mark.asyncio
    async def test_completing_course_unlocks_only_the_next(
        self,
        path_service: LearningPathService,
        progress_service: ProgressService,
        progress_store: FakeProgressStore,
        path_store: FakePathStore,
        catalog: FakeCatalog,
        hooks: RecordingHooks,
        learner: Identity,
        path,
        path_courses,
    ) -> None:
        await path_service.enroll_in_path(learner, path.path_id)

        await _finish_course(progress_service, catalog, learner, path_courses[0])

        unlocked = progress_store.stored(learner.user_id, path_courses[1].id)
        assert unlocked is not None
        assert unlocked.status == EnrollmentStatus.ENROLLED.value
        assert progress_store.stored(learner.user_id, path_courses[2].id) is None
        assert "Kursus Baru Terbuka" in hooks.titles()
        path_enrollment = await path_store.get_path_enrollment(
            learner.user_id, path.path_id
        )
        assert path_enrollment.completed_at is None

    @pytest.mark.asyncio
    async def test_last_course_completes_path_once(
        self,
        path_service: LearningPathService,
        progress_service: ProgressService,
        path_store: FakePathStore,
        certificate_store: FakeCertificateStore,
        catalog: FakeCatalog,
        hooks: RecordingHooks,
        learner: Identity,
        path,
        path_courses,
    ) -> None:
        await path_service.enroll_in_path(learner, path.path_id)

        for course in path_courses:
            assert await _finish_course(progress_service, catalog, learner, course) == 100

        path_enrollment = await path_store.get_path_enrollment(
            learner.user_id, path.path_id
        )
        assert path_enrollment.completed_at is not None
        path_certificates = [
            c
            for c in certificate_store.by_key.values()
            if c.certificate_type == CertificateType.PATH
        ]
        assert len(path_certificates) == 1
        assert path_certificates[0].reference_id == path.path_id
        assert hooks.titles().count("Learning Path Selesai") == 1
        assert any("Onboarding" in e["subject"] + e["body"] for e in hooks.emails)

        # Running the cascade again changes nothing
        completed_at = path_enrollment.completed_at
        await path_service.on_course_completed(learner.user_id, path_courses[-1].id)
        assert path_enrollment.completed_at == completed_at
        assert hooks.titles().count("Learning Path Selesai") == 1

    @pytest.mark.asyncio
    async def test_not_a_path_member(
        self,
        progress_service: ProgressService,
        progress_store: FakeProgressStore,
        catalog: FakeCatalog,
        learner: Identity,
        path,
        path_courses,
    ) -> None:
        """Finishing a path course without joining the path unlocks nothing."""
        first = path_courses[0]
        await progress_service.enroll(learner, first.id)

        await _finish_course(progress_service, catalog, learner, first)

        assert progress_store.stored(learner.user_id, path_courses[1].id) is None

    @pytest.mark.asyncio
    async def test_out_of_order_completion_waits_for_every_course(
        self,
        path_service: LearningPathService,
        progress_service: ProgressService,
        path_store: FakePathStore,
        catalog: FakeCatalog,
        learner: Identity,
        path,
        path_courses,
    ) -> None:
        await path_service.enroll_in_path(learner, path.path_id)
        last = path_courses[-1]
        await progress_service.enroll(learner, last.id)

        await _finish_course(progress_service, catalog, learner, last)

        path_enrollment = await path_store.get_path_enrollment(
            learner.user_id, path.path_id
        )
        assert path_enrollment.completed_at is None


class TestPathDetail:
    """Tests for the learner's path view."""

    @pytest.mark.asyncio
    async def test_lock_state_follows_completion(
        self,
        path_service: LearningPathService,
        progress_service: ProgressService,
        catalog: FakeCatalog,
        learner: Identity,
        path,
        path_courses,
    ) -> None:
        before = await path_service.get_path_detail(learner, path.path_id)
        assert before.is_enrolled is False
        assert all(c.is_locked for c in before.courses)

        await path_service.enroll_in_path(learner, path.path_id)
        await _finish_course(progress_service, catalog, learner, path_courses[0])

        detail = await path_service.get_path_detail(learner, path.path_id)

        assert detail.is_enrolled is True
        assert [c.is_locked for c in detail.courses] == [False, False, True]
        assert [c.is_completed for c in detail.courses] == [True, False, False]
        assert [c.title for c in detail.courses] == ["Modul 1", "Modul 2", "Modul 3"]

    @pytest.mark.asyncio
    async def test_list_paths_shows_published_only(
        self,
        path_service: LearningPathService,
        path_store: FakePathStore,
        learner: Identity,
        path,
        path_courses,
    ) -> None:
        path_store.add_path([path_courses[0].id], status=ContentStatus.DRAFT)

        summaries = await path_service.list_paths(learner)

        assert [s.id for s in summaries] == [path.path_id]
        assert summaries[0].course_count == 3
