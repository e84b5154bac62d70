"""Shared fixtures: services wired to in-memory stores."""

import random
from collections.abc import Iterator
from typing import Any

import pytest
from fastapi.testclient import TestClient

from src.auth.permissions import UserRole
from src.auth.schemas import Identity
from src.auth.security import create_access_token
from src.certificates.service import CertificateService
from src.learning_paths.service import LearningPathService
from src.progress.service import ProgressService
from src.quizzes.grading import EssayGradingService
from src.quizzes.service import QuizAttemptService
from tests.fakes import (
    FakeCatalog,
    FakeCertificateStore,
    FakePathStore,
    FakeProgressStore,
    FakeQuizStore,
    FakeUserDirectory,
    RecordingHooks,
    make_identity,
)


def auth_headers(identity: Identity) -> dict[str, str]:
    token = create_access_token(
        {
            "sub": str(identity.user_id),
            "role": identity.role.value,
            "email": identity.email,
            "name": identity.name,
        }
    )
    return {"Authorization": f"Bearer {token}"}


# ==============================================================================
# Stores
# ==============================================================================


@pytest.fixture
def catalog() -> FakeCatalog:
    return FakeCatalog()


@pytest.fixture
def users() -> FakeUserDirectory:
    return FakeUserDirectory()


@pytest.fixture
def progress_store() -> FakeProgressStore:
    return FakeProgressStore()


@pytest.fixture
def path_store() -> FakePathStore:
    return FakePathStore()


@pytest.fixture
def certificate_store() -> FakeCertificateStore:
    return FakeCertificateStore()


@pytest.fixture
def quiz_store() -> FakeQuizStore:
    return FakeQuizStore()


@pytest.fixture
def hooks() -> RecordingHooks:
    return RecordingHooks()


# ==============================================================================
# Services
# ==============================================================================


@pytest.fixture
def certificate_service(
    certificate_store: FakeCertificateStore,
    catalog: FakeCatalog,
    path_store: FakePathStore,
    users: FakeUserDirectory,
) -> CertificateService:
    return CertificateService(
        store=certificate_store, catalog=catalog, paths=path_store, users=users
    )


@pytest.fixture
def path_service(
    path_store: FakePathStore,
    progress_store: FakeProgressStore,
    catalog: FakeCatalog,
    certificate_service: CertificateService,
    users: FakeUserDirectory,
    hooks: RecordingHooks,
) -> LearningPathService:
    return LearningPathService(
        store=path_store,
        progress=progress_store,
        catalog=catalog,
        certificates=certificate_service,
        users=users,
        hooks=hooks,
    )


@pytest.fixture
def progress_service(
    progress_store: FakeProgressStore,
    catalog: FakeCatalog,
    path_service: LearningPathService,
    certificate_service: CertificateService,
    hooks: RecordingHooks,
) -> ProgressService:
    return ProgressService(
        store=progress_store,
        catalog=catalog,
        paths=path_service,
        certificates=certificate_service,
        hooks=hooks,
        course_completion_points=100,
    )


@pytest.fixture
def quiz_service(
    quiz_store: FakeQuizStore,
    progress_store: FakeProgressStore,
    hooks: RecordingHooks,
) -> QuizAttemptService:
    return QuizAttemptService(
        store=quiz_store,
        progress=progress_store,
        hooks=hooks,
        quiz_points_cap=50,
        rng=random.Random(7),
    )


@pytest.fixture
def grading_service(
    quiz_store: FakeQuizStore,
    users: FakeUserDirectory,
    hooks: RecordingHooks,
) -> EssayGradingService:
    return EssayGradingService(
        store=quiz_store, users=users, hooks=hooks, quiz_points_cap=50
    )


# ==============================================================================
# Callers
# ==============================================================================


@pytest.fixture
def learner(users: FakeUserDirectory) -> Identity:
    identity = make_identity()
    users.add(identity)
    return identity


@pytest.fixture
def mentor(users: FakeUserDirectory) -> Identity:
    identity = make_identity(
        UserRole.MENTOR, email="mentor@example.com", name="Siti Mentor"
    )
    users.add(identity)
    return identity


@pytest.fixture
def hr_admin(users: FakeUserDirectory) -> Identity:
    identity = make_identity(UserRole.HR_ADMIN, email="hr@example.com", name="Rina HR")
    users.add(identity)
    return identity


# ==============================================================================
# HTTP
# ==============================================================================


@pytest.fixture
def client(
    progress_service: ProgressService,
    quiz_service: QuizAttemptService,
    grading_service: EssayGradingService,
    path_service: LearningPathService,
    certificate_service: CertificateService,
) -> Iterator[TestClient]:
    """Client over the real app; the lifespan (and Cassandra) is not started."""
    from src.main import create_app

    app = create_app()
    services: dict[str, Any] = {
        "progress_service": progress_service,
        "quiz_service": quiz_service,
        "grading_service": grading_service,
        "learning_path_service": path_service,
        "certificate_service": certificate_service,
    }
    for name, service in services.items():
        setattr(app.state, name, service)

    yield TestClient(app, raise_server_exceptions=False)
