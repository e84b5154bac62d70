"""LearnPath API - Main Application."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.auth.service import UserDirectory
from src.certificates.router import router as certificates_router
from src.certificates.service import CertificateService
from src.certificates.store import CertificateStore
from src.config import Settings, get_settings
from src.core.context import get_request_id
from src.core.database import init_async_cassandra, shutdown_async_cassandra
from src.core.errors import ErrorCode, LearningError
from src.core.logging import configure_structlog, get_logger
from src.core.middleware import RequestContextMiddleware
from src.core.redis import init_redis, shutdown_redis
from src.core.results import ActionResult
from src.courses.service import CourseCatalog
from src.email.service import EmailSender, EmailService, LogOnlyEmailService
from src.health import router as health_router
from src.learning_paths.router import router as learning_paths_router
from src.learning_paths.service import LearningPathService
from src.learning_paths.store import LearningPathStore
from src.notifications.router import router as notifications_router
from src.notifications.service import NotificationService
from src.progress.router import enrollments_router
from src.progress.router import router as progress_router
from src.progress.service import ProgressService
from src.progress.store import ProgressStore
from src.quizzes.grading import EssayGradingService
from src.quizzes.router import grading_router
from src.quizzes.router import router as quizzes_router
from src.quizzes.service import QuizAttemptService
from src.quizzes.store import QuizStore
from src.rewards.hooks import RewardHooks
from src.rewards.router import router as points_router
from src.rewards.service import PointsService


# Configure logging early (before creating logger)
settings = get_settings()
configure_structlog(settings, log_dir=Path(settings.log_dir))

logger = get_logger(__name__)


class AppState:
    """Application state container."""

    cassandra_session: Any = None
    notification_service: NotificationService | None = None
    points_service: PointsService | None = None
    certificate_service: CertificateService | None = None
    learning_path_service: LearningPathService | None = None
    progress_service: ProgressService | None = None
    quiz_service: QuizAttemptService | None = None
    grading_service: EssayGradingService | None = None


app_state = AppState()

SERVICE_NAMES = (
    "notification_service",
    "points_service",
    "certificate_service",
    "learning_path_service",
    "progress_service",
    "quiz_service",
    "grading_service",
)


def _build_email_sender(settings: Settings) -> EmailSender:
    if settings.email_configured:
        return EmailService(
            credentials_path=settings.email_credentials_path,
            sender_address=settings.email_sender_address,
            sender_name=settings.email_sender_name,
        )
    logger.info("email_delivery_disabled", message="Emails will be logged only")
    return LogOnlyEmailService()


def build_services(session: Any, settings: Settings, redis_client: Any = None) -> None:
    """Wire stores and services onto ``app_state``."""
    keyspace = settings.cassandra_keyspace

    users = UserDirectory(session=session, keyspace=keyspace)
    catalog = CourseCatalog(session=session, keyspace=keyspace)
    progress_store = ProgressStore(session=session, keyspace=keyspace)
    path_store = LearningPathStore(session=session, keyspace=keyspace)
    quiz_store = QuizStore(session=session, keyspace=keyspace)

    app_state.notification_service = NotificationService(
        session=session,
        keyspace=keyspace,
        redis=redis_client,
    )
    app_state.points_service = PointsService(
        session=session,
        keyspace=keyspace,
        notifications=app_state.notification_service,
        users=users,
        portal_base_url=settings.portal_base_url,
    )
    hooks = RewardHooks(
        points=app_state.points_service,
        notifications=app_state.notification_service,
        email=_build_email_sender(settings),
        portal_base_url=settings.portal_base_url,
    )

    app_state.certificate_service = CertificateService(
        store=CertificateStore(session=session, keyspace=keyspace),
        catalog=catalog,
        paths=path_store,
        users=users,
    )
    app_state.learning_path_service = LearningPathService(
        store=path_store,
        progress=progress_store,
        catalog=catalog,
        certificates=app_state.certificate_service,
        users=users,
        hooks=hooks,
    )
    app_state.progress_service = ProgressService(
        store=progress_store,
        catalog=catalog,
        paths=app_state.learning_path_service,
        certificates=app_state.certificate_service,
        hooks=hooks,
        course_completion_points=settings.course_completion_points,
    )
    app_state.quiz_service = QuizAttemptService(
        store=quiz_store,
        progress=progress_store,
        hooks=hooks,
        quiz_points_cap=settings.quiz_points_cap,
    )
    app_state.grading_service = EssayGradingService(
        store=quiz_store,
        users=users,
        hooks=hooks,
        quiz_points_cap=settings.quiz_points_cap,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings = get_settings()
    logger.info(
        "starting_application",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )

    # Redis is optional: without it notifications are only stored
    redis_client = None
    if settings.redis_enabled:
        try:
            redis_client = await init_redis()
        except Exception as e:
            logger.warning(
                "redis_init_skipped",
                error=str(e),
                message="Running without Redis - real-time notifications disabled",
            )

    try:
        app_state.cassandra_session = await init_async_cassandra()
        build_services(app_state.cassandra_session, settings, redis_client)
        for name in SERVICE_NAMES:
            setattr(app.state, name, getattr(app_state, name))
        logger.info("services_initialized", redis_enabled=redis_client is not None)
    except Exception as e:
        logger.warning(
            "database_init_skipped",
            error=str(e),
            message="Running without database connection",
        )

    yield

    logger.info("shutting_down_application")
    await shutdown_redis()
    await shutdown_async_cassandra()


def _error_code_for_status(status_code: int) -> ErrorCode | None:
    return {
        status.HTTP_401_UNAUTHORIZED: ErrorCode.UNAUTHENTICATED,
        status.HTTP_403_FORBIDDEN: ErrorCode.ACCESS_DENIED,
        status.HTTP_404_NOT_FOUND: ErrorCode.NOT_FOUND,
        status.HTTP_422_UNPROCESSABLE_ENTITY: ErrorCode.VALIDATION_FAILED,
    }.get(status_code)


def _field_errors(exc: RequestValidationError) -> dict[str, list[str]]:
    """Group validation messages by field, dropping the body/query prefix."""
    errors: dict[str, list[str]] = {}
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ())]
        if len(loc) > 1 and loc[0] in ("body", "query", "path", "header"):
            loc = loc[1:]
        errors.setdefault(".".join(loc) or "request", []).append(
            err.get("msg", "Invalid value")
        )
    return errors


def _envelope(status_code: int, result: ActionResult) -> ORJSONResponse:
    return ORJSONResponse(
        status_code=status_code,
        content=result.model_dump(mode="json"),
        headers={"X-Request-ID": get_request_id()},
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    # debug=False keeps Starlette from rendering tracebacks in responses
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="LearnPath - learning progress, assessment and certification API",
        debug=False,
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
    )

    # Request context middleware (outermost)
    app.add_middleware(
        RequestContextMiddleware,
        log_requests=settings.log_requests,
        exclude_paths=settings.log_exclude_paths,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    # Every failure answers with the same ActionResult envelope

    @app.exception_handler(LearningError)
    async def learning_error_handler(
        request: Request, exc: LearningError
    ) -> ORJSONResponse:
        logger.info(
            "operation_rejected",
            code=exc.code.value,
            error=exc.message,
            path=request.url.path,
            method=request.method,
        )
        return _envelope(exc.status_code, ActionResult.fail(exc))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> ORJSONResponse:
        logger.warning(
            "http_exception",
            status_code=exc.status_code,
            detail=str(exc.detail),
            path=request.url.path,
            method=request.method,
        )
        if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            return _envelope(exc.status_code, ActionResult.internal_error())
        return _envelope(
            exc.status_code,
            ActionResult(
                success=False,
                error=str(exc.detail),
                code=_error_code_for_status(exc.status_code),
            ),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> ORJSONResponse:
        field_errors = _field_errors(exc)
        logger.warning(
            "validation_error",
            fields=list(field_errors),
            path=request.url.path,
            method=request.method,
        )
        return _envelope(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            ActionResult(
                success=False,
                error="Data tidak valid",
                code=ErrorCode.VALIDATION_FAILED,
                field_errors=field_errors,
            ),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request, exc: Exception
    ) -> ORJSONResponse:
        """Storage and collaborator failures: logged in full, answered generically."""
        logger.exception(
            "unhandled_exception",
            error_type=type(exc).__name__,
            error_message=str(exc),
            path=request.url.path,
            method=request.method,
        )
        return _envelope(
            status.HTTP_500_INTERNAL_SERVER_ERROR, ActionResult.internal_error()
        )

    app.include_router(health_router)
    app.include_router(progress_router)
    app.include_router(enrollments_router)
    app.include_router(quizzes_router)
    app.include_router(grading_router)
    app.include_router(learning_paths_router)
    app.include_router(certificates_router)
    app.include_router(notifications_router)
    app.include_router(points_router)

    @app.get("/", include_in_schema=False)
    async def root(request: Request) -> dict[str, str]:
        return {
            "message": "LearnPath API",
            "version": settings.app_version,
            "docs": f"{request.url}docs",
        }

    return app


app = create_app()
