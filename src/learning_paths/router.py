"""Learning path API endpoints."""

from uuid import UUID

from fastapi import APIRouter

from src.auth.dependencies import CallerDep
from src.core.results import ActionResult

from .dependencies import LearningPathServiceDep
from .schemas import PathDetailResponse, PathSummary


router = APIRouter(prefix="/v1/learning-paths", tags=["learning-paths"])


@router.get(
    "",
    response_model=ActionResult[list[PathSummary]],
    summary="List published learning paths",
)
async def list_paths(
    caller: CallerDep,
    service: LearningPathServiceDep,
) -> ActionResult[list[PathSummary]]:
    return ActionResult.ok(await service.list_paths(caller))


@router.get(
    "/{path_id}",
    response_model=ActionResult[PathDetailResponse],
    summary="Get learning path with lock state",
)
async def get_path_detail(
    path_id: UUID,
    caller: CallerDep,
    service: LearningPathServiceDep,
) -> ActionResult[PathDetailResponse]:
    return ActionResult.ok(await service.get_path_detail(caller, path_id))


@router.post(
    "/{path_id}/enroll",
    response_model=ActionResult[None],
    summary="Enroll in a learning path",
)
async def enroll_in_path(
    path_id: UUID,
    caller: CallerDep,
    service: LearningPathServiceDep,
) -> ActionResult[None]:
    """Join the path; the first course is unlocked immediately."""
    await service.enroll_in_path(caller, path_id)
    return ActionResult.ok()
