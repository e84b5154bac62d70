"""Points ledger API endpoints."""

from fastapi import APIRouter, Query

from src.auth.dependencies import CallerDep
from src.core.errors import UnauthenticatedError
from src.core.results import ActionResult

from .dependencies import PointsServiceDep
from .schemas import LeaderboardResponse, PointEntryResponse, PointsSummaryResponse


router = APIRouter(prefix="/v1/points", tags=["points"])


@router.get(
    "/me",
    response_model=ActionResult[PointsSummaryResponse],
    summary="Get my points",
)
async def get_my_points(
    caller: CallerDep,
    service: PointsServiceDep,
    limit: int = Query(default=20, ge=1, le=100, description="History entries"),
) -> ActionResult[PointsSummaryResponse]:
    if caller is None:
        raise UnauthenticatedError
    balance = await service.get_balance(caller.user_id)
    history = await service.get_history(caller.user_id, limit)
    return ActionResult.ok(
        PointsSummaryResponse(
            balance=balance,
            history=[PointEntryResponse.from_entry(e) for e in history],
        )
    )


@router.get(
    "/leaderboard",
    response_model=ActionResult[LeaderboardResponse],
    summary="Get the points leaderboard",
)
async def get_leaderboard(
    caller: CallerDep,
    service: PointsServiceDep,
    limit: int = Query(default=50, ge=1, le=100, description="Learners to rank"),
) -> ActionResult[LeaderboardResponse]:
    """Top active learners by points and the caller's rank."""
    return ActionResult.ok(await service.get_leaderboard(caller, limit))
