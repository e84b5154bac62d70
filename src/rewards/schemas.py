"""Pydantic schemas for the points ledger."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from .models import PointEntry


class PointEntryResponse(BaseModel):
    id: UUID = Field(description="Ledger entry ID")
    amount: int = Field(description="Points awarded")
    reason: str = Field(description="Why the points were awarded")
    created_at: datetime = Field(description="Award timestamp")

    @classmethod
    def from_entry(cls, entry: PointEntry) -> "PointEntryResponse":
        return cls(
            id=entry.entry_id,
            amount=entry.amount,
            reason=entry.reason,
            created_at=entry.created_at,
        )


class PointsSummaryResponse(BaseModel):
    balance: int = Field(description="Total points")
    history: list[PointEntryResponse] = Field(description="Latest awards, newest first")


class LeaderboardEntry(BaseModel):
    rank: int = Field(ge=1, description="1 for the highest balance")
    user_id: UUID
    name: str
    points: int


class LeaderboardResponse(BaseModel):
    entries: list[LeaderboardEntry] = Field(description="Highest balances first")
    my_rank: int | None = Field(None, description="Caller's rank, None outside the top")
    my_points: int = Field(description="Caller's balance")
