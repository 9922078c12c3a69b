"""Pydantic schemas for the bet registry API."""

from datetime import datetime

from pydantic import BaseModel, Field

from src.sb_bet.domain.models import Bet, BetStats
from src.sb_common.enums import BetAudience
from src.sb_common.neos import neos_to_display
from src.sb_stake.domain.models import BetEntry

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class CreateBetRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = Field(None, max_length=5000)
    category: str | None = Field(None, max_length=64)
    end_at: datetime
    max_participants: int | None = Field(None, ge=2, description="Cap on distinct stakers")
    audience: BetAudience = BetAudience.PUBLIC
    group_id: str | None = None
    invite_code_enabled: bool = False
    hide_participants: bool = False


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class CreateBetResponse(BaseModel):
    id: str
    visibility: str
    audience: str
    invite_code: str | None


class BetStatsResponse(BaseModel):
    bet_id: str
    total_pot: int
    total_pot_display: str
    for_stake: int
    against_stake: int
    participant_count: int
    for_count: int
    against_count: int

    @classmethod
    def from_domain(cls, bet_id: str, s: BetStats) -> "BetStatsResponse":
        return cls(
            bet_id=bet_id,
            total_pot=s.total_pot,
            total_pot_display=neos_to_display(s.total_pot),
            for_stake=s.for_stake,
            against_stake=s.against_stake,
            participant_count=s.participant_count,
            for_count=s.for_count,
            against_count=s.against_count,
        )


class PositionOut(BaseModel):
    user_id: str
    side: str
    stake: int


class BetDetail(BaseModel):
    id: str
    creator_id: str
    title: str
    description: str | None
    category: str | None
    end_at: str
    max_participants: int | None
    visibility: str
    audience: str
    group_id: str | None
    invite_code_enabled: bool
    hide_participants: bool
    status: str
    derived_status: str              # OPEN / LOCKED / RESOLVED / VOID
    resolution: bool | None
    resolved_at: str | None
    hidden: bool
    created_at: str | None
    stats: BetStatsResponse
    my_position: PositionOut | None
    participants: list[PositionOut] | None   # None when the creator hides them

    @classmethod
    def from_domain(
        cls,
        bet: Bet,
        now: datetime,
        stats: BetStats,
        my_entry: BetEntry | None,
        participants: list[BetEntry] | None,
    ) -> "BetDetail":
        return cls(
            id=bet.id,
            creator_id=bet.creator_id,
            title=bet.title,
            description=bet.description,
            category=bet.category,
            end_at=bet.end_at.isoformat(),
            max_participants=bet.max_participants,
            visibility=bet.visibility,
            audience=bet.audience,
            group_id=bet.group_id,
            invite_code_enabled=bet.invite_code_enabled,
            hide_participants=bet.hide_participants,
            status=bet.status,
            derived_status=bet.derived_status(now),
            resolution=bet.resolution,
            resolved_at=bet.resolved_at.isoformat() if bet.resolved_at else None,
            hidden=bet.hidden,
            created_at=bet.created_at.isoformat() if bet.created_at else None,
            stats=BetStatsResponse.from_domain(bet.id, stats),
            my_position=_position(my_entry) if my_entry else None,
            participants=[_position(e) for e in participants] if participants is not None else None,
        )


def _position(e: BetEntry) -> PositionOut:
    return PositionOut(user_id=e.user_id, side=e.side, stake=e.stake)
