"""
Pydantic schemas for data validation and immutable record snapshots.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from models.match import MatchType, MatchStatus
from models.operator import OperatorRole
from models.team import EventStatus


# ============ Event Schemas ============

class EventCreate(BaseModel):
    """Schema for creating an event."""
    id: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=200)
    min_roster: int = Field(1, ge=1)
    max_roster: int = Field(1, ge=1)
    status: EventStatus = EventStatus.UPCOMING

    @model_validator(mode="after")
    def roster_bounds_ordered(self) -> "EventCreate":
        if self.max_roster < self.min_roster:
            raise ValueError("max_roster must be >= min_roster")
        return self


# ============ Team Schemas ============

class TeamCreate(BaseModel):
    """Schema for creating a team or a placeholder slot."""
    id: str = Field(..., min_length=1, max_length=150)
    name: str = Field(..., min_length=1, max_length=200)
    event_id: str
    roster: list[str] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Name cannot be empty")
        return v.strip()


# ============ Operator Schemas ============

class OperatorCreate(BaseModel):
    """Schema for registering an operator."""
    id: str = Field(..., min_length=1, max_length=100)
    name: str = Field(..., min_length=1, max_length=200)
    role: OperatorRole = OperatorRole.SCOREKEEPER
    email: Optional[str] = None


class OperatorSnapshot(BaseModel):
    """What the identity service reports about the acting operator."""
    id: str
    name: str
    role: OperatorRole
    is_active: bool = True

    class Config:
        from_attributes = True
        frozen = True


# ============ Match Schemas ============

class MatchCreate(BaseModel):
    """Schema for seeding a match."""
    id: str = Field(..., min_length=1, max_length=50)
    event_id: str
    match_type: MatchType
    pool: Optional[str] = None
    competitor_a: Optional[str] = None
    competitor_b: Optional[str] = None
    status: MatchStatus = MatchStatus.SCHEDULED
    score_a: Optional[int] = Field(None, ge=0)
    score_b: Optional[int] = Field(None, ge=0)
    scheduled_at: datetime
    venue: str = ""
    operator_id: Optional[str] = None

    @field_validator("match_type", mode="before")
    @classmethod
    def accept_legacy_stage_names(cls, v):
        return MatchType.parse(v)

    @model_validator(mode="after")
    def scores_only_when_played(self) -> "MatchCreate":
        if self.status not in (MatchStatus.LIVE, MatchStatus.FINAL):
            if self.score_a is not None or self.score_b is not None:
                raise ValueError("Scores must be empty until the match is live")
        return self


class MatchSnapshot(BaseModel):
    """
    Immutable copy of a match record.

    Delivered through push subscriptions and consumed by the pure engine
    functions (gate, standings, series).
    """
    id: str
    event_id: str
    match_type: MatchType
    pool: Optional[str] = None
    competitor_a: Optional[str] = None
    competitor_b: Optional[str] = None
    status: MatchStatus = MatchStatus.SCHEDULED
    score_a: Optional[int] = None
    score_b: Optional[int] = None
    scheduled_at: datetime
    actual_start: Optional[datetime] = None
    venue: str = ""
    operator_id: Optional[str] = None

    class Config:
        from_attributes = True
        frozen = True

    @property
    def is_final(self) -> bool:
        return self.status == MatchStatus.FINAL

    @property
    def has_started(self) -> bool:
        return self.status in (MatchStatus.LIVE, MatchStatus.FINAL)


class AwardSnapshot(BaseModel):
    """Podium state of one event."""
    event_id: str
    champion: Optional[str] = None
    first_runner_up: Optional[str] = None
    second_runner_up: Optional[str] = None
    published: bool = False

    class Config:
        from_attributes = True
        frozen = True

    @property
    def is_complete(self) -> bool:
        """All three podium slots are filled."""
        return bool(self.champion and self.first_runner_up and self.second_runner_up)
