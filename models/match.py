"""
Match model and its stage/status enums.
"""

import enum
from datetime import datetime
from typing import Optional

from sqlalchemy import String, Integer, ForeignKey, DateTime, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base


class MatchType(enum.Enum):
    """Bracket stage a match belongs to."""
    QUALIFIER = "qualifier"
    REDEMPTION = "redemption"
    QUARTERFINAL = "quarterfinal"
    SEMIFINAL = "semifinal"
    BRONZE = "bronze"
    FINAL = "final"
    BONUS = "bonus"

    @classmethod
    def parse(cls, value: "str | MatchType") -> "MatchType":
        """Accept enum members, canonical values and the legacy short forms."""
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        return cls(_MATCH_TYPE_ALIASES.get(key, key))

    @property
    def priority(self) -> int:
        """Position in the display order (qualifier first, bonus last)."""
        return STAGE_ORDER.index(self)


_MATCH_TYPE_ALIASES = {
    "qual": "qualifier",
    "qf": "quarterfinal",
    "quarter": "quarterfinal",
    "semi": "semifinal",
    "sf": "semifinal",
}

STAGE_ORDER = [
    MatchType.QUALIFIER,
    MatchType.REDEMPTION,
    MatchType.QUARTERFINAL,
    MatchType.SEMIFINAL,
    MatchType.BRONZE,
    MatchType.FINAL,
    MatchType.BONUS,
]


class MatchStatus(enum.Enum):
    """Match lifecycle states."""
    SCHEDULED = "scheduled"
    LIVE = "live"
    FINAL = "final"
    VOID = "void"


class Match(Base):
    """
    A single scheduled contest between two competitor slots within an event.

    The id encodes stage and sequence ("S-Q3", "S-SF1-2", "D-F3", "F-QF1").
    Competitor slots hold team ids, which may still be bracket placeholders.
    """
    __tablename__ = "matches"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    event_id: Mapped[str] = mapped_column(ForeignKey("events.id"), nullable=False, index=True)
    match_type: Mapped[MatchType] = mapped_column(SAEnum(MatchType), nullable=False)
    pool: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    competitor_a: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    competitor_b: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    status: Mapped[MatchStatus] = mapped_column(
        SAEnum(MatchStatus),
        default=MatchStatus.SCHEDULED
    )

    # Scores stay null until the match goes live
    score_a: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    score_b: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    # Timing
    scheduled_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    actual_start: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    venue: Mapped[str] = mapped_column(String(100), nullable=False, default="")

    # Operator assigned to keep score
    operator_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("operators.id"),
        nullable=True
    )

    def __repr__(self) -> str:
        return f"<Match(id='{self.id}', type={self.match_type.value}, status={self.status.value})>"
