"""
Team and Event models.
"""

import enum
import json
from typing import Optional

from sqlalchemy import String, Integer, ForeignKey, Text, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base


class EventStatus(enum.Enum):
    """Event lifecycle."""
    UPCOMING = "upcoming"
    RUNNING = "running"
    COMPLETED = "completed"


class Event(Base):
    """
    One sport/competition category with its own pools, qualifiers and elims.
    """
    __tablename__ = "events"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)  # e.g. "badminton_singles"
    name: Mapped[str] = mapped_column(String(200), nullable=False)

    # Roster-size bounds for teams entered in this event
    min_roster: Mapped[int] = mapped_column(Integer, default=1)
    max_roster: Mapped[int] = mapped_column(Integer, default=1)

    status: Mapped[EventStatus] = mapped_column(
        SAEnum(EventStatus),
        default=EventStatus.UPCOMING
    )

    def __repr__(self) -> str:
        return f"<Event(id='{self.id}', name='{self.name}')>"


class Team(Base):
    """
    A competitor entered in an event.

    The id is either a bracket-slot placeholder ("S1", "FSF1W") or a real
    team. Real teams may be stored namespaced as "{event_id}__{code}".
    """
    __tablename__ = "teams"

    id: Mapped[str] = mapped_column(String(150), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    event_id: Mapped[str] = mapped_column(ForeignKey("events.id"), nullable=False, index=True)

    # Member names/emails as a JSON list
    roster_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Team(id='{self.id}', name='{self.name}')>"

    @property
    def roster(self) -> list[str]:
        """Team members."""
        if self.roster_json:
            return json.loads(self.roster_json)
        return []

    @roster.setter
    def roster(self, value: list[str]) -> None:
        self.roster_json = json.dumps(list(value))

    @property
    def code(self) -> str:
        """The id without its event namespace."""
        return self.id.split("__")[-1]
