"""
Award podium per event.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import String, ForeignKey, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base


class Award(Base):
    """
    Podium of one event, filled as its finals and bronze series are decided.

    Published once champion, first and second runner-up are all set.
    """
    __tablename__ = "awards"

    event_id: Mapped[str] = mapped_column(ForeignKey("events.id"), primary_key=True)

    champion: Mapped[Optional[str]] = mapped_column(String(150), nullable=True)
    first_runner_up: Mapped[Optional[str]] = mapped_column(String(150), nullable=True)
    second_runner_up: Mapped[Optional[str]] = mapped_column(String(150), nullable=True)

    published: Mapped[bool] = mapped_column(default=False)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    published_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    def __repr__(self) -> str:
        return f"<Award(event='{self.event_id}', published={self.published})>"
