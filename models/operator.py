"""
Operator (scorekeeper) model for match control.
"""

import enum
from typing import Optional

from sqlalchemy import String, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base


class OperatorRole(enum.Enum):
    """Roles known to the identity service."""
    ADMIN = "admin"              # May control any match
    SCOREKEEPER = "scorekeeper"  # May control matches assigned to them
    VIEWER = "viewer"            # Read-only


class Operator(Base):
    """
    A person who can operate match clocks.
    """
    __tablename__ = "operators"

    id: Mapped[str] = mapped_column(String(100), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)

    role: Mapped[OperatorRole] = mapped_column(
        SAEnum(OperatorRole),
        default=OperatorRole.SCOREKEEPER
    )

    email: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)

    # Status
    is_active: Mapped[bool] = mapped_column(default=True)

    def __repr__(self) -> str:
        return f"<Operator(id='{self.id}', name='{self.name}', role={self.role.value})>"
