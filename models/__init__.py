"""
Matchday Database Models

SQLAlchemy ORM models for the tournament progression engine.
"""

from models.base import (
    Base,
    create_db_engine,
    create_session_factory,
    session_scope,
    init_db,
    utcnow,
)
from models.team import Event, EventStatus, Team
from models.match import Match, MatchType, MatchStatus, STAGE_ORDER
from models.operator import Operator, OperatorRole
from models.award import Award
from models.schemas import MatchSnapshot, OperatorSnapshot, AwardSnapshot

__all__ = [
    "Base",
    "create_db_engine",
    "create_session_factory",
    "session_scope",
    "init_db",
    "utcnow",
    "Event",
    "EventStatus",
    "Team",
    "Match",
    "MatchType",
    "MatchStatus",
    "STAGE_ORDER",
    "Operator",
    "OperatorRole",
    "Award",
    "MatchSnapshot",
    "OperatorSnapshot",
    "AwardSnapshot",
]
