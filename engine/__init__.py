"""
Matchday Progression Engine

Scheduling cascade, bracket gating, standings and the live match clock.
This module contains no GUI dependencies.
"""

from engine.errors import (
    MatchdayError,
    ValidationError,
    AuthorizationError,
    ConsistencyError,
    TransientStoreError,
)
from engine.timer import CountdownTimer
from engine.placeholders import SlotKind, SlotTable
from engine.dependency_gate import should_display, is_decider_visible, sort_for_display
from engine.standings import Standing, compute_standings, pool_rank
from engine.delay import DelayPropagator
from engine.match_clock import MatchClock, ScoreView

__all__ = [
    "MatchdayError",
    "ValidationError",
    "AuthorizationError",
    "ConsistencyError",
    "TransientStoreError",
    "CountdownTimer",
    "SlotKind",
    "SlotTable",
    "should_display",
    "is_decider_visible",
    "sort_for_display",
    "Standing",
    "compute_standings",
    "pool_rank",
    "DelayPropagator",
    "MatchClock",
    "ScoreView",
]
