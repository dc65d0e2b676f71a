"""
Matchday Application Controller

Top-level controller that wires together all application components.
"""

import logging
from typing import Optional

from PySide6.QtCore import QObject

from engine.delay import DelayPropagator
from engine.match_clock import MatchClock
from services.awards import AwardsRecorder
from services.event_bus import EventBus
from services.identity import StoreIdentityProvider
from services.names import TeamNameResolver
from services.store import ScheduleStore

logger = logging.getLogger(__name__)


class MatchdayApp(QObject):
    """
    Top-level application controller.

    Owns the store and the bus, keeps the schedule cascade and the awards
    recorder attached, and hands out match clocks to operator views.
    """

    def __init__(self, database_url: Optional[str] = None):
        super().__init__()

        # Core services
        self.event_bus = EventBus()
        self.store = ScheduleStore.open(database_url, self.event_bus)
        self.identity = StoreIdentityProvider(self.store)

        # Reactions to match writes
        self.delay_propagator = DelayPropagator(self.store)
        self.delay_propagator.attach(self.event_bus)
        self.awards_recorder = AwardsRecorder(self.store)
        self.awards_recorder.attach(self.event_bus)

        self.event_bus.store_error.connect(self._on_store_error)
        self.event_bus.system_message.connect(self._on_system_message)

    def open_clock(self, operator_id: str, match_id: Optional[str] = None) -> MatchClock:
        """Create a clock for one operator view, optionally loading a match."""
        clock = MatchClock(
            self.store,
            operator_id=operator_id,
            identity=self.identity,
            names=TeamNameResolver(self.store),
        )
        if match_id is not None:
            clock.load(match_id)
        return clock

    def shutdown(self) -> None:
        """Detach the background reactions."""
        self.delay_propagator.detach()
        self.awards_recorder.detach()

    def _on_store_error(self, message: str) -> None:
        logger.error("Store error: %s", message)

    def _on_system_message(self, level: str, message: str) -> None:
        logger.log(logging.getLevelName(level.upper()), message)
