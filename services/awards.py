"""
Awards Recorder - fills an event's podium as finals and bronze are decided.

Finals winner -> champion, finals loser -> first runner-up, bronze winner ->
second runner-up. The podium is published once all three are set.
"""

import logging
from typing import Optional

from PySide6.QtCore import QObject, Signal

from config import event_format
from engine.errors import TransientStoreError
from engine.series import series_outcome
from models import MatchStatus, utcnow
from models.schemas import AwardSnapshot

logger = logging.getLogger(__name__)


class AwardsRecorder(QObject):
    """
    Listens for finals/bronze legs going final and updates the Award record.

    Usage:
        recorder = AwardsRecorder(store)
        recorder.attach(store.bus)
    """

    # Signals
    series_decided = Signal(dict)      # {event_id, series, winner, loser}
    awards_published = Signal(str)     # event_id

    def __init__(self, store):
        super().__init__()
        self._store = store
        self._bus = None

    def attach(self, bus) -> None:
        self.detach()
        self._bus = bus
        bus.match_updated.connect(self.on_match_updated)

    def detach(self) -> None:
        if self._bus is not None:
            self._bus.match_updated.disconnect(self.on_match_updated)
            self._bus = None

    def on_match_updated(self, before, after) -> None:
        """Fire only on the live -> final transition."""
        if before is None or after is None:
            return
        if before.status != MatchStatus.LIVE or after.status != MatchStatus.FINAL:
            return
        try:
            self.record(after)
        except TransientStoreError as e:
            logger.error("Award update after %s failed: %s", after.id, e)
            if self._bus is not None:
                self._bus.emit_message("error", f"Award update after {after.id} failed; retry")

    def record(self, match) -> Optional[AwardSnapshot]:
        """
        Update the podium for the series this match belongs to.

        Returns the saved award, or None when the match is not a finals or
        bronze leg or its series is still undecided.
        """
        fmt = event_format(match.event_id)
        if fmt is None:
            logger.debug("Event %s has no award format", match.event_id)
            return None

        if match.id in fmt.leg_ids("finals"):
            series, leg_ids = "finals", fmt.leg_ids("finals")
        elif match.id in fmt.leg_ids("bronze"):
            series, leg_ids = "bronze", fmt.leg_ids("bronze")
        else:
            return None

        legs = [self._store.get_match(leg_id) for leg_id in leg_ids]
        outcome = series_outcome([leg for leg in legs if leg is not None], best_of=len(leg_ids))
        if not outcome.decided:
            logger.info("%s %s series not yet decided", match.event_id, series)
            return None

        if series == "finals":
            slots = {"champion": outcome.winner, "first_runner_up": outcome.loser}
        else:
            slots = {"second_runner_up": outcome.winner}

        award = self._store.save_award(match.event_id, published=False, **slots)
        logger.info("%s %s decided: %s", match.event_id, series, outcome.winner)

        details = {
            "event_id": match.event_id,
            "series": series,
            "winner": outcome.winner,
            "loser": outcome.loser,
        }
        self.series_decided.emit(details)
        if self._bus is not None:
            self._bus.series_decided.emit(details)

        return self.publish_if_ready(award)

    def publish_if_ready(self, award: AwardSnapshot) -> AwardSnapshot:
        """Publish a podium whose three slots are all filled."""
        if award.published:
            return award
        if not award.is_complete:
            return award

        award = self._store.save_award(award.event_id, published=True, published_at=utcnow())
        logger.info("Awards for %s published", award.event_id)
        self.awards_published.emit(award.event_id)
        return award
