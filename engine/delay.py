"""
Delay Propagator - cascades a late start to the rest of a venue's schedule.

When a match goes live after its scheduled time, every later match of the
same event at the same venue is pushed back by the same amount in a single
atomic batch.
"""

import logging
from datetime import timedelta
from typing import Optional

from PySide6.QtCore import QObject, Signal

from engine.errors import TransientStoreError
from models.match import MatchStatus

logger = logging.getLogger(__name__)


class DelayPropagator(QObject):
    """
    Shifts later matches when a match starts late.

    Usage:
        propagator = DelayPropagator(store)
        propagator.attach(store.bus)
        # store.update_match("S-Q1", status="live", actual_start=...) now cascades
    """

    # Signals
    schedule_shifted = Signal(str, str, int)  # event_id, venue, delay seconds

    def __init__(self, store):
        super().__init__()
        self._store = store
        self._bus = None

    def attach(self, bus) -> None:
        """Listen to match writes on the bus."""
        self.detach()
        self._bus = bus
        bus.match_updated.connect(self.on_match_updated)

    def detach(self) -> None:
        if self._bus is not None:
            self._bus.match_updated.disconnect(self.on_match_updated)
            self._bus = None

    def on_match_updated(self, before, after) -> None:
        """Fire only on the scheduled -> live transition."""
        if before is None or after is None:
            return
        if before.status != MatchStatus.SCHEDULED or after.status != MatchStatus.LIVE:
            return
        try:
            self.propagate(after, original_start=before.scheduled_at)
        except TransientStoreError as e:
            # Signal slots cannot raise to the writer; report and let the operator retry.
            logger.error("Schedule shift after %s failed: %s", after.id, e)
            if self._bus is not None:
                self._bus.emit_message("error", f"Schedule shift after {after.id} failed; retry")

    def propagate(self, match, original_start=None) -> list:
        """
        Push back every later match of the same event and venue.

        Args:
            match: The match that just went live (post-update snapshot)
            original_start: Its scheduled time before the update

        Returns:
            The shifted match snapshots (empty for a no-op).

        Raises:
            TransientStoreError: the batch write failed; nothing was shifted
        """
        original_start = original_start or match.scheduled_at
        delay = self.compute_delay(match.actual_start, original_start)
        if delay is None:
            logger.debug("%s started on time; no shift", match.id)
            return []

        later = self._store.list_matches(
            event_id=match.event_id,
            venue=match.venue,
            scheduled_after=original_start,
        )

        updates = {}
        for other in later:
            if other.id == match.id:
                continue
            if other.status != MatchStatus.SCHEDULED:
                logger.debug("Skipping %s (%s); only scheduled matches move",
                             other.id, other.status.value)
                continue
            updates[other.id] = {"scheduled_at": other.scheduled_at + delay}

        if not updates:
            return []

        shifted = self._store.commit_batch(updates)
        seconds = int(delay.total_seconds())
        logger.info("%s started %ss late; shifted %d match(es) at %s",
                    match.id, seconds, len(shifted), match.venue or "(no venue)")

        self.schedule_shifted.emit(match.event_id, match.venue, seconds)
        if self._bus is not None:
            self._bus.schedule_shifted.emit(match.event_id, match.venue, seconds)
        return shifted

    @staticmethod
    def compute_delay(actual_start, scheduled_at) -> Optional[timedelta]:
        """Positive delay, or None when the match started on time or early."""
        if actual_start is None or scheduled_at is None:
            return None
        delay = actual_start - scheduled_at
        if delay <= timedelta(0):
            return None
        return delay
