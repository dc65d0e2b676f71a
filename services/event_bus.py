"""
Event Bus - Central signal hub for record change notifications.

The schedule store emits here after every committed write; the delay
propagator, awards recorder and open match clocks listen here instead of
polling the store.
"""

from PySide6.QtCore import QObject, Signal


class EventBus(QObject):
    """
    Central signal hub for Matchday.

    Every match write is announced as a (before, after) pair of
    MatchSnapshot objects:
    - before is None when the record was created
    - after is None when the record was deleted

    Usage:
        # In ScheduleStore
        self.bus.match_updated.emit(before, after)

        # In DelayPropagator
        bus.match_updated.connect(self.on_match_updated)
    """

    # ============ Record Changes ============
    match_updated = Signal(object, object)   # before, after (MatchSnapshot | None)
    team_updated = Signal(str)               # team_id
    award_updated = Signal(object)           # AwardSnapshot

    # ============ Progression Events ============
    schedule_shifted = Signal(str, str, int)  # event_id, venue, delay seconds
    series_decided = Signal(dict)             # {event_id, series, winner, loser}

    # ============ System Events ============
    store_error = Signal(str)                 # error message
    system_message = Signal(str, str)         # (level, message)

    def __init__(self):
        super().__init__()

    def emit_match_change(self, before, after) -> None:
        """Announce a committed match write."""
        self.match_updated.emit(before, after)

    def emit_message(self, level: str, message: str) -> None:
        """Emit a system message (info, warning, error)."""
        self.system_message.emit(level, message)
