"""
Match Clock - per-match scoring state machine.

Owns the Scheduled -> Live -> Final transitions of one match, score entry
through a coalescing debounce buffer, the side-swap display transform, the
countdown with a single optional overtime period, and the operator
authorization gate.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from PySide6.QtCore import QObject, Signal, QTimer

from config import CLOCK_SETTINGS, ClockSettings, countdown_for
from engine.errors import (
    AuthorizationError,
    ConsistencyError,
    MatchdayError,
    ValidationError,
)
from engine.timer import CountdownTimer, format_clock, parse_clock
from models import MatchStatus, utcnow
from services.identity import StoreIdentityProvider, can_operate
from services.names import TeamNameResolver

logger = logging.getLogger(__name__)

LEFT = "left"
RIGHT = "right"


@dataclass(frozen=True)
class ScoreView:
    """What the operator sees: competitors and scores by screen side."""
    left_id: Optional[str]
    right_id: Optional[str]
    left_name: str
    right_name: str
    left_score: int
    right_score: int
    swapped: bool


class MatchClock(QObject):
    """
    Scoring controller for one open match view.

    Usage:
        clock = MatchClock(store, operator_id="sk-court6")
        clock.load("S-Q3")
        clock.start()
        clock.adjust_score("left", +1)
        clock.swap_sides()
        clock.end(confirmed=True)
    """

    # Signals
    match_changed = Signal(object)        # MatchSnapshot
    score_changed = Signal(object)        # ScoreView
    countdown_tick = Signal(str)          # "mm:ss"
    overtime_requested = Signal()         # countdown expired, overtime unused
    finished = Signal(object)             # final MatchSnapshot
    read_only_changed = Signal(bool)
    error = Signal(object)                # MatchdayError

    def __init__(
        self,
        store,
        operator_id: Optional[str] = None,
        identity=None,
        names: Optional[TeamNameResolver] = None,
        settings: ClockSettings = CLOCK_SETTINGS,
    ):
        super().__init__()
        self._store = store
        self._operator_id = operator_id
        self._identity = identity or StoreIdentityProvider(store)
        self._names = names or TeamNameResolver(store)
        self._settings = settings

        # Debounce buffer: one pending value per score field
        self._pending: dict[str, int] = {}
        self._debounce = QTimer(self)
        self._debounce.setSingleShot(True)
        self._debounce.setInterval(settings.debounce_ms)
        self._debounce.timeout.connect(self._on_debounce_timeout)

        self._match = None
        self._subscription = None
        self._timer: Optional[CountdownTimer] = None
        self._reset_session()

    # ============ Properties ============

    @property
    def match(self):
        return self._match

    @property
    def countdown(self) -> Optional[CountdownTimer]:
        return self._timer

    @property
    def scores(self) -> tuple[int, int]:
        """Logical (competitor_a, competitor_b) scores."""
        return self._score_a, self._score_b

    @property
    def swapped(self) -> bool:
        return self._swapped

    @property
    def overtime_used(self) -> bool:
        return self._overtime_used

    @property
    def is_finished(self) -> bool:
        return self._finished

    @property
    def authorized(self) -> bool:
        return self._authorized

    @property
    def read_only(self) -> bool:
        return not self._authorized or self._deleted or self._finished

    @property
    def has_pending_writes(self) -> bool:
        return bool(self._pending)

    # ============ Session ============

    def load(self, match_id: str) -> None:
        """
        Open a match, discarding all state of the previously loaded one.

        Raises:
            ConsistencyError: the match does not exist
        """
        self.close()

        snapshot = self._store.get_match(match_id)
        if snapshot is None:
            raise ConsistencyError(f"Match not found: {match_id}")

        self._names.invalidate()

        self._reset_session()
        self._match = snapshot
        self._score_a = snapshot.score_a or 0
        self._score_b = snapshot.score_b or 0
        self._finished = snapshot.status in (MatchStatus.FINAL, MatchStatus.VOID)

        operator = self._identity.operator(self._operator_id) if self._operator_id else None
        self._authorized = can_operate(operator, snapshot)
        if not self._authorized:
            logger.info("Operator %s is not assigned to %s; read-only",
                        self._operator_id, snapshot.id)

        self._timer = CountdownTimer(
            countdown_for(snapshot.event_id, snapshot.match_type.value),
            interval_ms=self._settings.tick_interval_ms,
        )
        self._timer.tick.connect(self._on_countdown_tick)
        self._timer.expired.connect(self._on_countdown_expired)

        self._subscription = self._store.subscribe_match(snapshot.id, self._on_remote_change)

        logger.info("Loaded %s (%s)", snapshot.id, snapshot.status.value)
        self.match_changed.emit(snapshot)
        self.score_changed.emit(self.score_view())
        self.read_only_changed.emit(self.read_only)

    def close(self) -> None:
        """Tear down the subscription and timers of the loaded match."""
        if self._match is not None and self._pending and not self._deleted:
            self.flush_pending()
        self._pending.clear()
        self._debounce.stop()

        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None
        if self._timer is not None:
            self._timer.stop()
            self._timer = None

    # ============ Countdown ============

    def set_countdown(self, text: str) -> bool:
        """
        Edit the countdown ("mm:ss") before the match starts.

        Invalid text is ignored and the previous value kept.
        """
        self._require_loaded()
        if self._timer.has_started or self._match.status != MatchStatus.SCHEDULED:
            return False
        try:
            seconds = parse_clock(text)
        except ValidationError as e:
            logger.warning("Countdown entry ignored: %s", e)
            return False
        return self._timer.set_duration(seconds)

    def toggle_pause(self) -> bool:
        """
        Pause or resume the countdown. Returns True when now paused.

        Raises:
            ConsistencyError: the countdown is not running (not started, or
                already at 00:00)
        """
        self._require_loaded()
        if not (self._timer.is_running or self._timer.is_paused):
            raise ConsistencyError(f"Countdown of {self._match.id} is not running")
        paused = self._timer.toggle()
        logger.debug("%s countdown %s", self._match.id, "paused" if paused else "resumed")
        return paused

    def grant_overtime(self, text: str) -> bool:
        """
        Answer an overtime prompt with a duration in minutes.

        A positive integer restarts the countdown and uses up the match's one
        overtime period. Blank or invalid text cancels overtime and leaves the
        clock at 00:00.
        """
        self._require_loaded()
        if not self._awaiting_overtime:
            return False
        self._awaiting_overtime = False

        entry = (text or "").strip()
        if not entry.isdigit() or not 0 < int(entry) <= self._settings.max_overtime_minutes:
            logger.info("Overtime cancelled for %s (entry %r)", self._match.id, text)
            return False

        minutes = int(entry)
        self._overtime_used = True
        self._timer.restart(minutes * 60)
        logger.info("Overtime of %d min granted for %s", minutes, self._match.id)
        return True

    # ============ Transitions ============

    def start(self) -> None:
        """
        Scheduled -> Live: record the start time, zero the scores and start
        the countdown.
        """
        self._require_control()
        if self._match.status != MatchStatus.SCHEDULED:
            raise ConsistencyError(f"{self._match.id} is {self._match.status.value}, not scheduled")

        self._store.update_match(
            self._match.id,
            status=MatchStatus.LIVE,
            actual_start=utcnow(),
            score_a=0,
            score_b=0,
        )
        self._score_a = self._score_b = 0
        self._timer.start()
        logger.info("%s started (%s)", self._match.id, self._timer.display)

    def adjust_score(self, display_side: str, delta: int) -> int:
        """
        Add delta to the competitor shown on display_side (clamped at 0).

        Returns the competitor's new score. The write is debounced.
        """
        self._require_control()
        self._require_live()

        field = self._field_for(display_side)
        current = self._score_a if field == "score_a" else self._score_b
        value = max(0, current + delta)
        if field == "score_a":
            self._score_a = value
        else:
            self._score_b = value

        self._pending[field] = value
        self._debounce.start()
        self.score_changed.emit(self.score_view())
        return value

    def swap_sides(self) -> ScoreView:
        """Flip which competitor is shown on which side."""
        self._require_control()
        self._require_live()
        self._swapped = not self._swapped
        view = self.score_view()
        self.score_changed.emit(view)
        return view

    def end(self, confirmed: bool) -> bool:
        """
        Live -> Final with the current logical scores, in one write.

        Does nothing unless confirmed.
        """
        if not confirmed:
            return False
        self._require_control()
        self._require_live()

        # The final write carries the latest values of any pending score.
        self._debounce.stop()
        self._pending.clear()

        self._store.update_match(
            self._match.id,
            status=MatchStatus.FINAL,
            score_a=self._score_a,
            score_b=self._score_b,
        )
        self._finish()
        return True

    def flush_pending(self) -> None:
        """Write buffered score values now."""
        self._debounce.stop()
        if not self._pending or self._match is None:
            return
        fields, self._pending = self._pending, {}
        self._store.update_match(self._match.id, **fields)

    # ============ Display ============

    def score_view(self) -> ScoreView:
        m = self._match
        a = (m.competitor_a if m else None, self._score_a)
        b = (m.competitor_b if m else None, self._score_b)
        left, right = (b, a) if self._swapped else (a, b)
        event_id = m.event_id if m else None
        return ScoreView(
            left_id=left[0],
            right_id=right[0],
            left_name=self._names.name(left[0], event_id),
            right_name=self._names.name(right[0], event_id),
            left_score=left[1],
            right_score=right[1],
            swapped=self._swapped,
        )

    # ============ Internals ============

    def _reset_session(self) -> None:
        self._swapped = False
        self._overtime_used = False
        self._awaiting_overtime = False
        self._finished = False
        self._deleted = False
        self._authorized = False
        self._score_a = 0
        self._score_b = 0
        self._pending = {}

    def _field_for(self, display_side: str) -> str:
        if display_side not in (LEFT, RIGHT):
            raise ValidationError(f"Unknown side: {display_side!r}")
        shows_a = (display_side == LEFT) != self._swapped
        return "score_a" if shows_a else "score_b"

    def _require_loaded(self) -> None:
        if self._match is None:
            raise ConsistencyError("No match loaded")

    def _require_control(self) -> None:
        self._require_loaded()
        if self._deleted:
            raise ConsistencyError(f"{self._match.id} no longer exists")
        if not self._authorized:
            raise AuthorizationError(
                f"Operator {self._operator_id} may not control {self._match.id}"
            )
        if self._finished:
            raise ConsistencyError(f"{self._match.id} is already {self._match.status.value}")

    def _require_live(self) -> None:
        if self._match.status != MatchStatus.LIVE:
            raise ConsistencyError(f"{self._match.id} is {self._match.status.value}, not live")

    def _finish(self) -> None:
        if self._timer is not None:
            self._timer.stop()
        if self._finished:
            return
        self._finished = True
        self._awaiting_overtime = False
        logger.info("%s final %d-%d", self._match.id, self._score_a, self._score_b)
        self.finished.emit(self._match)
        self.read_only_changed.emit(True)

    def _on_remote_change(self, before, after) -> None:
        """Adopt every committed change of the loaded match."""
        if after is None:
            self._deleted = True
            self._pending.clear()
            self._debounce.stop()
            if self._timer is not None:
                self._timer.stop()
            err = ConsistencyError(f"{before.id} was removed")
            logger.warning("%s", err)
            self.error.emit(err)
            self.read_only_changed.emit(True)
            return

        self._match = after
        if "score_a" not in self._pending:
            self._score_a = after.score_a or 0
        if "score_b" not in self._pending:
            self._score_b = after.score_b or 0

        self.match_changed.emit(after)
        self.score_changed.emit(self.score_view())
        if after.status in (MatchStatus.FINAL, MatchStatus.VOID):
            self._pending.clear()
            self._debounce.stop()
            self._finish()

    def _on_debounce_timeout(self) -> None:
        try:
            self.flush_pending()
        except MatchdayError as e:
            logger.error("Score write failed for %s: %s", self._match.id, e)
            self.error.emit(e)

    def _on_countdown_tick(self, remaining_s: int) -> None:
        self.countdown_tick.emit(format_clock(remaining_s))

    def _on_countdown_expired(self) -> None:
        if self._finished:
            return
        if self._overtime_used:
            logger.info("%s countdown expired after overtime", self._match.id)
            return
        self._awaiting_overtime = True
        logger.info("%s countdown expired; overtime available", self._match.id)
        self.overtime_requested.emit()
