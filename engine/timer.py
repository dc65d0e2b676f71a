"""
Countdown Timer - 1-second match countdown with pause and expiry.

Remaining time is decremented once per tick rather than derived from wall
clock, so a paused countdown never loses time to ticks that still arrive.
"""

import logging
import re

from PySide6.QtCore import QObject, Qt, Signal, QTimer

from engine.errors import ValidationError

logger = logging.getLogger(__name__)

_CLOCK_PATTERN = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*$")


def parse_clock(text: str) -> int:
    """
    Parse an "mm:ss" entry into seconds.

    Minutes are one or two digits, seconds exactly two (00-59).

    Raises:
        ValidationError: the text is not a valid clock value
    """
    found = _CLOCK_PATTERN.match(text or "")
    if not found:
        raise ValidationError(f"Invalid clock value: {text!r}")
    minutes, seconds = int(found.group(1)), int(found.group(2))
    if seconds > 59:
        raise ValidationError(f"Seconds out of range: {text!r}")
    return minutes * 60 + seconds


def format_clock(seconds: int) -> str:
    """Format seconds as "mm:ss"."""
    seconds = max(0, int(seconds))
    return f"{seconds // 60:02d}:{seconds % 60:02d}"


class CountdownTimer(QObject):
    """
    Countdown timer for one match view.

    Emits tick every second and fires expired when time runs out. The
    duration may be edited only until the countdown is first started.

    Usage:
        timer = CountdownTimer(duration_s=600)
        timer.tick.connect(on_tick)
        timer.expired.connect(on_expired)
        timer.start()
    """

    # Signals
    tick = Signal(int)      # seconds remaining
    expired = Signal()      # time's up

    # Constants
    TICK_INTERVAL_MS = 1000

    def __init__(self, duration_s: int = 600, interval_ms: int = None):
        """
        Initialize the countdown.

        Args:
            duration_s: Countdown length in seconds
            interval_ms: Tick interval override (default: 1000)
        """
        super().__init__()

        self._duration_s = max(0, int(duration_s))
        self._remaining_s = self._duration_s
        self._is_running = False
        self._is_paused = False
        self._has_started = False

        self._timer = QTimer(self)
        self._timer.setInterval(interval_ms or self.TICK_INTERVAL_MS)
        self._timer.setTimerType(Qt.TimerType.PreciseTimer)
        self._timer.timeout.connect(self._on_tick)

    @property
    def is_running(self) -> bool:
        """Check if the countdown is currently counting down."""
        return self._is_running and not self._is_paused

    @property
    def is_paused(self) -> bool:
        return self._is_paused

    @property
    def has_started(self) -> bool:
        """True once start() has been called at least once."""
        return self._has_started

    @property
    def duration_s(self) -> int:
        return self._duration_s

    @property
    def remaining_s(self) -> int:
        return self._remaining_s

    @property
    def display(self) -> str:
        return format_clock(self._remaining_s)

    def set_duration(self, seconds: int) -> bool:
        """Edit the countdown length. Ignored once the countdown has started."""
        if self._has_started:
            logger.debug("Countdown already started; duration edit ignored")
            return False
        self._duration_s = max(0, int(seconds))
        self._remaining_s = self._duration_s
        self.tick.emit(self._remaining_s)
        return True

    def start(self) -> None:
        """Start counting down from the configured duration."""
        self._remaining_s = self._duration_s
        self._is_running = True
        self._is_paused = False
        self._has_started = True
        self._timer.start()

        # Emit initial tick
        self.tick.emit(self._remaining_s)

    def restart(self, seconds: int) -> None:
        """Run a fresh countdown of the given length (used for overtime)."""
        self._duration_s = max(0, int(seconds))
        self.start()

    def stop(self) -> None:
        """Stop the countdown completely."""
        self._timer.stop()
        self._is_running = False
        self._is_paused = False

    def pause(self) -> None:
        """Pause the countdown."""
        if self._is_running and not self._is_paused:
            self._is_paused = True

    def resume(self) -> None:
        """Resume a paused countdown."""
        if self._is_running and self._is_paused:
            self._is_paused = False

    def toggle(self) -> bool:
        """Pause or resume; returns True when now paused."""
        if self._is_paused:
            self.resume()
        else:
            self.pause()
        return self._is_paused

    def _on_tick(self) -> None:
        """Handle timer tick - one decrement per second while not paused."""
        if not self._is_running or self._is_paused:
            return

        self._remaining_s = max(0, self._remaining_s - 1)
        self.tick.emit(self._remaining_s)

        if self._remaining_s <= 0:
            self._timer.stop()
            self._is_running = False
            logger.info("Countdown expired")
            self.expired.emit()
