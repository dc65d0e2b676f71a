"""
Matchday Configuration

Centralized settings, paths, and tournament tables for the progression engine.
"""

import logging
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional

import appdirs


# Application info
APP_NAME = "Matchday"
APP_AUTHOR = "SportsFiesta"
APP_VERSION = "1.0.0"


@dataclass(frozen=True)
class Paths:
    """Application paths."""
    # Data directory (stores database)
    data_dir: Path = Path(appdirs.user_data_dir(APP_NAME, APP_AUTHOR))

    # Config directory (stores operator preferences)
    config_dir: Path = Path(appdirs.user_config_dir(APP_NAME, APP_AUTHOR))

    # Log directory
    log_dir: Path = Path(appdirs.user_log_dir(APP_NAME, APP_AUTHOR))

    @property
    def database(self) -> Path:
        return self.data_dir / "matchday.db"

    @property
    def log_file(self) -> Path:
        return self.log_dir / "matchday.log"

    def ensure_directories(self) -> None:
        """Create all required directories."""
        for dir_path in [self.data_dir, self.config_dir, self.log_dir]:
            dir_path.mkdir(parents=True, exist_ok=True)


@dataclass(frozen=True)
class ClockSettings:
    """Match clock settings."""
    # Countdown tick interval in milliseconds (one decrement per tick)
    tick_interval_ms: int = 1000

    # Score writes are coalesced for this long before hitting the store
    debounce_ms: int = 200

    # Countdown used when no (event, match_type) entry exists
    default_countdown_s: int = 600

    # Upper bound accepted for an overtime entry
    max_overtime_minutes: int = 60


@dataclass(frozen=True)
class LogSettings:
    """Logging settings."""
    level: int = logging.INFO
    format: str = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
    to_file: bool = False


@dataclass(frozen=True)
class EventFormat:
    """
    Bracket format of one event.

    series_type is "single" (one game per slot) or "bo3" (best of three legs).
    Leg ids are suffixes appended to "{prefix}-".
    """
    prefix: str
    series_type: str = "single"
    finals: tuple[str, ...] = ("F1",)
    bronze: tuple[str, ...] = ("B1",)

    # match id -> ids that must be complete before it may be shown
    predecessors: dict[str, tuple[str, ...]] = field(default_factory=dict)

    # sport-specific pool codes -> canonical letter codes
    pool_aliases: dict[str, str] = field(default_factory=dict)

    # pool-seed codes (A1..D4) stand for bracket positions outside qualifiers
    pool_codes_are_placeholders: bool = False

    @property
    def is_best_of_three(self) -> bool:
        return self.series_type == "bo3"

    def leg_ids(self, series: str) -> tuple[str, ...]:
        """Full match ids for the "finals" or "bronze" series."""
        suffixes = self.finals if series == "finals" else self.bronze
        return tuple(f"{self.prefix}-{s}" for s in suffixes)


EVENT_FORMATS: dict[str, EventFormat] = {
    "badminton_singles": EventFormat(
        prefix="S",
        series_type="bo3",
        finals=("F1", "F2", "F3"),
        bronze=("B1", "B2", "B3"),
        pool_aliases={"SD": "A", "SB": "B"},
    ),
    "badminton_doubles": EventFormat(
        prefix="D",
        series_type="bo3",
        finals=("F1", "F2", "F3"),
        bronze=("B1", "B2", "B3"),
        pool_aliases={"DA": "A", "DO": "B"},
    ),
    "basketball3v3": EventFormat(
        prefix="B",
        predecessors={
            "B-SF1": ("B-QF1", "B-QF2"),
            "B-SF2": ("B-QF3", "B-QF4"),
        },
    ),
    "frisbee5v5": EventFormat(
        prefix="F",
        predecessors={
            "F-SF1": ("F-QF1", "F-QF3"),
            "F-SF2": ("F-QF2", "F-QF4"),
            "F-BON1": ("F-F1",),
        },
        pool_codes_are_placeholders=True,
    ),
}


def event_format(event_id: Optional[str]) -> Optional[EventFormat]:
    """Look up the bracket format for an event, if configured."""
    if event_id is None:
        return None
    return EVENT_FORMATS.get(event_id)


# Default countdown per (event, match_type), in seconds.
# Qualifiers run short slots, elimination legs get longer clocks.
COUNTDOWN_DEFAULTS: dict[tuple[str, str], int] = {
    ("badminton_singles", "qualifier"): 600,
    ("badminton_singles", "semifinal"): 900,
    ("badminton_singles", "bronze"): 900,
    ("badminton_singles", "final"): 900,
    ("badminton_doubles", "qualifier"): 600,
    ("badminton_doubles", "semifinal"): 900,
    ("badminton_doubles", "bronze"): 900,
    ("badminton_doubles", "final"): 900,
    ("basketball3v3", "qualifier"): 480,
    ("basketball3v3", "quarterfinal"): 600,
    ("basketball3v3", "semifinal"): 600,
    ("basketball3v3", "bronze"): 600,
    ("basketball3v3", "final"): 720,
    ("frisbee5v5", "qualifier"): 900,
    ("frisbee5v5", "redemption"): 600,
    ("frisbee5v5", "quarterfinal"): 600,
    ("frisbee5v5", "semifinal"): 1200,
    ("frisbee5v5", "bronze"): 600,
    ("frisbee5v5", "final"): 1200,
    ("frisbee5v5", "bonus"): 1200,
}


# Singleton instances
PATHS = Paths()
CLOCK_SETTINGS = ClockSettings()
LOG_SETTINGS = LogSettings()


def countdown_for(event_id: str, match_type: str) -> int:
    """Default countdown in seconds for a match of this event and stage."""
    return COUNTDOWN_DEFAULTS.get(
        (event_id, match_type),
        CLOCK_SETTINGS.default_countdown_s,
    )


def configure_logging(settings: LogSettings = LOG_SETTINGS) -> None:
    """Configure the root logger once for the whole application."""
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if settings.to_file:
        PATHS.log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(PATHS.log_file, encoding="utf-8"))
    logging.basicConfig(level=settings.level, format=settings.format, handlers=handlers)


def init_config() -> None:
    """Initialize configuration and create required directories."""
    PATHS.ensure_directories()
