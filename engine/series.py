"""
Series resolution for elimination legs and event podiums.

Best-of-three series are stored as separate legs: semifinal legs carry a
"-{leg}" suffix ("S-SF1-2"), finals and bronze legs are numbered in place
("S-F1".."S-F3", "S-B1".."S-B3").
"""

import re
from dataclasses import dataclass, field
from typing import Iterable, Optional

from config import EVENT_FORMATS, EventFormat, event_format
from models.match import MatchStatus

_SEMI_LEG = re.compile(r"^(?P<root>[A-Z]+-SF\d+)-(?P<leg>\d+)$")
_NUMBERED_LEG = re.compile(r"^(?P<prefix>[A-Z]+)-(?P<stage>[FB])(?P<leg>[1-3])$")


def _format_for(match_id: str, event_id: Optional[str]) -> Optional[EventFormat]:
    fmt = event_format(event_id)
    if fmt is not None:
        return fmt
    prefix = match_id.split("-", 1)[0]
    for candidate in EVENT_FORMATS.values():
        if candidate.prefix == prefix:
            return candidate
    return None


def parse_series(match_id: str, event_id: Optional[str] = None) -> Optional[tuple[str, int]]:
    """
    Split a leg id into (series root, leg number).

    "X-SF1-2" -> ("X-SF1", 2). "X-F3" -> ("X-F", 3) only for events played
    as best of three. Returns None for ids that are not series legs.
    """
    found = _SEMI_LEG.match(match_id)
    if found:
        return found.group("root"), int(found.group("leg"))

    found = _NUMBERED_LEG.match(match_id)
    if found:
        fmt = _format_for(match_id, event_id)
        if fmt is not None and fmt.is_best_of_three:
            return f"{found.group('prefix')}-{found.group('stage')}", int(found.group("leg"))
    return None


def series_root(match) -> str:
    """The series a match belongs to; a standalone match is its own series."""
    parsed = parse_series(match.id, match.event_id)
    return parsed[0] if parsed else match.id


def series_legs(root: str, matches: Iterable) -> dict[int, object]:
    """Legs of one series keyed by leg number."""
    legs = {}
    for match in matches:
        parsed = parse_series(match.id, match.event_id)
        if parsed and parsed[0] == root:
            legs[parsed[1]] = match
    return legs


def match_winner(match) -> Optional[str]:
    """Winning competitor of a finalized match; None for ties or unfinished."""
    if match.status != MatchStatus.FINAL or match.score_a is None or match.score_b is None:
        return None
    if match.score_a > match.score_b:
        return match.competitor_a
    if match.score_b > match.score_a:
        return match.competitor_b
    return None


def match_loser(match) -> Optional[str]:
    winner = match_winner(match)
    if winner is None:
        return None
    return match.competitor_b if winner == match.competitor_a else match.competitor_a


@dataclass
class SeriesOutcome:
    """Result of a (possibly single-leg) series."""
    decided: bool = False
    winner: Optional[str] = None
    loser: Optional[str] = None
    wins: dict[str, int] = field(default_factory=dict)


def series_outcome(legs: Iterable, best_of: Optional[int] = None) -> SeriesOutcome:
    """
    Decide a series from its legs.

    A competitor needs a majority of best_of legs (default: the number of
    legs given). Void legs count toward best_of but are never won.
    """
    legs = list(legs)
    best_of = best_of or len(legs)
    needed = best_of // 2 + 1
    outcome = SeriesOutcome()

    for leg in legs:
        winner = match_winner(leg)
        if winner is None:
            continue
        outcome.wins[winner] = outcome.wins.get(winner, 0) + 1
        if outcome.wins[winner] >= needed and not outcome.decided:
            outcome.decided = True
            outcome.winner = winner
            outcome.loser = match_loser(leg)
    return outcome


def is_series_complete(legs: Iterable, best_of: Optional[int] = None) -> bool:
    """Decided, or every leg that was not voided has been played out."""
    legs = list(legs)
    if not legs:
        return False
    if series_outcome(legs, best_of).decided:
        return True
    played = [leg for leg in legs if leg.status != MatchStatus.VOID]
    return all(leg.status == MatchStatus.FINAL for leg in played)


def resolve_awards(fmt: EventFormat, matches: Iterable) -> dict[str, str]:
    """
    Podium fields that the event's finals and bronze series have decided.

    Returns a subset of champion, first_runner_up and second_runner_up.
    """
    by_id = {m.id: m for m in matches}
    podium = {}

    finals = [by_id[i] for i in fmt.leg_ids("finals") if i in by_id]
    final = series_outcome(finals, best_of=len(fmt.finals))
    if final.decided:
        podium["champion"] = final.winner
        podium["first_runner_up"] = final.loser

    bronze = [by_id[i] for i in fmt.leg_ids("bronze") if i in by_id]
    third = series_outcome(bronze, best_of=len(fmt.bronze))
    if third.decided:
        podium["second_runner_up"] = third.winner

    return podium
