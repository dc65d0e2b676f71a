"""
Dependency Gate - decides which matches are shown/playable as a bracket unfolds.

Pure functions over MatchSnapshot lists; recomputed on every push update.
"""

import re
from typing import Iterable, Optional

from config import event_format
from engine.placeholders import SlotTable, is_placeholder
from engine.series import (
    is_series_complete,
    match_winner,
    parse_series,
    series_legs,
    series_root,
)
from models.match import MatchStatus, MatchType

_DIGITS = re.compile(r"\d+")


def should_display(match, all_matches: Iterable, slots: Optional[SlotTable] = None) -> bool:
    """
    Whether a match should be shown given every match of its event.

    Order of evaluation:
        1. void matches are hidden
        2. qualifiers are shown until finalized
        3. any other finalized match is hidden
        4. stage prerequisites (semifinal, series legs, final/bronze and
           configured predecessors) decide when any apply; a prerequisite
           with no matching records yet decides nothing
        5. otherwise shown once both slots hold real teams, or once played
    """
    if match.status == MatchStatus.VOID:
        return False
    if match.match_type == MatchType.QUALIFIER:
        return match.status != MatchStatus.FINAL
    if match.status == MatchStatus.FINAL:
        return False

    event_matches = [m for m in all_matches if m.event_id == match.event_id]
    results = [rule() for rule in _stage_rules(match, event_matches)]
    if False in results:
        return False
    if results and None not in results:
        return True

    if match.status == MatchStatus.LIVE:
        return True
    return not (is_placeholder(match.competitor_a, match, slots)
                or is_placeholder(match.competitor_b, match, slots))


def is_decider_visible(leg3, all_matches: Iterable) -> bool:
    """Leg 3 is needed only when legs 1 and 2 are final and split one-one."""
    parsed = parse_series(leg3.id, leg3.event_id)
    if parsed is None:
        return False
    legs = series_legs(parsed[0], all_matches)
    first, second = legs.get(1), legs.get(2)
    if first is None or second is None:
        return False
    if first.status != MatchStatus.FINAL or second.status != MatchStatus.FINAL:
        return False
    winners = (match_winner(first), match_winner(second))
    return None not in winners and winners[0] != winners[1]


def display_sort_key(match) -> tuple:
    """Live first, then stage, then scheduled time, then id number."""
    return (
        0 if match.status == MatchStatus.LIVE else 1,
        match.match_type.priority,
        match.scheduled_at,
        tuple(int(n) for n in _DIGITS.findall(match.id)),
    )


def sort_for_display(matches: Iterable) -> list:
    return sorted(matches, key=display_sort_key)


def visible_matches(matches: Iterable, slots: Optional[SlotTable] = None) -> list:
    """Displayable matches of a match list, in display order."""
    matches = list(matches)
    return sort_for_display(m for m in matches if should_display(m, matches, slots))


# ============ Stage Rules ============

def _stage_rules(match, event_matches: list) -> list:
    rules = []
    fmt = event_format(match.event_id)

    if match.match_type == MatchType.SEMIFINAL:
        rules.append(lambda: _qualifiers_final(event_matches))

    predecessors = ()
    if fmt is not None:
        predecessors = (fmt.predecessors.get(match.id)
                        or fmt.predecessors.get(series_root(match)) or ())
    if predecessors:
        rules.append(lambda: _predecessors_complete(predecessors, event_matches))
    elif match.match_type in (MatchType.FINAL, MatchType.BRONZE):
        rules.append(lambda: _semifinals_complete(event_matches))

    parsed = parse_series(match.id, match.event_id)
    if parsed and parsed[1] >= 2:
        root, leg = parsed
        rules.append(lambda: _previous_leg_started(root, leg, event_matches))
        if leg == 3:
            rules.append(lambda: is_decider_visible(match, event_matches))

    return rules


def _qualifiers_final(event_matches: list) -> bool:
    return all(m.status == MatchStatus.FINAL
               for m in event_matches if m.match_type == MatchType.QUALIFIER)


def _predecessors_complete(refs, event_matches: list) -> Optional[bool]:
    known = {m.id for m in event_matches} | {series_root(m) for m in event_matches}
    if not any(ref in known for ref in refs):
        return None
    return all(_is_complete(ref, event_matches) for ref in refs)


def _semifinals_complete(event_matches: list) -> Optional[bool]:
    roots = {series_root(m) for m in event_matches if m.match_type == MatchType.SEMIFINAL}
    if not roots:
        return None
    return all(_is_complete(root, event_matches) for root in roots)


def _is_complete(ref: str, event_matches: list) -> bool:
    """A series when ref names one, otherwise a single match."""
    legs = series_legs(ref, event_matches)
    if legs:
        return is_series_complete(legs.values(), best_of=3)
    for m in event_matches:
        if m.id == ref:
            return m.status in (MatchStatus.FINAL, MatchStatus.VOID)
    return False


def _previous_leg_started(root: str, leg: int, event_matches: list) -> bool:
    previous = series_legs(root, event_matches).get(leg - 1)
    return previous is not None and previous.status in (MatchStatus.LIVE, MatchStatus.FINAL)
