"""
Standings Calculator - ranked win/loss/differential tables.

Only finalized matches between two real teams with both scores recorded
count. Ties add a played match and points but no win or loss.
"""

import re
from dataclasses import dataclass
from typing import Iterable, Optional

from config import event_format
from engine.placeholders import SlotTable, is_placeholder
from models.match import MatchStatus

_POOL_PREFIX = re.compile(r"^(?:POOL|GROUP)[\s_-]*")


@dataclass
class Standing:
    """One competitor's row in a standings table."""
    competitor: str
    played: int = 0
    wins: int = 0
    losses: int = 0
    points_for: int = 0
    points_against: int = 0
    rank: int = 0

    @property
    def differential(self) -> int:
        return self.points_for - self.points_against


def counts_toward_standings(match, slots: Optional[SlotTable] = None) -> bool:
    """Finalized, not void, two real teams and both scores present."""
    return (
        match.status == MatchStatus.FINAL
        and match.score_a is not None
        and match.score_b is not None
        and not is_placeholder(match.competitor_a, match, slots)
        and not is_placeholder(match.competitor_b, match, slots)
    )


def compute_standings(matches: Iterable, slots: Optional[SlotTable] = None) -> list[Standing]:
    """
    Rank every competitor appearing in the counted matches.

    Sort order: wins desc, differential desc, played desc, competitor id asc.
    Ranks run 1..N with no shared positions.
    """
    table: dict[str, Standing] = {}

    for match in matches:
        if not counts_toward_standings(match, slots):
            continue

        a = table.setdefault(match.competitor_a, Standing(match.competitor_a))
        b = table.setdefault(match.competitor_b, Standing(match.competitor_b))

        a.played += 1
        b.played += 1
        a.points_for += match.score_a
        a.points_against += match.score_b
        b.points_for += match.score_b
        b.points_against += match.score_a

        if match.score_a > match.score_b:
            a.wins += 1
            b.losses += 1
        elif match.score_b > match.score_a:
            b.wins += 1
            a.losses += 1

    ranked = sorted(
        table.values(),
        key=lambda s: (-s.wins, -s.differential, -s.played, s.competitor),
    )
    for position, standing in enumerate(ranked, start=1):
        standing.rank = position
    return ranked


def normalize_pool(label: Optional[str], event_id: Optional[str] = None) -> Optional[str]:
    """
    Canonical pool code: "Pool a" -> "A", "2" -> "B", "DO" -> "B" (doubles).
    """
    if label is None:
        return None
    code = _POOL_PREFIX.sub("", label.strip().upper()).strip()
    if not code:
        return None

    fmt = event_format(event_id)
    if fmt is not None and code in fmt.pool_aliases:
        return fmt.pool_aliases[code]

    if code.isdigit() and 1 <= int(code) <= 26:
        return chr(ord("A") + int(code) - 1)
    return code


def pool_standings(matches: Iterable, slots: Optional[SlotTable] = None) -> dict[str, list[Standing]]:
    """Standings of every pool, keyed by normalized pool code."""
    pools: dict[str, list] = {}
    for match in matches:
        pool = normalize_pool(match.pool, match.event_id)
        if pool is not None:
            pools.setdefault(pool, []).append(match)
    return {pool: compute_standings(group, slots) for pool, group in sorted(pools.items())}


def pool_rank(competitor: str, matches: Iterable, slots: Optional[SlotTable] = None) -> Optional[int]:
    """
    Rank of a competitor inside its own pool.

    None when the competitor has no counted matches or plays in no pool.
    """
    matches = list(matches)
    pool = None
    for match in matches:
        if competitor in (match.competitor_a, match.competitor_b) and counts_toward_standings(match, slots):
            pool = normalize_pool(match.pool, match.event_id)
            if pool is not None:
                break
    if pool is None:
        return None

    in_pool = [m for m in matches if normalize_pool(m.pool, m.event_id) == pool]
    for standing in compute_standings(in_pool, slots):
        if standing.competitor == competitor:
            return standing.rank
    return None
