"""
Bracket slot classification.

A competitor slot holds either a real team id or a placeholder that names a
bracket position ("S1", "SFW1", "BQF1W", "FSF2L", pool seeds like "A1").
Classification is kept in an explicit table keyed by event, stage context
and identifier, seeded from the per-sport patterns below.
"""

import enum
import re
from typing import Iterable, Optional

from config import event_format
from models.match import MatchType

QUALIFIER = "qualifier"
ELIMINATION = "elimination"

# Sport/stage patterns for bracket positions.
PLACEHOLDER_PATTERNS = [
    re.compile(r"^(?:S|D)[FB]W\d+$"),          # badminton finals/bronze feeders
    re.compile(r"^(?:S|D)[1-4]$"),             # badminton semifinal seeds
    re.compile(r"^BW[1-8]$"),                  # basketball qualifier winners
    re.compile(r"^B(?:QF[1-4]W|SF[12][WL])$"),  # basketball bracket
    re.compile(r"^BSF[1-4][LW]$"),
    re.compile(r"^F(?:R[12]W|SF[12][WL]|CHAMP)$"),  # frisbee bracket
]

POOL_SEED_PATTERN = re.compile(r"^[A-D][1-4]$")


class SlotKind(enum.Enum):
    PLACEHOLDER = "placeholder"
    REAL_TEAM = "real_team"


def stage_context(match_type) -> str:
    """Qualifier slots and elimination slots follow different grammars."""
    if MatchType.parse(match_type) == MatchType.QUALIFIER:
        return QUALIFIER
    return ELIMINATION


def classify(identifier: Optional[str], event_id: Optional[str] = None,
             context: str = ELIMINATION) -> SlotKind:
    """Classify one identifier from the pattern grammar alone."""
    if identifier is None or not identifier.strip():
        return SlotKind.PLACEHOLDER

    code = identifier.strip().split("__")[-1].upper()
    if any(p.match(code) for p in PLACEHOLDER_PATTERNS):
        return SlotKind.PLACEHOLDER

    fmt = event_format(event_id)
    if (context == ELIMINATION and fmt is not None
            and fmt.pool_codes_are_placeholders and POOL_SEED_PATTERN.match(code)):
        return SlotKind.PLACEHOLDER

    return SlotKind.REAL_TEAM


class SlotTable:
    """
    Explicit (event, context, identifier) -> SlotKind table.

    Usage:
        slots = SlotTable.seed(store.list_matches(event_id="frisbee5v5"))
        slots.is_placeholder("frisbee5v5", "elimination", "FSF1W")
    """

    def __init__(self):
        self._kinds: dict[tuple[str, str, str], SlotKind] = {}

    def __len__(self) -> int:
        return len(self._kinds)

    @classmethod
    def seed(cls, matches: Iterable) -> "SlotTable":
        """Build the table from every competitor slot of the given matches."""
        table = cls()
        for match in matches:
            context = stage_context(match.match_type)
            for identifier in (match.competitor_a, match.competitor_b):
                if identifier:
                    table.set(match.event_id, context, identifier,
                              classify(identifier, match.event_id, context))
        return table

    def set(self, event_id: str, context: str, identifier: str, kind: SlotKind) -> None:
        """Record (or override) the classification of one identifier."""
        self._kinds[(event_id, context, identifier)] = kind

    def kind(self, event_id: str, context: str, identifier: Optional[str]) -> SlotKind:
        if identifier is None or not identifier.strip():
            return SlotKind.PLACEHOLDER
        found = self._kinds.get((event_id, context, identifier))
        if found is not None:
            return found
        return classify(identifier, event_id, context)

    def is_placeholder(self, event_id: str, context: str, identifier: Optional[str]) -> bool:
        return self.kind(event_id, context, identifier) == SlotKind.PLACEHOLDER


def is_placeholder(identifier: Optional[str], match, slots: Optional[SlotTable] = None) -> bool:
    """Whether a competitor slot of this match is still a bracket position."""
    context = stage_context(match.match_type)
    if slots is not None:
        return slots.is_placeholder(match.event_id, context, identifier)
    return classify(identifier, match.event_id, context) == SlotKind.PLACEHOLDER
