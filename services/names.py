"""
Team display names for competitor slots.
"""

import logging
from typing import Optional

logger = logging.getLogger(__name__)


class TeamNameResolver:
    """
    Session-scoped team name lookup.

    Tries the namespaced id "{event_id}__{id}" first, then the bare id, and
    falls back to the identifier itself (placeholders have no Team record).
    Entries for a team are dropped when the store reports it changed; call
    invalidate() when switching matches.
    """

    def __init__(self, store):
        self._store = store
        self._cache: dict[tuple[Optional[str], str], str] = {}
        store.bus.team_updated.connect(self.invalidate)

    def name(self, identifier: Optional[str], event_id: Optional[str] = None) -> str:
        if not identifier:
            return "TBD"
        key = (event_id, identifier)
        if key not in self._cache:
            self._cache[key] = self._lookup(identifier, event_id)
        return self._cache[key]

    def invalidate(self, team_id: Optional[str] = None) -> None:
        """Drop cached names (all of them, or those for one team id)."""
        if team_id is None:
            self._cache.clear()
            return
        bare = team_id.split("__")[-1]
        for key in [k for k in self._cache if k[1] in (team_id, bare)]:
            del self._cache[key]

    def _lookup(self, identifier: str, event_id: Optional[str]) -> str:
        candidates = []
        if event_id and "__" not in identifier:
            candidates.append(f"{event_id}__{identifier}")
        candidates.append(identifier)

        for team_id in candidates:
            team = self._store.get_team(team_id)
            if team is not None:
                return team.name
        logger.debug("No team record for %s; showing identifier", identifier)
        return identifier
