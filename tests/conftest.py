"""
Shared fixtures: Qt application, in-memory store and match snapshots.
"""

import sys
from datetime import datetime, timedelta

import pytest
from PySide6.QtCore import QCoreApplication

from models.schemas import MatchSnapshot

T0 = datetime(2026, 3, 14, 8, 0)


# Create QCoreApplication for Qt event loop (required for QTimer)
@pytest.fixture(scope="session")
def qapp():
    """Create a QCoreApplication instance for the test session."""
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication(sys.argv)
    yield app


@pytest.fixture
def store(qapp):
    """In-memory store with the four events and three operators."""
    from services.store import ScheduleStore

    store = ScheduleStore.in_memory()
    store.add_event(id="badminton_singles", name="Badminton Singles")
    store.add_event(id="badminton_doubles", name="Badminton Doubles", min_roster=2, max_roster=2)
    store.add_event(id="basketball3v3", name="Basketball 3v3", min_roster=3, max_roster=5)
    store.add_event(id="frisbee5v5", name="Frisbee 5v5", min_roster=5, max_roster=10)

    store.add_operator(id="admin", name="Head Table", role="admin")
    store.add_operator(id="sk1", name="Court 6 Scorekeeper", role="scorekeeper")
    store.add_operator(id="sk2", name="Court 7 Scorekeeper", role="scorekeeper")
    return store


@pytest.fixture
def make_match():
    """Factory for MatchSnapshot values used by the pure engine functions."""
    def _make(match_id, event_id="badminton_singles", match_type="qualifier",
              status="scheduled", a="A1", b="A2", score_a=None, score_b=None,
              pool=None, minutes=0, venue="Court 6"):
        return MatchSnapshot(
            id=match_id,
            event_id=event_id,
            match_type=match_type,
            status=status,
            competitor_a=a,
            competitor_b=b,
            score_a=score_a,
            score_b=score_b,
            pool=pool,
            scheduled_at=T0 + timedelta(minutes=minutes),
            venue=venue,
        )
    return _make
