"""
Tests for the Delay Propagator

Tests that a late start shifts exactly the later matches of the same event
and venue, in one batch, and that on-time starts write nothing.
"""

from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from engine.delay import DelayPropagator
from engine.errors import TransientStoreError
from models import MatchStatus

from conftest import T0


def seed(store, match_id, minutes, venue="Court 6", event_id="badminton_singles"):
    store.add_match(
        id=match_id,
        event_id=event_id,
        match_type="qualifier",
        competitor_a="SA1",
        competitor_b="SA2",
        scheduled_at=T0 + timedelta(minutes=minutes),
        venue=venue,
    )


@pytest.fixture
def schedule(store):
    seed(store, "S-Q0", -20)
    seed(store, "S-Q1", 0)
    seed(store, "S-Q2", 20)
    seed(store, "S-Q3", 40)
    seed(store, "S-Q4", 20, venue="Court 7")
    seed(store, "D-Q1", 20, event_id="badminton_doubles")
    propagator = DelayPropagator(store)
    propagator.attach(store.bus)
    yield store, propagator
    propagator.detach()


def start_at(store, match_id, minutes):
    store.update_match(match_id, status="live", actual_start=T0 + timedelta(minutes=minutes),
                       score_a=0, score_b=0)


def scheduled(store, match_id):
    return store.get_match(match_id).scheduled_at


class TestDelayPropagation:
    """Tests for the scheduled -> live cascade."""

    def test_late_start_shifts_later_matches(self, schedule):
        store, _ = schedule
        start_at(store, "S-Q1", 7)

        assert scheduled(store, "S-Q2") == T0 + timedelta(minutes=27)
        assert scheduled(store, "S-Q3") == T0 + timedelta(minutes=47)

    def test_scope_is_event_and_venue(self, schedule):
        store, _ = schedule
        start_at(store, "S-Q1", 7)

        assert scheduled(store, "S-Q4") == T0 + timedelta(minutes=20)
        assert scheduled(store, "D-Q1") == T0 + timedelta(minutes=20)

    def test_earlier_and_own_match_untouched(self, schedule):
        store, _ = schedule
        start_at(store, "S-Q1", 7)

        assert scheduled(store, "S-Q0") == T0 - timedelta(minutes=20)
        assert scheduled(store, "S-Q1") == T0

    def test_on_time_start_writes_nothing_else(self, schedule):
        store, _ = schedule
        on_change = MagicMock()
        store.bus.match_updated.connect(on_change)

        start_at(store, "S-Q1", 0)
        start_at(store, "S-Q2", 19)

        # Only the two live transitions themselves
        assert on_change.call_count == 2
        assert scheduled(store, "S-Q3") == T0 + timedelta(minutes=40)

    def test_no_refire_on_shifted_matches(self, schedule):
        store, propagator = schedule
        on_shift = MagicMock()
        propagator.schedule_shifted.connect(on_shift)

        start_at(store, "S-Q1", 5)

        on_shift.assert_called_once_with("badminton_singles", "Court 6", 300)

    def test_started_matches_are_not_moved(self, schedule):
        store, _ = schedule
        start_at(store, "S-Q3", 40)
        start_at(store, "S-Q1", 10)

        assert scheduled(store, "S-Q2") == T0 + timedelta(minutes=30)
        assert scheduled(store, "S-Q3") == T0 + timedelta(minutes=40)
        assert store.get_match("S-Q3").status == MatchStatus.LIVE

    def test_only_scheduled_to_live_triggers(self, schedule):
        store, _ = schedule
        store.update_match("S-Q1", actual_start=T0 + timedelta(minutes=9))

        assert scheduled(store, "S-Q2") == T0 + timedelta(minutes=20)

    def test_compute_delay(self):
        assert DelayPropagator.compute_delay(T0 + timedelta(minutes=3), T0) == timedelta(minutes=3)
        assert DelayPropagator.compute_delay(T0, T0) is None
        assert DelayPropagator.compute_delay(T0 - timedelta(minutes=1), T0) is None
        assert DelayPropagator.compute_delay(None, T0) is None

    def test_failed_batch_shifts_nothing(self, store, monkeypatch):
        seed(store, "S-Q1", 0)
        seed(store, "S-Q2", 20)
        propagator = DelayPropagator(store)
        live = store.update_match("S-Q1", status="live", actual_start=T0 + timedelta(minutes=5),
                                  score_a=0, score_b=0)

        def failing_batch(updates):
            raise TransientStoreError("database is locked")

        monkeypatch.setattr(store, "commit_batch", failing_batch)

        with pytest.raises(TransientStoreError):
            propagator.propagate(live, original_start=T0)
        assert scheduled(store, "S-Q2") == T0 + timedelta(minutes=20)
