"""
Tests for the ScheduleStore

Tests record invariants, atomic batches, filters and push subscriptions.
"""

from datetime import timedelta
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from engine.errors import ConsistencyError, TransientStoreError, ValidationError
from models import MatchStatus, MatchType

from conftest import T0


def seed(store, match_id, minutes=0, venue="Court 6", event_id="badminton_singles", **fields):
    fields.setdefault("match_type", "qualifier")
    return store.add_match(
        id=match_id,
        event_id=event_id,
        competitor_a=fields.pop("a", "SA1"),
        competitor_b=fields.pop("b", "SA2"),
        scheduled_at=T0 + timedelta(minutes=minutes),
        venue=venue,
        **fields,
    )


class TestSeeding:
    """Tests for the seeding surface."""

    def test_add_and_get_match(self, store):
        seed(store, "S-Q1", pool="A")
        match = store.get_match("S-Q1")

        assert match.event_id == "badminton_singles"
        assert match.match_type == MatchType.QUALIFIER
        assert match.status == MatchStatus.SCHEDULED
        assert match.score_a is None and match.score_b is None
        assert match.scheduled_at == T0

    def test_legacy_stage_names_accepted(self, store):
        seed(store, "B-QF1", event_id="basketball3v3", match_type="qf")
        seed(store, "B-SF1", event_id="basketball3v3", match_type="semi")

        assert store.get_match("B-QF1").match_type == MatchType.QUARTERFINAL
        assert store.get_match("B-SF1").match_type == MatchType.SEMIFINAL

    def test_scores_rejected_on_scheduled_seed(self, store):
        with pytest.raises(ValueError):
            seed(store, "S-Q1", score_a=3, score_b=1)

    def test_missing_match_is_none(self, store):
        assert store.get_match("nope") is None

    def test_team_roster_stored(self, store):
        store.add_team(id="badminton_doubles__DA1", name="Shuttle Kings",
                       event_id="badminton_doubles", roster=["ana@x.org", "ben@x.org"])
        team = store.get_team("badminton_doubles__DA1")

        assert team.name == "Shuttle Kings"
        assert team.roster == ["ana@x.org", "ben@x.org"]
        assert team.code == "DA1"


class TestQueries:
    """Tests for list_matches filters."""

    def test_filters_by_event_and_venue(self, store):
        seed(store, "S-Q1", venue="Court 6")
        seed(store, "S-Q2", venue="Court 7")
        seed(store, "D-Q1", event_id="badminton_doubles", venue="Court 6")

        ids = [m.id for m in store.list_matches(event_id="badminton_singles", venue="Court 6")]
        assert ids == ["S-Q1"]

    def test_scheduled_after_is_strict(self, store):
        seed(store, "S-Q1", minutes=0)
        seed(store, "S-Q2", minutes=10)
        seed(store, "S-Q3", minutes=20)

        ids = [m.id for m in store.list_matches(scheduled_after=T0 + timedelta(minutes=10))]
        assert ids == ["S-Q3"]

    def test_ordered_by_schedule(self, store):
        seed(store, "S-Q2", minutes=10)
        seed(store, "S-Q1", minutes=0)

        assert [m.id for m in store.list_matches()] == ["S-Q1", "S-Q2"]

    def test_filter_by_status_and_type(self, store):
        seed(store, "S-Q1")
        seed(store, "S-SF1-1", match_type="semifinal", a="S1", b="S4")
        store.update_match("S-Q1", status="live", score_a=0, score_b=0)

        assert [m.id for m in store.list_matches(status=MatchStatus.LIVE)] == ["S-Q1"]
        assert [m.id for m in store.list_matches(match_type="semi")] == ["S-SF1-1"]


class TestInvariants:
    """Tests for write invariants enforced by the store."""

    def test_id_and_type_are_immutable(self, store):
        seed(store, "S-Q1")

        with pytest.raises(ValidationError):
            store.update_match("S-Q1", id="S-Q9")
        with pytest.raises(ValidationError):
            store.update_match("S-Q1", match_type="final")

    def test_schedule_fixed_once_live(self, store):
        seed(store, "S-Q1")
        store.update_match("S-Q1", status="live", score_a=0, score_b=0)

        with pytest.raises(ValidationError):
            store.update_match("S-Q1", scheduled_at=T0 + timedelta(minutes=5))

    def test_scores_only_while_played(self, store):
        seed(store, "S-Q1")

        with pytest.raises(ValidationError):
            store.update_match("S-Q1", score_a=1)

    def test_negative_score_rejected(self, store):
        seed(store, "S-Q1")
        store.update_match("S-Q1", status="live", score_a=0, score_b=0)

        with pytest.raises(ValidationError):
            store.update_match("S-Q1", score_a=-1)

    def test_void_clears_scores(self, store):
        seed(store, "S-Q1")
        store.update_match("S-Q1", status="live", score_a=4, score_b=2)
        match = store.update_match("S-Q1", status="void")

        assert match.status == MatchStatus.VOID
        assert match.score_a is None and match.score_b is None

    def test_update_missing_match(self, store):
        with pytest.raises(ConsistencyError):
            store.update_match("nope", venue="Court 1")


class TestBatches:
    """Tests for atomic multi-record writes."""

    def test_batch_applies_all(self, store):
        seed(store, "S-Q1", minutes=0)
        seed(store, "S-Q2", minutes=10)

        store.commit_batch({
            "S-Q1": {"scheduled_at": T0 + timedelta(minutes=5)},
            "S-Q2": {"scheduled_at": T0 + timedelta(minutes=15)},
        })

        assert store.get_match("S-Q1").scheduled_at == T0 + timedelta(minutes=5)
        assert store.get_match("S-Q2").scheduled_at == T0 + timedelta(minutes=15)

    def test_batch_is_all_or_nothing(self, store):
        seed(store, "S-Q1", minutes=0)

        with pytest.raises(ConsistencyError):
            store.commit_batch({
                "S-Q1": {"scheduled_at": T0 + timedelta(minutes=5)},
                "S-Q404": {"scheduled_at": T0 + timedelta(minutes=15)},
            })

        assert store.get_match("S-Q1").scheduled_at == T0

    def test_database_failure_is_transient_error(self, store, monkeypatch):
        seed(store, "S-Q1")
        on_error = MagicMock()
        store.bus.store_error.connect(on_error)

        def failing_commit(session):
            raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

        monkeypatch.setattr(Session, "commit", failing_commit)

        with pytest.raises(TransientStoreError):
            store.update_match("S-Q1", venue="Court 1")
        on_error.assert_called_once()

        monkeypatch.undo()
        assert store.get_match("S-Q1").venue == "Court 6"

    def test_no_notification_for_failed_batch(self, store):
        seed(store, "S-Q1")
        on_change = MagicMock()
        store.subscribe_match("S-Q1", on_change)

        with pytest.raises(ConsistencyError):
            store.commit_batch({"S-Q1": {"venue": "Court 1"}, "S-Q404": {"venue": "Court 1"}})

        on_change.assert_not_called()


class TestSubscriptions:
    """Tests for push subscriptions."""

    def test_match_subscription_receives_before_and_after(self, store):
        seed(store, "S-Q1")
        seed(store, "S-Q2")
        on_change = MagicMock()
        store.subscribe_match("S-Q1", on_change)

        store.update_match("S-Q2", venue="Court 1")
        store.update_match("S-Q1", status="live", score_a=0, score_b=0)

        on_change.assert_called_once()
        before, after = on_change.call_args[0]
        assert before.status == MatchStatus.SCHEDULED
        assert after.status == MatchStatus.LIVE

    def test_cancelled_subscription_is_silent(self, store):
        seed(store, "S-Q1")
        on_change = MagicMock()
        subscription = store.subscribe_match("S-Q1", on_change)
        subscription.cancel()
        subscription.cancel()

        store.update_match("S-Q1", venue="Court 1")

        on_change.assert_not_called()
        assert not subscription.active

    def test_deletion_is_pushed_with_no_after(self, store):
        seed(store, "S-Q1")
        on_change = MagicMock()
        store.subscribe_match("S-Q1", on_change)

        store.delete_match("S-Q1")

        before, after = on_change.call_args[0]
        assert before.id == "S-Q1"
        assert after is None
        assert store.get_match("S-Q1") is None

    def test_query_subscription_pushes_full_result(self, store):
        seed(store, "S-Q1", venue="Court 6")
        seed(store, "S-Q2", venue="Court 7")
        results = []
        store.subscribe_query(lambda matches: results.append([m.id for m in matches]),
                              venue="Court 6")

        store.update_match("S-Q2", status="live", score_a=0, score_b=0)
        seed(store, "S-Q3", venue="Court 6", minutes=30)

        assert results == [["S-Q1"], ["S-Q1", "S-Q3"]]
