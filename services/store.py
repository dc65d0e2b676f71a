"""
Schedule Store - persisted Event/Team/Match records with push subscriptions.

Every write runs in one SQLAlchemy transaction and is announced on the
EventBus only after it commits, so subscribers never observe partial batches.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from engine.errors import ConsistencyError, TransientStoreError, ValidationError
from models import (
    Award,
    Event,
    Match,
    MatchStatus,
    MatchType,
    Operator,
    Team,
    create_db_engine,
    create_session_factory,
    init_db,
    session_scope,
    utcnow,
)
from models.base import as_naive_utc
from models.schemas import (
    AwardSnapshot,
    EventCreate,
    MatchCreate,
    MatchSnapshot,
    OperatorCreate,
    OperatorSnapshot,
    TeamCreate,
)
from services.event_bus import EventBus

logger = logging.getLogger(__name__)

# Fields a match write may touch. id, event_id and match_type are fixed at seeding.
MUTABLE_MATCH_FIELDS = {
    "status",
    "score_a",
    "score_b",
    "scheduled_at",
    "actual_start",
    "venue",
    "competitor_a",
    "competitor_b",
    "pool",
    "operator_id",
}

PLAYED_STATUSES = (MatchStatus.LIVE, MatchStatus.FINAL)


class Subscription:
    """
    A live connection between a store signal and a callback.

    Call cancel() when the view closes or switches to another match.
    """

    def __init__(self, signal, slot: Callable):
        self._signal = signal
        self._slot = slot
        self._signal.connect(self._slot)
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        """Disconnect; safe to call more than once."""
        if self._active:
            self._signal.disconnect(self._slot)
            self._active = False


class ScheduleStore:
    """
    Persistent store for the tournament schedule.

    Usage:
        store = ScheduleStore.in_memory()
        store.add_event(id="badminton_singles", name="Badminton Singles")
        store.add_match(id="S-Q1", event_id="badminton_singles", ...)
        sub = store.subscribe_match("S-Q1", on_change)
        store.update_match("S-Q1", status="live", actual_start=now)
    """

    def __init__(self, session_factory: sessionmaker, bus: Optional[EventBus] = None):
        self._session_factory = session_factory
        self.bus = bus or EventBus()

    @classmethod
    def open(cls, url: Optional[str] = None, bus: Optional[EventBus] = None) -> "ScheduleStore":
        """Open (and create if needed) a store at a database URL."""
        engine = create_db_engine(url)
        init_db(engine)
        return cls(create_session_factory(engine), bus)

    @classmethod
    def in_memory(cls, bus: Optional[EventBus] = None) -> "ScheduleStore":
        """A throwaway store backed by in-memory SQLite."""
        return cls.open("sqlite://", bus)

    # ============ Seeding Surface ============

    def add_event(self, **fields: Any) -> Event:
        data = EventCreate(**fields)
        with self._write() as session:
            event = Event(**data.model_dump())
            session.add(event)
        return event

    def add_team(self, **fields: Any) -> Team:
        data = TeamCreate(**fields)
        with self._write() as session:
            team = Team(id=data.id, name=data.name, event_id=data.event_id)
            team.roster = data.roster
            session.add(team)
        self.bus.team_updated.emit(team.id)
        return team

    def add_operator(self, **fields: Any) -> OperatorSnapshot:
        data = OperatorCreate(**fields)
        with self._write() as session:
            operator = Operator(**data.model_dump())
            session.add(operator)
            session.flush()
            snapshot = OperatorSnapshot.model_validate(operator)
        return snapshot

    def add_match(self, **fields: Any) -> MatchSnapshot:
        data = MatchCreate(**fields)
        values = data.model_dump()
        values["scheduled_at"] = as_naive_utc(values["scheduled_at"])
        with self._write() as session:
            match = Match(**values)
            session.add(match)
            session.flush()
            snapshot = MatchSnapshot.model_validate(match)
        self.bus.emit_match_change(None, snapshot)
        return snapshot

    # ============ Queries ============

    def get_match(self, match_id: str) -> Optional[MatchSnapshot]:
        with self._read() as session:
            match = session.get(Match, match_id)
            return MatchSnapshot.model_validate(match) if match else None

    def get_event(self, event_id: str) -> Optional[Event]:
        with self._read() as session:
            return session.get(Event, event_id)

    def get_team(self, team_id: str) -> Optional[Team]:
        with self._read() as session:
            return session.get(Team, team_id)

    def get_operator(self, operator_id: str) -> Optional[OperatorSnapshot]:
        with self._read() as session:
            operator = session.get(Operator, operator_id)
            return OperatorSnapshot.model_validate(operator) if operator else None

    def list_matches(
        self,
        event_id: Optional[str] = None,
        venue: Optional[str] = None,
        status: Optional[MatchStatus] = None,
        match_type: Optional[MatchType] = None,
        scheduled_after: Optional[datetime] = None,
    ) -> list[MatchSnapshot]:
        """Equality filters plus a strict lower bound on scheduled time."""
        stmt = select(Match)
        if event_id is not None:
            stmt = stmt.where(Match.event_id == event_id)
        if venue is not None:
            stmt = stmt.where(Match.venue == venue)
        if status is not None:
            stmt = stmt.where(Match.status == MatchStatus(status))
        if match_type is not None:
            stmt = stmt.where(Match.match_type == MatchType.parse(match_type))
        if scheduled_after is not None:
            stmt = stmt.where(Match.scheduled_at > as_naive_utc(scheduled_after))
        stmt = stmt.order_by(Match.scheduled_at, Match.id)

        with self._read() as session:
            return [MatchSnapshot.model_validate(m) for m in session.scalars(stmt)]

    def get_award(self, event_id: str) -> Optional[AwardSnapshot]:
        with self._read() as session:
            award = session.get(Award, event_id)
            return AwardSnapshot.model_validate(award) if award else None

    # ============ Writes ============

    def update_match(self, match_id: str, **fields: Any) -> MatchSnapshot:
        """Write fields of one match (last write wins per field)."""
        return self.commit_batch({match_id: fields})[0]

    def commit_batch(self, updates: dict[str, dict[str, Any]]) -> list[MatchSnapshot]:
        """
        Apply updates to several matches as one all-or-nothing write.

        Raises:
            ConsistencyError: a target match does not exist
            ValidationError: an update would break a record invariant
            TransientStoreError: the database write failed
        """
        changes: list[tuple[MatchSnapshot, MatchSnapshot]] = []
        with self._write() as session:
            for match_id, fields in updates.items():
                match = session.get(Match, match_id)
                if match is None:
                    raise ConsistencyError(f"Match not found: {match_id}")
                before = MatchSnapshot.model_validate(match)
                self._apply_match_fields(match, fields)
                session.flush()
                changes.append((before, MatchSnapshot.model_validate(match)))

        for before, after in changes:
            self.bus.emit_match_change(before, after)
        return [after for _, after in changes]

    def delete_match(self, match_id: str) -> None:
        """Remove a match (administrative tooling only)."""
        with self._write() as session:
            match = session.get(Match, match_id)
            if match is None:
                raise ConsistencyError(f"Match not found: {match_id}")
            before = MatchSnapshot.model_validate(match)
            session.delete(match)
        self.bus.emit_match_change(before, None)

    def save_award(self, event_id: str, **fields: Any) -> AwardSnapshot:
        """Merge podium fields into the event's award record."""
        with self._write() as session:
            award = session.get(Award, event_id)
            if award is None:
                award = Award(event_id=event_id)
                session.add(award)
            for name, value in fields.items():
                setattr(award, name, value)
            award.updated_at = utcnow()
            session.flush()
            snapshot = AwardSnapshot.model_validate(award)
        self.bus.award_updated.emit(snapshot)
        return snapshot

    # ============ Subscriptions ============

    def subscribe_match(
        self,
        match_id: str,
        callback: Callable[[Optional[MatchSnapshot], Optional[MatchSnapshot]], None],
    ) -> Subscription:
        """Push every committed change of one match as (before, after)."""
        def _on_change(before, after):
            current = after or before
            if current is not None and current.id == match_id:
                callback(before, after)

        return Subscription(self.bus.match_updated, _on_change)

    def subscribe_query(
        self,
        callback: Callable[[list[MatchSnapshot]], None],
        **filters: Any,
    ) -> Subscription:
        """
        Push the full result of list_matches(**filters) now and after every
        change that touches a record inside the query.
        """
        def _on_change(before, after):
            if any(s is not None and _in_query(s, filters) for s in (before, after)):
                callback(self.list_matches(**filters))

        subscription = Subscription(self.bus.match_updated, _on_change)
        callback(self.list_matches(**filters))
        return subscription

    # ============ Internals ============

    def _write(self):
        return _StoreTransaction(self)

    def _read(self):
        return _StoreTransaction(self)

    def _apply_match_fields(self, match: Match, fields: dict[str, Any]) -> None:
        unknown = set(fields) - MUTABLE_MATCH_FIELDS
        if unknown:
            raise ValidationError(f"Cannot modify {sorted(unknown)} on match {match.id}")

        if "scheduled_at" in fields and match.status != MatchStatus.SCHEDULED:
            raise ValidationError(
                f"scheduled_at of {match.id} is fixed once the match is {match.status.value}"
            )

        for name, value in fields.items():
            if name == "status":
                value = MatchStatus(value)
            elif name in ("scheduled_at", "actual_start"):
                value = as_naive_utc(value)
            elif name in ("score_a", "score_b") and value is not None and value < 0:
                raise ValidationError(f"{name} cannot be negative")
            setattr(match, name, value)

        if match.status not in PLAYED_STATUSES:
            if fields.get("score_a") is not None or fields.get("score_b") is not None:
                raise ValidationError(
                    f"Scores of {match.id} must stay empty while {match.status.value}"
                )
            match.score_a = None
            match.score_b = None


class _StoreTransaction:
    """session_scope that reports database failures as TransientStoreError."""

    def __init__(self, store: ScheduleStore):
        self._store = store
        self._scope = session_scope(store._session_factory)

    def __enter__(self):
        return self._scope.__enter__()

    def __exit__(self, exc_type, exc, tb):
        try:
            return self._scope.__exit__(exc_type, exc, tb)
        except SQLAlchemyError as err:
            logger.error("Store write failed: %s", err)
            self._store.bus.store_error.emit(str(err))
            raise TransientStoreError(str(err)) from err


def _in_query(snapshot: MatchSnapshot, filters: dict[str, Any]) -> bool:
    for name, expected in filters.items():
        if expected is None:
            continue
        if name == "scheduled_after":
            if not snapshot.scheduled_at > as_naive_utc(expected):
                return False
        elif name == "status":
            if snapshot.status != MatchStatus(expected):
                return False
        elif name == "match_type":
            if snapshot.match_type != MatchType.parse(expected):
                return False
        elif getattr(snapshot, name) != expected:
            return False
    return True
