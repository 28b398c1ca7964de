"""
Completion Ledger — the source of truth for streak math.

One row per (goal_id, day). Recording a completion for a day that already
has a row merges into it (count += increment) instead of creating a
duplicate; the `uq_completion_goal_day` constraint backs this with an
INSERT … ON CONFLICT DO UPDATE on PostgreSQL and SQLite, so two concurrent
writers for the same goal/day converge on one row.

Public API
----------
record_completion(db, goal_id, day, increment_by=1) -> Completion
exists_for_date(db, goal_id, day)                   -> bool
list_by_goal(db, goal_id)                           -> list[Completion]  (newest first)
completion_dates(db, goal_id)                       -> list[date]        (newest first)
daily_series(db, goal_id, window_days, today)       -> DailySeries       (oldest first)

Nothing here commits; the caller owns the transaction.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterator

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from dotoday.models.completion import Completion
from dotoday.models.goal import new_id


# ---------------------------------------------------------------------------
# Series type
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SeriesPoint:
    day: date
    present: int   # 1 if any completion exists for the day, else 0


class DailySeries:
    """
    Every calendar day in [start, end], oldest first.

    Iteration is lazy and can be restarted; the ledger rows backing it are
    fetched once when the series is built.
    """

    def __init__(self, start: date, end: date, counts: dict[date, int]):
        self.start = start
        self.end = end
        self._counts = counts

    def __iter__(self) -> Iterator[SeriesPoint]:
        day = self.start
        while day <= self.end:
            yield SeriesPoint(day=day, present=1 if day in self._counts else 0)
            day += timedelta(days=1)

    def __len__(self) -> int:
        return (self.end - self.start).days + 1

    def count_for(self, day: date) -> int:
        return self._counts.get(day, 0)


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------

def _dialect_insert(db: Session):
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    elif dialect == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
    else:
        return None
    return insert


def _get(db: Session, goal_id: str, day: date) -> Completion | None:
    return (
        db.query(Completion)
        .populate_existing()
        .filter(Completion.goal_id == goal_id, Completion.day == day)
        .first()
    )


def record_completion(
    db: Session,
    goal_id: str,
    day: date,
    increment_by: int = 1,
) -> Completion:
    """
    Upsert the (goal_id, day) row. New rows start at `increment_by`,
    existing rows grow by it. Calling this twice for the same day
    accumulates; uniqueness holds at the (goal, day) grain only.
    """
    if increment_by < 1:
        raise ValueError("increment_by must be >= 1")

    insert = _dialect_insert(db)
    if insert is not None:
        stmt = insert(Completion).values(
            id=new_id(), goal_id=goal_id, day=day, count=increment_by,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["goal_id", "day"],
            set_={"count": Completion.count + stmt.excluded["count"]},
        )
        db.execute(stmt)
    else:
        _record_completion_generic(db, goal_id, day, increment_by)

    return _get(db, goal_id, day)


def _record_completion_generic(db: Session, goal_id: str, day: date, increment_by: int) -> None:
    """Select-then-write for dialects without ON CONFLICT; retries once on a lost race."""
    existing = _get(db, goal_id, day)
    if existing is None:
        try:
            with db.begin_nested():
                db.add(Completion(goal_id=goal_id, day=day, count=increment_by))
            return
        except IntegrityError:
            existing = _get(db, goal_id, day)
    existing.count = existing.count + increment_by
    db.flush()


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------

def exists_for_date(db: Session, goal_id: str, day: date) -> bool:
    return (
        db.query(Completion.id)
        .filter(Completion.goal_id == goal_id, Completion.day == day)
        .first()
        is not None
    )


def list_by_goal(db: Session, goal_id: str) -> list[Completion]:
    """Full history, newest day first."""
    return (
        db.query(Completion)
        .filter(Completion.goal_id == goal_id)
        .order_by(Completion.day.desc())
        .all()
    )


def completion_dates(db: Session, goal_id: str) -> list[date]:
    rows = (
        db.query(Completion.day)
        .filter(Completion.goal_id == goal_id)
        .order_by(Completion.day.desc())
        .all()
    )
    return [row.day for row in rows]


def daily_series(db: Session, goal_id: str, window_days: int, today: date) -> DailySeries:
    """
    Series over [today - window_days, today], always window_days + 1 points
    regardless of how sparse the ledger is.
    """
    if window_days < 0:
        raise ValueError("window_days must be >= 0")

    start = today - timedelta(days=window_days)
    rows = (
        db.query(Completion.day, Completion.count)
        .filter(
            Completion.goal_id == goal_id,
            Completion.day >= start,
            Completion.day <= today,
        )
        .all()
    )
    # Row is a Sequence, so `row.count` would be the tuple method; unpack instead.
    return DailySeries(start=start, end=today, counts={day: count for day, count in rows})
