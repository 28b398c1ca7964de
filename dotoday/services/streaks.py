"""
Streak Calculator.

Definition
----------
Completion dates are partitioned into maximal runs of consecutive calendar
days (each member exactly one day after the previous one).

  current streak = length of the most recent run, but only if that run ends
                   today or yesterday; otherwise 0. One day of grace: a
                   streak that ended yesterday is still current until today
                   is over.
  longest streak = length of the longest run over all time.

Completions dated after `today` never count toward the current streak.

All functions are pure reads: no caching and no writes. Persisting the
cached `goals.current_streak` is the lifecycle manager's job.

Public API
----------
partition_runs(dates)                     -> list[Run]   (most recent first)
current_streak_from_dates(dates, today)   -> int
longest_streak_from_dates(dates)          -> int
current_streak(db, goal_id, today)        -> int
longest_streak(db, goal_id)               -> int
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable

from sqlalchemy.orm import Session

from dotoday.services import ledger


@dataclass(frozen=True)
class Run:
    start: date
    end: date

    @property
    def length(self) -> int:
        return (self.end - self.start).days + 1


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------

def partition_runs(dates: Iterable[date]) -> list[Run]:
    """Split dates into runs of consecutive days. Duplicates collapse."""
    ordered = sorted(set(dates), reverse=True)
    runs: list[Run] = []
    if not ordered:
        return runs

    end = start = ordered[0]
    for d in ordered[1:]:
        if start - d == timedelta(days=1):
            start = d
            continue
        runs.append(Run(start=start, end=end))
        end = start = d
    runs.append(Run(start=start, end=end))
    return runs


def current_streak_from_dates(dates: Iterable[date], today: date) -> int:
    runs = partition_runs(d for d in dates if d <= today)
    if not runs:
        return 0
    latest = runs[0]
    if latest.end in (today, today - timedelta(days=1)):
        return latest.length
    return 0


def longest_streak_from_dates(dates: Iterable[date]) -> int:
    return max((run.length for run in partition_runs(dates)), default=0)


# ---------------------------------------------------------------------------
# Ledger-backed
# ---------------------------------------------------------------------------

def current_streak(db: Session, goal_id: str, today: date) -> int:
    return current_streak_from_dates(ledger.completion_dates(db, goal_id), today)


def longest_streak(db: Session, goal_id: str) -> int:
    return longest_streak_from_dates(ledger.completion_dates(db, goal_id))
