"""
Graph/Series Builder — presentation-only daily series for charting.

Day enumeration comes from ledger.daily_series; this module only adds the
raw stored count for each day. Read-only.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from sqlalchemy.orm import Session

from dotoday.services import ledger


@dataclass
class GraphPoint:
    day: date
    completions: int   # 0 | 1
    count: int         # raw stored count, 0 if absent


def build_series(db: Session, goal_id: str, window_days: int, today: date) -> list[GraphPoint]:
    series = ledger.daily_series(db, goal_id, window_days, today)
    return [
        GraphPoint(day=p.day, completions=p.present, count=series.count_for(p.day))
        for p in series
    ]
