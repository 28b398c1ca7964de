"""
Reference clock.

Day boundaries are computed by truncating "now" in a single fixed IANA zone
(settings.REFERENCE_TIMEZONE, UTC by default). Services never call
`date.today()` themselves; they receive `today` from a Clock so tests can
pin it.
"""
from __future__ import annotations

from datetime import date, datetime
from zoneinfo import ZoneInfo

from dotoday.core.config import settings


class Clock:
    def __init__(self, tz_name: str = "UTC"):
        self.tz = ZoneInfo(tz_name)

    def now(self) -> datetime:
        return datetime.now(tz=self.tz)

    def today(self) -> date:
        return self.now().date()


class FixedClock(Clock):
    """Clock frozen on a given day. Used by tests and maintenance scripts."""

    def __init__(self, day: date, tz_name: str = "UTC"):
        super().__init__(tz_name)
        self._day = day

    def now(self) -> datetime:
        return datetime(self._day.year, self._day.month, self._day.day, 12, tzinfo=self.tz)


_default_clock = Clock(settings.REFERENCE_TIMEZONE)


def get_clock() -> Clock:
    """FastAPI dependency — override in tests with a FixedClock."""
    return _default_clock
