"""
Completion — one row per (goal_id, day) in the completion ledger.

Append-only: rows are created once and afterwards only their `count`
grows. The unique constraint is what resolves concurrent completions
for the same goal and day; they converge on one row with merged counts.
"""
from datetime import datetime, date
from sqlalchemy import Integer, String, DateTime, Date, ForeignKey, func, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from dotoday.db.base import Base
from dotoday.models.goal import new_id


class Completion(Base):
    __tablename__ = "completions"
    __table_args__ = (
        UniqueConstraint("goal_id", "day", name="uq_completion_goal_day"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    goal_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("goals.id", ondelete="CASCADE"), nullable=False, index=True
    )
    day: Mapped[date] = mapped_column(
        Date, nullable=False, index=True,
        comment="Calendar day in the reference time zone",
    )
    count: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
