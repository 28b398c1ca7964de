"""
Goal — a habit the owner completes once per calendar day.

`current_streak` is a denormalized cache. Only the lifecycle manager
(dotoday.services.goals) writes it, right after a completion is recorded or
on an explicit recompute. Plain reads never refresh it.
"""
import uuid
from datetime import datetime, date
from sqlalchemy import Integer, String, Text, Boolean, DateTime, Date, func
from sqlalchemy.orm import Mapped, mapped_column

from dotoday.db.base import Base


class GoalFrequency:
    DAILY = "daily"


def new_id() -> str:
    return str(uuid.uuid4())


class Goal(Base):
    __tablename__ = "goals"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    category: Mapped[str | None] = mapped_column(String(64), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    frequency: Mapped[str] = mapped_column(
        String(16), nullable=False, default=GoalFrequency.DAILY,
        comment='only "daily" semantics are implemented',
    )
    target_count: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    deadline: Mapped[date | None] = mapped_column(Date, nullable=True)
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)
    archived: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    current_streak: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
        comment="Cached current streak; refreshed on every completion write",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    @property
    def state(self) -> str:
        return "archived" if self.archived else "active"
