"""
Goal Lifecycle Manager.

States
------
  create → active
  active → active     (update, complete)
  active → archived   (one-way; there is no un-archive)

Completions against archived goals are accepted unless
settings.ALLOW_COMPLETION_ON_ARCHIVED is turned off.

mark_complete
-------------
  1. load goal                       → GoalNotFoundError
  2. requester must own it           → GoalForbiddenError
                                       (GoalNotFoundError for private goals
                                       when HIDE_PRIVATE_GOALS is set)
  3. archived guard (if enabled)     → GoalArchivedError
  4. completion already exists today → AlreadyCompletedTodayError
  5. ledger upsert + commit          (durable fact)
  6. recompute current streak, persist goals.current_streak, commit
                                     → StreakRefreshError on failure

Step 4 is advisory only: two concurrent requests can both pass it. The
(goal_id, day) upsert in step 5 turns that race into a count merge, never a
duplicate row. Step 6 failing leaves the completion in place with a stale
cache; recompute_streak() repairs it.

This module is the only writer of goals.current_streak.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from dotoday.core.config import settings
from dotoday.core.errors import (
    AlreadyCompletedTodayError,
    GoalArchivedError,
    GoalForbiddenError,
    GoalNotFoundError,
    StreakRefreshError,
)
from dotoday.core.logging import log
from dotoday.models.completion import Completion
from dotoday.models.goal import Goal, GoalFrequency
from dotoday.services import ledger, streaks
from dotoday.services.graph import GraphPoint, build_series


PUBLIC_FEED_DEFAULT_LIMIT = 50
PUBLIC_FEED_MAX_LIMIT = 100

_UPDATABLE_FIELDS = {"title", "category", "description", "target_count", "deadline", "is_public"}
_NON_NULLABLE_FIELDS = {"title", "target_count", "is_public"}


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass
class MarkCompleteResult:
    goal: Goal
    completion: Completion
    current_streak: int


@dataclass
class StreakSummary:
    goal_id: str
    current_streak: int
    longest_streak: int
    total_completions_in_window: int
    window_days: int


# ---------------------------------------------------------------------------
# Access helpers
# ---------------------------------------------------------------------------

def _load(db: Session, goal_id: str) -> Goal:
    goal = db.get(Goal, goal_id)
    if goal is None:
        raise GoalNotFoundError(goal_id)
    return goal


def _ensure_owner(goal: Goal, requester_id: str) -> None:
    if goal.user_id == requester_id:
        return
    if settings.HIDE_PRIVATE_GOALS and not goal.is_public:
        raise GoalNotFoundError(goal.id)
    raise GoalForbiddenError(goal.id)


def _ensure_can_view(goal: Goal, requester_id: str) -> None:
    """Owners see everything; others only public goals."""
    if goal.user_id == requester_id or goal.is_public:
        return
    if settings.HIDE_PRIVATE_GOALS:
        raise GoalNotFoundError(goal.id)
    raise GoalForbiddenError(goal.id)


def _resolve_window(window_days: Optional[int]) -> int:
    return settings.GRAPH_WINDOW_DAYS if window_days is None else window_days


# ---------------------------------------------------------------------------
# Goal CRUD (thin; the streak cache is never writable from here)
# ---------------------------------------------------------------------------

def create_goal(
    db: Session,
    owner_id: str,
    *,
    title: str,
    category: Optional[str] = None,
    description: Optional[str] = None,
    frequency: str = GoalFrequency.DAILY,
    target_count: int = 1,
    deadline: Optional[date] = None,
    is_public: bool = False,
) -> Goal:
    goal = Goal(
        user_id=owner_id,
        title=title,
        category=category,
        description=description,
        frequency=frequency,
        target_count=target_count,
        deadline=deadline,
        is_public=is_public,
        archived=False,
        current_streak=0,
    )
    db.add(goal)
    db.commit()
    db.refresh(goal)
    log.info("goal_created", goal_id=goal.id, user_id=owner_id, is_public=is_public)
    return goal


def list_user_goals(db: Session, owner_id: str, include_archived: bool = False) -> list[Goal]:
    q = db.query(Goal).filter(Goal.user_id == owner_id)
    if not include_archived:
        q = q.filter(Goal.archived == False)  # noqa: E712
    return q.order_by(Goal.created_at.desc(), Goal.id).all()


def list_public_goals(db: Session, limit: int = PUBLIC_FEED_DEFAULT_LIMIT) -> list[Goal]:
    if limit <= 0 or limit > PUBLIC_FEED_MAX_LIMIT:
        limit = PUBLIC_FEED_DEFAULT_LIMIT
    return (
        db.query(Goal)
        .filter(Goal.is_public == True, Goal.archived == False)  # noqa: E712
        .order_by(Goal.created_at.desc(), Goal.id)
        .limit(limit)
        .all()
    )


def get_goal(db: Session, goal_id: str, requester_id: str) -> Goal:
    goal = _load(db, goal_id)
    _ensure_can_view(goal, requester_id)
    return goal


def update_goal(db: Session, goal_id: str, requester_id: str, changes: dict[str, Any]) -> Goal:
    """Patch owner-editable fields. Unknown keys are ignored, so are nulls for required columns."""
    goal = _load(db, goal_id)
    _ensure_owner(goal, requester_id)

    applied = []
    for field, value in changes.items():
        if field not in _UPDATABLE_FIELDS:
            continue
        if value is None and field in _NON_NULLABLE_FIELDS:
            continue
        setattr(goal, field, value)
        applied.append(field)

    db.commit()
    db.refresh(goal)
    log.info("goal_updated", goal_id=goal.id, fields=sorted(applied))
    return goal


def archive_goal(db: Session, goal_id: str, requester_id: str) -> Goal:
    goal = _load(db, goal_id)
    _ensure_owner(goal, requester_id)
    if not goal.archived:
        goal.archived = True
        db.commit()
        db.refresh(goal)
        log.info("goal_archived", goal_id=goal.id)
    return goal


# ---------------------------------------------------------------------------
# Completion write path
# ---------------------------------------------------------------------------

def _refresh_streak(db: Session, goal: Goal, today: date) -> int:
    streak = streaks.current_streak(db, goal.id, today)
    goal.current_streak = streak
    db.commit()
    return streak


def mark_complete(db: Session, goal_id: str, requester_id: str, as_of: date) -> MarkCompleteResult:
    goal = _load(db, goal_id)
    _ensure_owner(goal, requester_id)

    if goal.archived and not settings.ALLOW_COMPLETION_ON_ARCHIVED:
        raise GoalArchivedError(goal.id)

    if ledger.exists_for_date(db, goal.id, as_of):
        log.info("completion_rejected_duplicate", goal_id=goal.id, day=str(as_of))
        raise AlreadyCompletedTodayError(goal.id, as_of)

    try:
        completion = ledger.record_completion(db, goal.id, as_of, increment_by=1)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        log.error("completion_write_failed", goal_id=goal.id, day=str(as_of))
        raise

    log.info(
        "completion_recorded",
        goal_id=goal.id,
        day=str(as_of),
        count=completion.count,
        archived=goal.archived,
    )

    try:
        streak = _refresh_streak(db, goal, as_of)
    except SQLAlchemyError as exc:
        db.rollback()
        log.error("streak_refresh_failed", goal_id=goal.id, day=str(as_of), error=str(exc))
        raise StreakRefreshError(goal.id, as_of) from exc

    return MarkCompleteResult(goal=goal, completion=completion, current_streak=streak)


def recompute_streak(db: Session, goal_id: str, requester_id: str, today: date) -> Goal:
    """Repair the cached streak from the ledger (e.g. after a failed refresh)."""
    goal = _load(db, goal_id)
    _ensure_owner(goal, requester_id)
    before = goal.current_streak
    after = _refresh_streak(db, goal, today)
    db.refresh(goal)
    log.info("streak_recomputed", goal_id=goal.id, before=before, after=after)
    return goal


# ---------------------------------------------------------------------------
# Read path (never touches the cache)
# ---------------------------------------------------------------------------

def get_completions(db: Session, goal_id: str, requester_id: str) -> list[Completion]:
    goal = _load(db, goal_id)
    _ensure_can_view(goal, requester_id)
    return ledger.list_by_goal(db, goal.id)


def get_streak(
    db: Session,
    goal_id: str,
    requester_id: str,
    today: date,
    window_days: Optional[int] = None,
) -> StreakSummary:
    goal = _load(db, goal_id)
    _ensure_can_view(goal, requester_id)

    window = _resolve_window(window_days)
    series = ledger.daily_series(db, goal.id, window, today)
    return StreakSummary(
        goal_id=goal.id,
        current_streak=streaks.current_streak(db, goal.id, today),
        longest_streak=streaks.longest_streak(db, goal.id),
        total_completions_in_window=sum(p.present for p in series),
        window_days=window,
    )


def get_graph(
    db: Session,
    goal_id: str,
    requester_id: str,
    today: date,
    window_days: Optional[int] = None,
) -> list[GraphPoint]:
    goal = _load(db, goal_id)
    _ensure_can_view(goal, requester_id)
    return build_series(db, goal.id, _resolve_window(window_days), today)
