"""
Goals router.

POST /goals                          — create a goal (active)
GET  /goals                          — requester's goals
GET  /goals/{id}                     — single goal (owner or public)
PUT  /goals/{id}                     — partial update (owner)
POST /goals/{id}/archive             — active → archived (owner)
POST /goals/{id}/complete            — record today's completion (owner)
GET  /goals/{id}/completions         — completion history, newest first
GET  /goals/{id}/streak              — current / longest streak
GET  /goals/{id}/graph               — daily series for charting
POST /goals/{id}/recompute-streak    — repair the cached streak (owner)
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from dotoday.core.clock import Clock, get_clock
from dotoday.db.base import get_db
from dotoday.models.completion import Completion
from dotoday.models.goal import Goal
from dotoday.routers.deps import get_current_user_id
from dotoday.schemas.common import ErrorResponse
from dotoday.schemas.goal import GoalCreate, GoalListResponse, GoalResponse, GoalUpdate
from dotoday.schemas.streak import (
    CompletionListResponse,
    CompletionResponse,
    GraphPointResponse,
    GraphResponse,
    MarkCompleteResponse,
    StreakResponse,
)
from dotoday.services import goals as goal_service

router = APIRouter(prefix="/goals", tags=["goals"])

MAX_GRAPH_WINDOW_DAYS = 3650

_NOT_FOUND = {404: {"model": ErrorResponse, "description": "Goal does not exist."}}
_FORBIDDEN = {403: {"model": ErrorResponse, "description": "Requester may not access this goal."}}


# ---------------------------------------------------------------------------
# Serialization helpers
# ---------------------------------------------------------------------------

def goal_to_response(g: Goal) -> GoalResponse:
    return GoalResponse(
        id=g.id,
        user_id=g.user_id,
        title=g.title,
        category=g.category,
        description=g.description,
        frequency=g.frequency,
        target_count=g.target_count,
        deadline=str(g.deadline) if g.deadline else None,
        is_public=g.is_public,
        archived=g.archived,
        state=g.state,
        current_streak=g.current_streak,
        created_at=g.created_at.isoformat() if g.created_at else None,
    )


def _completion_to_response(c: Completion) -> CompletionResponse:
    return CompletionResponse(
        id=c.id,
        goal_id=c.goal_id,
        day=str(c.day),
        count=c.count,
        created_at=c.created_at.isoformat() if c.created_at else "",
    )


# ---------------------------------------------------------------------------
# Goal CRUD
# ---------------------------------------------------------------------------

@router.post(
    "",
    response_model=GoalResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a goal",
)
def create_goal(
    payload: GoalCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    goal = goal_service.create_goal(db, user_id, **payload.model_dump())
    return goal_to_response(goal)


@router.get("", response_model=GoalListResponse, summary="List the requester's goals")
def list_goals(
    include_archived: bool = Query(default=False, description="Include archived goals."),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    items = goal_service.list_user_goals(db, user_id, include_archived=include_archived)
    return GoalListResponse(total=len(items), items=[goal_to_response(g) for g in items])


@router.get(
    "/{goal_id}",
    response_model=GoalResponse,
    summary="Get a goal",
    responses={**_NOT_FOUND, **_FORBIDDEN},
)
def get_goal(
    goal_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    return goal_to_response(goal_service.get_goal(db, goal_id, user_id))


@router.put(
    "/{goal_id}",
    response_model=GoalResponse,
    summary="Update a goal",
    responses={**_NOT_FOUND, **_FORBIDDEN},
)
def update_goal(
    goal_id: str,
    payload: GoalUpdate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Only fields present in the body are changed. The streak cache is not writable."""
    goal = goal_service.update_goal(db, goal_id, user_id, payload.model_dump(exclude_unset=True))
    return goal_to_response(goal)


@router.post(
    "/{goal_id}/archive",
    response_model=GoalResponse,
    summary="Archive a goal (irreversible)",
    responses={**_NOT_FOUND, **_FORBIDDEN},
)
def archive_goal(
    goal_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    return goal_to_response(goal_service.archive_goal(db, goal_id, user_id))


# ---------------------------------------------------------------------------
# Completions & streaks
# ---------------------------------------------------------------------------

@router.post(
    "/{goal_id}/complete",
    response_model=MarkCompleteResponse,
    summary="Mark a goal complete for today",
    responses={
        **_NOT_FOUND,
        **_FORBIDDEN,
        409: {"model": ErrorResponse, "description": "Already completed today."},
        500: {"model": ErrorResponse, "description": "Completion recorded, streak refresh failed."},
    },
)
def mark_complete(
    goal_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    clock: Clock = Depends(get_clock),
):
    """
    Record today's completion and refresh the goal's cached streak.

    Returns **409 ALREADY_COMPLETED_TODAY** when a completion for today is
    already on file. That check is best-effort: concurrent requests can both
    get through it, in which case they merge into one row.
    """
    result = goal_service.mark_complete(db, goal_id, user_id, as_of=clock.today())
    return MarkCompleteResponse(
        goal_id=result.goal.id,
        day=str(result.completion.day),
        count=result.completion.count,
        current_streak=result.current_streak,
    )


@router.get(
    "/{goal_id}/completions",
    response_model=CompletionListResponse,
    summary="Completion history (newest first)",
    responses={**_NOT_FOUND, **_FORBIDDEN},
)
def list_completions(
    goal_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    items = goal_service.get_completions(db, goal_id, user_id)
    return CompletionListResponse(
        total=len(items),
        items=[_completion_to_response(c) for c in items],
    )


@router.get(
    "/{goal_id}/streak",
    response_model=StreakResponse,
    summary="Current and longest streak",
    responses={**_NOT_FOUND, **_FORBIDDEN},
)
def get_streak(
    goal_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    clock: Clock = Depends(get_clock),
):
    """
    Computed from the ledger on every call (the cached `current_streak` on
    the goal is not consulted). A streak whose last day was yesterday is
    still reported as current.
    """
    s = goal_service.get_streak(db, goal_id, user_id, today=clock.today())
    return StreakResponse(
        goal_id=s.goal_id,
        current_streak=s.current_streak,
        longest_streak=s.longest_streak,
        total_completions_in_window=s.total_completions_in_window,
        window_days=s.window_days,
    )


@router.get(
    "/{goal_id}/graph",
    response_model=GraphResponse,
    summary="Daily completion series",
    responses={**_NOT_FOUND, **_FORBIDDEN},
)
def get_graph(
    goal_id: str,
    days: Optional[int] = Query(
        default=None,
        ge=0,
        le=MAX_GRAPH_WINDOW_DAYS,
        description="Window size in days before today. Defaults to 365.",
        examples=[30],
    ),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    clock: Clock = Depends(get_clock),
):
    """Returns `days + 1` points ending today, oldest first."""
    points = goal_service.get_graph(db, goal_id, user_id, today=clock.today(), window_days=days)
    return GraphResponse(
        goal_id=goal_id,
        window_days=len(points) - 1,
        points=[
            GraphPointResponse(day=str(p.day), completions=p.completions, count=p.count)
            for p in points
        ],
    )


@router.post(
    "/{goal_id}/recompute-streak",
    response_model=GoalResponse,
    summary="Recompute the cached streak from the ledger",
    responses={**_NOT_FOUND, **_FORBIDDEN},
)
def recompute_streak(
    goal_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    clock: Clock = Depends(get_clock),
):
    """Maintenance endpoint; use it to retry after a STREAK_REFRESH_FAILED error."""
    goal = goal_service.recompute_streak(db, goal_id, user_id, today=clock.today())
    return goal_to_response(goal)
