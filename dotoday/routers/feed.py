"""
Feed router.

GET /feed   — public, non-archived goals (newest first)
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from dotoday.db.base import get_db
from dotoday.routers.goals import goal_to_response
from dotoday.schemas.goal import GoalListResponse
from dotoday.services.goals import PUBLIC_FEED_DEFAULT_LIMIT, list_public_goals

router = APIRouter(prefix="/feed", tags=["feed"])


@router.get("", response_model=GoalListResponse, summary="Public goals feed")
def public_feed(
    limit: int = Query(
        default=PUBLIC_FEED_DEFAULT_LIMIT,
        description="Page size; values outside 1..100 fall back to 50.",
    ),
    db: Session = Depends(get_db),
):
    items = list_public_goals(db, limit=limit)
    return GoalListResponse(total=len(items), items=[goal_to_response(g) for g in items])
