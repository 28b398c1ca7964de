"""
Goal schemas.

POST /goals            ← GoalCreate       → GoalResponse
PUT  /goals/{id}       ← GoalUpdate       → GoalResponse
GET  /goals, /feed                        → GoalListResponse
"""
from __future__ import annotations

from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _clean_title(v: str) -> str:
    if not v.strip():
        raise ValueError("title must not be blank")
    return v.strip()


class GoalCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200, examples=["Read 20 pages"])
    category: Optional[str] = Field(default=None, max_length=64)
    description: Optional[str] = None
    frequency: Literal["daily"] = Field(
        default="daily",
        description='Only "daily" goals are supported.',
    )
    target_count: int = Field(default=1, ge=1, le=1000)
    deadline: Optional[date] = None
    is_public: bool = False

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        return _clean_title(v)


class GoalUpdate(BaseModel):
    """Partial update. Omitted fields are left unchanged."""
    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    category: Optional[str] = Field(default=None, max_length=64)
    description: Optional[str] = None
    target_count: Optional[int] = Field(default=None, ge=1, le=1000)
    deadline: Optional[date] = None
    is_public: Optional[bool] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return _clean_title(v)


class GoalResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    title: str
    category: Optional[str]
    description: Optional[str]
    frequency: str
    target_count: int
    deadline: Optional[str]
    is_public: bool
    archived: bool
    state: str = Field(description='"active" | "archived"')
    current_streak: int = Field(
        description="Cached streak as of the last completion write."
    )
    created_at: Optional[str]


class GoalListResponse(BaseModel):
    total: int
    items: list[GoalResponse]
