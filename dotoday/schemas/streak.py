"""
Completion / streak / graph schemas.

POST /goals/{id}/complete     → MarkCompleteResponse
GET  /goals/{id}/completions  → CompletionListResponse
GET  /goals/{id}/streak       → StreakResponse
GET  /goals/{id}/graph        → GraphResponse
"""
from pydantic import BaseModel, ConfigDict, Field


class CompletionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    goal_id: str
    day: str
    count: int
    created_at: str


class CompletionListResponse(BaseModel):
    total: int
    items: list[CompletionResponse] = Field(description="Newest day first.")


class MarkCompleteResponse(BaseModel):
    message: str = "Goal marked as complete"
    goal_id: str
    day: str
    count: int
    current_streak: int


class StreakResponse(BaseModel):
    goal_id: str
    current_streak: int = Field(
        description="Consecutive days ending today or yesterday; 0 after a missed day."
    )
    longest_streak: int = Field(description="Longest run of consecutive days ever.")
    total_completions_in_window: int = Field(
        description="Days with at least one completion in the graph window."
    )
    window_days: int


class GraphPointResponse(BaseModel):
    day: str
    completions: int = Field(description="1 if completed that day, else 0.")
    count: int = Field(description="Raw completion count stored for the day.")


class GraphResponse(BaseModel):
    goal_id: str
    window_days: int
    points: list[GraphPointResponse] = Field(
        description="window_days + 1 entries, oldest first."
    )
