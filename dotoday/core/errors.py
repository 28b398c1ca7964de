"""
Custom exception hierarchy for DoToday.

Rule: every HTTP error has a machine-readable `code` string so clients
can branch on it without parsing English messages (e.g. render
"already done today" instead of a generic failure).
"""
from __future__ import annotations

from datetime import date
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status

from dotoday.core.logging import log


# ---------------------------------------------------------------------------
# Exception classes
# ---------------------------------------------------------------------------

class DoTodayException(Exception):
    """Base class for all application-level errors."""
    http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class MissingIdentityError(DoTodayException):
    http_status = status.HTTP_401_UNAUTHORIZED
    code = "UNAUTHENTICATED"

    def __init__(self, header: str):
        super().__init__(
            message=f"{header} header is required.",
            details={"header": header},
        )


class GoalNotFoundError(DoTodayException):
    http_status = status.HTTP_404_NOT_FOUND
    code = "GOAL_NOT_FOUND"

    def __init__(self, goal_id: str):
        super().__init__(
            message=f"Goal {goal_id} not found.",
            details={"goal_id": goal_id},
        )


class GoalForbiddenError(DoTodayException):
    http_status = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"

    def __init__(self, goal_id: str):
        super().__init__(
            message=f"Not allowed to access goal {goal_id}.",
            details={"goal_id": goal_id},
        )


class AlreadyCompletedTodayError(DoTodayException):
    http_status = status.HTTP_409_CONFLICT
    code = "ALREADY_COMPLETED_TODAY"

    def __init__(self, goal_id: str, day: date):
        super().__init__(
            message="already completed today",
            details={"goal_id": goal_id, "day": str(day)},
        )


class GoalArchivedError(DoTodayException):
    http_status = status.HTTP_409_CONFLICT
    code = "GOAL_ARCHIVED"

    def __init__(self, goal_id: str):
        super().__init__(
            message=f"Goal {goal_id} is archived.",
            details={"goal_id": goal_id},
        )


class StreakRefreshError(DoTodayException):
    """The completion was recorded but the cached streak could not be refreshed."""
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "STREAK_REFRESH_FAILED"

    def __init__(self, goal_id: str, day: date):
        super().__init__(
            message=(
                "Completion recorded but the streak could not be refreshed. "
                "Retry with POST /goals/{id}/recompute-streak."
            ),
            details={"goal_id": goal_id, "day": str(day), "completion_recorded": True},
        )


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

async def dotoday_exception_handler(request: Request, exc: DoTodayException) -> JSONResponse:
    level = "error" if exc.http_status >= 500 else "info"
    getattr(log, level)(
        "request_failed",
        path=request.url.path,
        code=exc.code,
        status=exc.http_status,
    )
    return JSONResponse(
        status_code=exc.http_status,
        content=exc.to_dict(),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return structured 422 with machine-readable field errors."""
    field_errors = []
    for error in exc.errors():
        field_errors.append({
            "field": ".".join(str(loc) for loc in error["loc"] if loc != "body"),
            "message": error["msg"],
            "type": error["type"],
        })
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "code": "VALIDATION_ERROR",
            "message": "Request validation failed.",
            "details": {"errors": field_errors},
        },
    )


def internal_error_response(request: Request, exc: Exception) -> JSONResponse:
    log.error("unhandled_exception", path=request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "code": "INTERNAL_ERROR",
            "message": "An unexpected error occurred.",
        },
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    return internal_error_response(request, exc)
