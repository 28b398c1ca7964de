from fastapi import FastAPI, Depends
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from dotoday.db.base import get_db
from dotoday.core.config import settings
from dotoday.core.logging import configure_logging, log
from dotoday.middleware.request_context import RequestContextMiddleware
from dotoday.routers import goals as goals_router
from dotoday.routers import feed as feed_router
from dotoday.core.errors import (
    DoTodayException,
    dotoday_exception_handler,
    validation_exception_handler,
    unhandled_exception_handler,
)

configure_logging()

app = FastAPI(
    title="DoToday API",
    description=(
        "**Daily goals, completions and streaks.**\n\n"
        "Owners mark goals complete once per day; streaks are derived from the "
        "completion ledger and public goals are shared in a feed.\n\n"
        "The authenticated user id is read from the `X-User-Id` header set by "
        "the identity provider. All error responses follow the "
        "`{code, message, details}` envelope."
    ),
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# --- CORS ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestContextMiddleware)

# --- Exception handlers (most specific first) ---
app.add_exception_handler(DoTodayException, dotoday_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

# --- Routers ---
app.include_router(goals_router.router)
app.include_router(feed_router.router)

log.info("app_configured", env=settings.APP_ENV, reference_tz=settings.REFERENCE_TIMEZONE)


@app.get("/health", tags=["health"], summary="Health check")
def health(db: Session = Depends(get_db)):
    """
    Returns `{"status": "ok", "db": "ok"}` when both the API and the database
    are reachable. Returns HTTP 503 if the DB is down.
    """
    try:
        db.execute(text("SELECT 1"))
        db_status = "ok"
    except SQLAlchemyError as exc:
        log.warning("health_db_unreachable", error=str(exc))
        db_status = "unreachable"

    if db_status != "ok":
        return JSONResponse(
            status_code=503,
            content={"status": "error", "db": db_status},
        )
    return {"status": "ok", "db": "ok", "env": settings.APP_ENV}
