from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATABASE_URL: str = "postgresql://dotoday:dotoday@db:5432/dotoday"
    APP_ENV: str = "development"

    # Comma-separated allowed origins, or "*" to allow all.
    # Example: "https://dotoday.app,https://api.dotoday.app"
    CORS_ORIGINS: str = "*"

    # IANA zone used to truncate timestamps to calendar days.
    REFERENCE_TIMEZONE: str = "UTC"

    # Window (in days, excluding today) used by the yearly graph and streak summary.
    GRAPH_WINDOW_DAYS: int = 365

    # Header carrying the user id asserted by the upstream identity provider.
    AUTH_USER_HEADER: str = "X-User-Id"

    # Completions against archived goals are accepted unless this is turned off.
    ALLOW_COMPLETION_ON_ARCHIVED: bool = True

    # Answer 404 instead of 403 for private goals the requester cannot see.
    HIDE_PRIVATE_GOALS: bool = False

    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    @property
    def cors_origins_list(self) -> list[str]:
        if self.CORS_ORIGINS.strip() == "*":
            return ["*"]
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()
