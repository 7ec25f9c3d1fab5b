from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import List, Optional


class Settings(BaseSettings):
    # PostgreSQL
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "postgres"
    postgres_password: str = ""
    postgres_database: str = "portfolio_dashboard"

    # Full SQLAlchemy URL, e.g. sqlite+aiosqlite:///./dashboard.db for local runs.
    # SQLite keeps no UTC offset; the store converts timestamps to UTC before
    # writing and naive values read back are treated as UTC.
    database_url_override: Optional[str] = None

    # Daily performance recording
    snapshot_enabled: bool = True
    snapshot_hour_utc: int = 0
    snapshot_minute_utc: int = 0
    # Prices captured before this hour are labelled as the previous day's close
    market_close_hour_utc: int = 21

    # Owner used when a portfolio listing does not name one
    default_user_id: int = 1

    cors_origins: List[str] = ["*"]

    # Logging
    log_level: str = "INFO"

    @property
    def database_url(self) -> str:
        if self.database_url_override:
            return self.database_url_override
        return (
            f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_database}"
        )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache
def get_settings() -> Settings:
    return Settings()
