from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///./habits.db",
        description="SQLAlchemy async URL, e.g., postgresql+asyncpg://...",
    )
    DB_ECHO: bool = False

    # Zone used to decide what "today" is when the caller doesn't pass a date
    DEFAULT_TIMEZONE: str = "UTC"

settings = Settings()
