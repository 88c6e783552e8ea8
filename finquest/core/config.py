from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):

    project_name: str = "FinQuest Backend"

    SQLITE_DB_FILE: str = "finquest.db"
    DATABASE_URL: Optional[str] = None

    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Calendar used when a logging streak compares expense days
    TRACKING_TIMEZONE: str = "UTC"

    NOTIFY_WEBHOOK_URL: Optional[str] = None
    NOTIFY_TIMEOUT_SECONDS: float = 10.0

    SEED_DEFAULT_CHALLENGES: bool = True

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()

if settings.DATABASE_URL:
    db_url = settings.DATABASE_URL
    if db_url.startswith("postgres://"):
        db_url = db_url.replace("postgres://", "postgresql+psycopg://", 1)
    SQLALCHEMY_DATABASE_URL = db_url
else:
    SQLALCHEMY_DATABASE_URL = f"sqlite:///{settings.SQLITE_DB_FILE}"
