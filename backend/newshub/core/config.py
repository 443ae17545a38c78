from pydantic_settings import BaseSettings
from typing import List, Union, Optional
from pydantic import field_validator


class Settings(BaseSettings):
    # Database
    POSTGRES_USER: str = "newshub"
    POSTGRES_PASSWORD: str = "newshub"
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "newshub"
    DATABASE_URI: Optional[str] = None  # Full SQLAlchemy URL, overrides POSTGRES_*

    @property
    def DATABASE_URL(self) -> str:
        """Construct database URL from components."""
        if self.DATABASE_URI:
            return self.DATABASE_URI
        return f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    # Application
    DEBUG: bool = False
    ADMIN_TOKEN: Optional[str] = None  # Shared secret for the admin endpoints
    CORS_ORIGINS: Union[List[str], str] = ["http://localhost:3000"]

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            # Split by comma or keep as single item
            return [origin.strip() for origin in v.split(",")]
        return v

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    # Scheduler
    SCHEDULER_ENABLED: bool = True
    RSS_FETCH_INTERVAL: int = 30  # minutes
    INITIAL_FETCH_DELAY: int = 5  # seconds after startup
    CLEANUP_HOUR: int = 2  # UTC hour of the daily retention sweep
    RETENTION_DAYS: int = 90

    # Feed fetching
    FEED_REQUEST_TIMEOUT: float = 15.0  # seconds
    FEED_REQUEST_DELAY: float = 1.0  # pause between publications, seconds
    FEED_USER_AGENT: str = "NewsHub RSS Aggregator/1.0 (+https://github.com/newshub/newshub)"

    # Normalization
    SUMMARY_MAX_LENGTH: int = 300
    TOPIC_KEYWORDS_FILE: Optional[str] = None  # JSON {topic: [keywords]}

    # Full-content extraction from the article page (off by default)
    FULL_CONTENT_EXTRACTION: bool = False
    FULL_CONTENT_TIMEOUT: float = 10.0
    FULL_CONTENT_MIN_LENGTH: int = 100

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env


settings = Settings()
