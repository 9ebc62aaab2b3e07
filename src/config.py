from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings

class Settings(BaseSettings):

    api_host: str = Field(default="localhost", description="API host")
    api_port: int = Field(default=8000, description="API port")
    debug: bool = Field(default=False, description="Debug mode")

    # Authentication Configuration
    authentication_enabled: bool = Field(default=True, description="Enable authentication for all API endpoints")

    firebase_service_account_path: str = Field(default="firebase-service-account.json", description="Firebase service account JSON file path")
    firebase_project_id: str = Field(default="", description="Firebase project ID")

    # Demo Mode Configuration
    demo_mode: bool = Field(default=False, description="Enable demo mode for development")
    demo_user_id: str = Field(default="demo-user-123", description="Default demo user ID")

    # GNews Provider Configuration
    gnews_api_key: Optional[str] = Field(default=None, description="GNews API key")
    gnews_base_url: str = Field(default="https://gnews.io/api/v4", description="GNews API base URL")
    gnews_language: str = Field(default="en", description="Language passed to GNews searches")
    gnews_timeout_seconds: float = Field(default=10.0, description="Timeout for GNews API calls")
    gnews_max_results: int = Field(default=10, description="Maximum articles requested per GNews search")

    # News Cache Configuration
    news_cache_ttl_seconds: float = Field(default=300.0, description="Time-to-live for cached news searches (5 minutes)")
    personalized_max_articles: int = Field(default=10, description="Maximum articles in a personalized feed")

    # Background Jobs
    background_jobs_enabled: bool = Field(default=True, description="Start background cache jobs with the API")
    cache_warm_interval_seconds: float = Field(
        default=300.0,
        description="Interval for re-warming personalized news cache (5 minutes)"
    )
    cache_cleanup_interval_seconds: float = Field(
        default=600.0,
        description="Interval for removing expired cache entries (10 minutes)"
    )
    article_cleanup_interval_seconds: float = Field(
        default=3600.0,
        description="Interval for removing old article metadata (1 hour)"
    )
    cache_warm_batch_size: int = Field(
        default=10,
        description="Number of users whose feeds are re-warmed per cycle"
    )
    article_metadata_max_age_days: int = Field(
        default=7,
        description="Age after which unfavorited article metadata is removed"
    )

    allowed_origins: list[str] = Field(
        default_factory=lambda: [
            "http://localhost:3000",
            "http://localhost:3001",
        ],
        description="Allowed CORS origins",
        validation_alias=AliasChoices("CORS_ALLOWED_ORIGINS", "ALLOWED_ORIGINS"),
    )

    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Log format (json or text)")

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def parse_allowed_origins(cls, value):
        if value is None:
            return value
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    class Config:
        env_file = [".env", ".env.local"]  # .env.local takes precedence over .env
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
