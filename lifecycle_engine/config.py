"""
Configuration settings for the client lifecycle engine.
Uses pydantic-settings for environment variable management.

DATABASE_URL priority:
  1. DATABASE_URL env var (hosted PostgreSQL in production)
  2. Fallback: SQLite for local development and tests
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "Coaching Platform - Client Lifecycle Engine"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Database
    DATABASE_URL: str = "sqlite:///./lifecycle.db"

    @property
    def is_postgres(self) -> bool:
        return self.DATABASE_URL.startswith("postgresql")

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173,http://localhost:8080"

    # Security (admin bearer tokens are issued elsewhere, only decoded here)
    SECRET_KEY: str = "lifecycle-engine-secret-key-change-in-production"

    # Push notification dispatch (downstream collaborator)
    PUSH_NOTIFICATION_URL: str = ""
    PUSH_NOTIFICATION_TOKEN: str = ""
    PUSH_TIMEOUT_SECONDS: float = 10.0

    # Achievement evaluation
    DEFAULT_TARGET_KCAL: int = 2000
    MEAL_STREAK_LOOKBACK: int = 100
    DAILY_LOG_STREAK_LOOKBACK: int = 30

    # Feature Flags
    SEED_ACHIEVEMENTS: bool = True

    @property
    def cors_origins_list(self) -> list[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "extra": "ignore",
    }


settings = Settings()
