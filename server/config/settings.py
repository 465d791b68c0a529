"""Application configuration settings."""
from pathlib import Path
from pydantic_settings import BaseSettings
from pydantic import model_validator
from typing import List

# Get the server directory path
SERVER_DIR = Path(__file__).parent.parent


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Authentication (tokens are issued elsewhere, we only verify them)
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"

    # CORS: explicit list of allowed origins
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:3000",
    ]

    # Pending action confirmation
    PENDING_ACTION_TTL_MINUTES: int = 15

    # Context building
    CONTEXT_MAX_CHARS: int = 2400
    CONTEXT_WINDOW_DAYS: int = 14

    # Streaming
    STREAM_CHUNK_SIZE: int = 36

    # Session / audit trail bounds
    SESSION_MAX_EVENTS: int = 200
    SESSION_MAX_COUNT: int = 1000
    ACTION_LOG_MAX_ENTRIES: int = 500

    # Parallel tool dispatch
    TOOL_BATCH_CONCURRENCY: int = 5

    @model_validator(mode="after")
    def _validate_limits(self) -> "Settings":
        if self.STREAM_CHUNK_SIZE < 1:
            raise ValueError("STREAM_CHUNK_SIZE must be a positive integer")
        if self.PENDING_ACTION_TTL_MINUTES < 1:
            raise ValueError("PENDING_ACTION_TTL_MINUTES must be at least 1 minute")
        return self

    class Config:
        env_file = str(SERVER_DIR / ".env")
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"


# Global settings instance
settings = Settings()
