"""
Environment configuration for the complaint desk.
Uses Pydantic's settings management to handle environment variables
with proper type validation and default values.
"""

from typing import List, Optional, Union
from pathlib import Path
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from dotenv import load_dotenv

# Load environment variables from .env file if it exists
env_path = Path('.') / '.env'
load_dotenv(dotenv_path=env_path)


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
        populate_by_name=True,
    )

    # Application configuration
    APP_NAME: str = Field(default="Complaint Desk", alias="PROJECT_NAME")
    API_VERSION: str = Field(default="v1", alias="PROJECT_VERSION")
    API_V1_STR: str = "/api/v1"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"

    # Server configuration
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    CORS_ORIGINS: List[str] = Field(default=["*"], alias="BACKEND_CORS_ORIGINS")

    # Backend selection: "memory" keeps everything in-process,
    # "database" goes through the async SQLAlchemy adapter.
    BACKEND: str = "memory"
    DATABASE_URL: Optional[str] = None
    DATABASE_ECHO: bool = False

    # Monitoring and logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    LOG_TO_FILE: bool = True

    # Business rules
    CHAT_MESSAGE_MAX_LENGTH: int = 1000
    COMMENT_MAX_LENGTH: int = 2000
    COMPLAINT_TITLE_MIN_LENGTH: int = 5
    COMPLAINT_TITLE_MAX_LENGTH: int = 200
    COMPLAINT_DESCRIPTION_MIN_LENGTH: int = 20
    COMPLAINT_DESCRIPTION_MAX_LENGTH: int = 2000
    UNKNOWN_DISPLAY_NAME: str = "Unknown"

    # Validators
    @field_validator('CORS_ORIGINS', mode='before')
    @classmethod
    def parse_cors_origins(cls, v: Union[str, List[str]]) -> List[str]:
        """Parse CORS_ORIGINS from string to list"""
        if isinstance(v, str):
            # Handle JSON string format from .env
            if v.startswith('[') and v.endswith(']'):
                try:
                    import json
                    return json.loads(v)
                except json.JSONDecodeError:
                    pass
            return [origin.strip() for origin in v.split(",")]
        return v

    @field_validator('BACKEND')
    @classmethod
    def validate_backend(cls, v: str) -> str:
        """Only the two shipped adapters are accepted"""
        v = v.strip().lower()
        if v not in ("memory", "database"):
            raise ValueError("BACKEND must be 'memory' or 'database'")
        return v

    def get_database_url(self) -> str:
        """Use provided URL or fall back to a local SQLite file"""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return "sqlite+aiosqlite:///./complaint_desk.sqlite3"

    def is_production(self) -> bool:
        """Check if running in production environment"""
        return self.ENVIRONMENT == "production"

    def is_development(self) -> bool:
        """Check if running in development environment"""
        return self.ENVIRONMENT == "development"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
