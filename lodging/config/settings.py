"""
Environment configuration for the lodging reservation engine.
Uses Pydantic's settings management to handle environment variables
with proper type validation and default values.
"""

from datetime import time
from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

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
    )

    # Application configuration
    APP_NAME: str = Field(default="Lodging Reservation Engine", alias="PROJECT_NAME")
    API_VERSION: str = Field(default="v1", alias="PROJECT_VERSION")
    API_V1_STR: str = "/api/v1"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    TIMEZONE: str = "Asia/Jakarta"

    # Server configuration
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    CORS_ORIGINS: List[str] = Field(default=["*"], alias="BACKEND_CORS_ORIGINS")

    # Database configuration - support both individual fields and DATABASE_URL
    DATABASE_URL: Optional[str] = None
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_USER: str = "postgres"
    DB_PASSWORD: str = "postgres"
    DB_NAME: str = "lodging"
    DB_POOL_SIZE: int = 20
    DB_POOL_OVERFLOW: int = 10
    DB_ECHO: bool = False
    DB_CONNECT_ARGS: Dict[str, Any] = {}

    # Stay defaults
    DEFAULT_CHECK_IN_TIME: time = time(14, 0)
    DEFAULT_CHECK_OUT_TIME: time = time(12, 0)
    BOOKING_ADVANCE_DAYS: int = 365

    # Pricing
    CURRENCY: str = "IDR"
    CURRENCY_QUANTUM: Decimal = Decimal("1")

    # Allocation
    ALLOCATION_MAX_RETRIES: int = 3

    # Payment gateway
    PAYMENT_GATEWAY_URL: Optional[str] = None
    PAYMENT_GATEWAY_API_KEY: Optional[str] = None
    PAYMENT_CALLBACK_SECRET: Optional[str] = None
    PAYMENT_EXPIRY_MINUTES: int = 60

    # Notifications
    NOTIFICATION_WEBHOOK_URL: Optional[str] = None
    EXTERNAL_TIMEOUT_SECONDS: float = 10.0

    # Monitoring and logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    LOG_JSON: bool = False
    LOG_TO_FILE: bool = True

    @field_validator('CORS_ORIGINS', mode='before')
    @classmethod
    def parse_cors_origins(cls, v: Union[str, List[str]]) -> List[str]:
        """Parse CORS_ORIGINS from string to list"""
        if isinstance(v, str):
            # Handle JSON string format from .env
            if v.startswith('[') and v.endswith(']'):
                import json
                try:
                    return json.loads(v)
                except json.JSONDecodeError:
                    pass
            return [origin.strip() for origin in v.split(",")]
        return v

    @field_validator('ALLOCATION_MAX_RETRIES')
    @classmethod
    def validate_retries(cls, v: int) -> int:
        if v < 1:
            raise ValueError("ALLOCATION_MAX_RETRIES must be at least 1")
        return v

    def get_database_url(self) -> str:
        """Construct database URL from components or use provided URL"""
        if self.DATABASE_URL:
            return self.DATABASE_URL

        # Construct from individual components
        return f"postgresql://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    def is_sqlite(self) -> bool:
        return self.get_database_url().startswith("sqlite")

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
