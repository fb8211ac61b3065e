"""
Application Configuration
Environment variables and settings management
"""

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator, model_validator
from typing import List

DEVELOPMENT_JWT_SECRET = "timetracker-development-secret-key-change-me-in-production"


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    # Application
    ENVIRONMENT: str = Field(default="development", description="Application environment")
    DEBUG: bool = Field(default=False, description="Debug mode")
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")

    # Database
    DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///./timetracker.db",
        description="Database URL (postgresql:// URLs are switched to asyncpg)"
    )
    DB_POOL_SIZE: int = Field(default=10, description="Database connection pool size")
    DB_MAX_OVERFLOW: int = Field(default=20, description="Database max overflow connections")
    DB_POOL_TIMEOUT: int = Field(default=30, description="Database pool timeout in seconds")
    DB_POOL_RECYCLE: int = Field(default=3600, description="Database pool recycle time in seconds")

    # Tokens. Role and permissions are never carried in a token.
    JWT_SECRET_KEY: str = Field(default=DEVELOPMENT_JWT_SECRET, description="JWT signing secret")
    JWT_ALGORITHM: str = Field(default="HS256", description="JWT algorithm")
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=30, gt=0)
    JWT_REFRESH_TOKEN_EXPIRE_DAYS: int = Field(default=7, gt=0)
    AUTH_ISSUER: str = Field(default="timetracker-local", description="Issuer claim for local tokens")

    # Account created on startup when no user has that email
    BOOTSTRAP_ADMIN_EMAIL: str = Field(default="admin@timetracker.local")
    BOOTSTRAP_ADMIN_PASSWORD: str = Field(default="TimeTracker")
    BOOTSTRAP_ADMIN_FIRST_NAME: str = Field(default="System")
    BOOTSTRAP_ADMIN_LAST_NAME: str = Field(default="Administrator")

    # HTTP
    ALLOWED_HOSTS: List[str] = Field(default=["*"], description="Trusted hosts in production")
    CORS_ORIGINS: List[str] = Field(default=["http://localhost:5173"], description="CORS allowed origins")

    # Time tracking
    APP_TIMEZONE: str = Field(
        default="America/Los_Angeles",
        description="Zone that decides 'today' for project activity and dashboard windows"
    )
    ROLE_TESTING_ENABLED: bool = Field(default=True, description="Allow admins to act as another role")

    @field_validator("CORS_ORIGINS", "ALLOWED_HOSTS", mode="before")
    @classmethod
    def parse_csv_list(cls, v):
        """Accept a comma separated string as well as a list"""
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v if isinstance(v, list) else []

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v):
        allowed = ["development", "testing", "staging", "production"]
        if v not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed:
            raise ValueError(f"Log level must be one of: {allowed}")
        return v.upper()

    @field_validator("APP_TIMEZONE")
    @classmethod
    def validate_timezone(cls, v):
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown timezone: {v}")
        return v

    @model_validator(mode="after")
    def check_production_secrets(self):
        if self.ENVIRONMENT == "production":
            if self.JWT_SECRET_KEY == DEVELOPMENT_JWT_SECRET or len(self.JWT_SECRET_KEY) < 32:
                raise ValueError("JWT_SECRET_KEY must be set to a secret of at least 32 characters in production")
        return self

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    model_config = {
        "env_file": ".env",
        "case_sensitive": True,
        "extra": "ignore",
    }


settings = Settings()

# Pool options are ignored by the SQLite engine
DATABASE_CONFIG = {
    "pool_size": settings.DB_POOL_SIZE,
    "max_overflow": settings.DB_MAX_OVERFLOW,
    "pool_timeout": settings.DB_POOL_TIMEOUT,
    "pool_recycle": settings.DB_POOL_RECYCLE,
    "pool_pre_ping": True,
    "echo": settings.ENVIRONMENT == "development" and settings.DEBUG,
}
