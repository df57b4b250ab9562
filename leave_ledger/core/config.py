"""
Configuration management for the Leave Ledger service
"""
from decimal import Decimal
from typing import Optional, List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    DATABASE_URL: str = Field(
        default="sqlite:///./leave_ledger.db",
        description="Database URL (PostgreSQL in production, SQLite locally)",
    )

    APP_ENV: str = Field(default="local", description="Application environment: local, staging, prod")
    LOG_LEVEL: str = Field(default="INFO", description="Logging level: DEBUG, INFO, WARNING, ERROR")

    # CORS settings
    ALLOWED_ORIGINS: str = Field(
        default="*",
        description="Comma-separated list of allowed CORS origins. Use '*' for local only."
    )

    # "Today" for accrual and ledger dates is taken in this zone
    TZ: str = Field(default="Africa/Johannesburg", description="Timezone used to resolve the current date")

    VERSION: Optional[str] = Field(default=None, description="Application version (git SHA or semver)")

    ANNUAL_LEAVE_DAYS: Decimal = Field(
        default=Decimal("18.00"),
        description="Nominal annual leave cap stamped on new balance rows",
    )
    LEAVE_DAY_COUNTING: str = Field(
        default="calendar",
        description="How days_requested is sized on new requests: 'calendar' (inclusive span) or 'working'",
    )
    HOLIDAY_CALENDAR_FILE: Optional[str] = Field(
        default=None,
        description="Optional JSON file with fixed/variable public holidays; built-in South African table when unset",
    )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True

    @field_validator("APP_ENV")
    @classmethod
    def validate_app_env(cls, v: str) -> str:
        """Validate APP_ENV"""
        allowed = ["local", "staging", "prod"]
        if v not in allowed:
            raise ValueError(f"APP_ENV must be one of {allowed}")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate LOG_LEVEL"""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed:
            raise ValueError(f"LOG_LEVEL must be one of {allowed}")
        return v.upper()

    @field_validator("LEAVE_DAY_COUNTING")
    @classmethod
    def validate_leave_day_counting(cls, v: str) -> str:
        allowed = ["calendar", "working"]
        if v.lower() not in allowed:
            raise ValueError(f"LEAVE_DAY_COUNTING must be one of {allowed}")
        return v.lower()

    @field_validator("ANNUAL_LEAVE_DAYS")
    @classmethod
    def validate_annual_leave_days(cls, v: Decimal) -> Decimal:
        if v <= 0:
            raise ValueError("ANNUAL_LEAVE_DAYS must be positive")
        return v

    def validate_production(self) -> None:
        """
        Validate settings for production environment

        Raises:
            ValueError: If production settings are invalid
        """
        if self.APP_ENV == "prod":
            if self.ALLOWED_ORIGINS == "*" or not self.ALLOWED_ORIGINS:
                raise ValueError(
                    "ALLOWED_ORIGINS must be explicitly set (not '*') in production environment"
                )
            if self.DATABASE_URL.startswith("sqlite"):
                raise ValueError("DATABASE_URL must not point at SQLite in production environment")

    def get_allowed_origins_list(self) -> List[str]:
        """
        Get list of allowed CORS origins

        Returns:
            List of allowed origins (or ['*'] for local)
        """
        if self.ALLOWED_ORIGINS == "*":
            return ["*"]
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]


# Create settings instance
settings = Settings()

# Validate production settings if in prod
if settings.APP_ENV == "prod":
    settings.validate_production()
