from decimal import Decimal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str = Field(alias="DATABASE_URL")

    # Frontend URL allowed by CORS (storefront / admin console)
    frontend_url: str | None = Field(default=None, alias="FRONTEND_URL")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Reservation policy
    reservation_deposit_rate: Decimal = Field(
        default=Decimal("0.3"), ge=0, le=1, alias="RESERVATION_DEPOSIT_RATE"
    )
    reservation_max_duration_days: int = Field(
        default=365, gt=0, alias="RESERVATION_MAX_DURATION_DAYS"
    )
    reservation_lock_timeout_seconds: float = Field(
        default=10.0, gt=0, alias="RESERVATION_LOCK_TIMEOUT_SECONDS"
    )

    @field_validator("frontend_url", mode="before")
    @classmethod
    def empty_str_to_none(cls, v: str | None) -> str | None:
        """Convert empty strings to None for optional string fields."""
        if v == "":
            return None
        return v

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper()

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()
