"""Configuration management with pydantic-settings.

Provides type-safe configuration with environment variable validation.
Environment reads happen here only; services receive an explicit
``ReorderDefaults`` built at boot.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable validation."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Database ===
    database_url: str = Field(
        "sqlite:///./reorder_hub.db",
        description="Database URL (SQLite for local runs, Postgres in production)",
    )

    # === Reorder defaults (used when merchant settings are absent) ===
    default_supply_days: int = Field(45, ge=1, le=365, description="Target supply days")
    reorder_safety_days: int = Field(7, ge=0, le=365, description="Safety stock buffer in days")
    reorder_priority_urgent_days: int = Field(0, description="On-hand at/below this is URGENT")
    reorder_priority_high_days: int = Field(7, description="Days of stock below this is HIGH")
    reorder_priority_medium_days: int = Field(14, description="Days of stock below this is MEDIUM")
    reorder_priority_low_days: int = Field(30, description="Days of stock below this is LOW")

    # === Images ===
    image_s3_bucket: str = Field("items-images-production", description="Fallback image bucket")
    image_s3_region: str = Field("us-west-2", description="Fallback image bucket region")

    # === Application settings ===
    app_version: str = Field("0.4.0", description="Reported in app_info metric")
    environment: str = Field("production", description="Reported in app_info metric")
    log_level: str = Field("INFO", description="Root log level")
    log_file: str | None = Field(None, description="Optional JSON log file path")


@dataclass(frozen=True)
class ReorderDefaults:
    """Process-level fallbacks for merchants without their own settings."""

    default_supply_days: int = 45
    reorder_safety_days: int = 7
    priority_urgent_days: int = 0
    priority_high_days: int = 7
    priority_medium_days: int = 14
    priority_low_days: int = 30

    @classmethod
    def from_settings(cls, settings: Settings) -> ReorderDefaults:
        return cls(
            default_supply_days=settings.default_supply_days,
            reorder_safety_days=settings.reorder_safety_days,
            priority_urgent_days=settings.reorder_priority_urgent_days,
            priority_high_days=settings.reorder_priority_high_days,
            priority_medium_days=settings.reorder_priority_medium_days,
            priority_low_days=settings.reorder_priority_low_days,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Raises:
        RuntimeError: If environment variables fail validation.

    """
    try:
        return Settings()
    except ValidationError as e:
        bad_fields = [str(error["loc"][0]).upper() for error in e.errors()]
        error_msg = (
            f"Configuration error: invalid environment variables: "
            f"{', '.join(bad_fields)}\n"
            f"Please fix them in .env file or the process environment.\n"
            f"See .env.example for reference."
        )
        raise RuntimeError(error_msg) from e


@lru_cache
def get_reorder_defaults() -> ReorderDefaults:
    """Reorder fallbacks derived once from settings."""
    return ReorderDefaults.from_settings(get_settings())


__all__ = ["Settings", "ReorderDefaults", "get_settings", "get_reorder_defaults"]
