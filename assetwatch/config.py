"""
AssetWatch settings, read from ``ASSETWATCH_*`` environment variables or a
``.env`` file through pydantic-settings.

Example:
    ASSETWATCH_DB_PATH=/var/lib/assetwatch/inventory.duckdb
    ASSETWATCH_CORS_ORIGINS=https://ops.example.com,http://localhost:5173
    ASSETWATCH_AUDIT_MAX_LOGS=5000
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Process-wide configuration; one instance per process via get_settings()."""

    model_config = SettingsConfigDict(
        env_prefix="ASSETWATCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Storage
    db_path: str = Field(
        default="./data/assetwatch.duckdb",
        description="DuckDB file holding inventory and audit log",
    )

    # HTTP server
    api_host: str = "0.0.0.0"
    api_port: int = Field(default=8000, ge=1, le=65535)
    api_reload: bool = Field(default=True, description="uvicorn autoreload")
    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        description="Comma-separated dashboard origins",
    )

    # Logging
    log_level: str = "info"
    log_format: Literal["json", "console"] = "json"

    # Audit log
    audit_max_logs: int = Field(
        default=1000, ge=1, description="Newest entries kept; older ones are pruned on append"
    )
    audit_summary_days: int = Field(default=7, ge=1, le=365)

    # Analysis defaults
    health_trend_hours: int = Field(default=24, ge=1, le=168)
    alert_log_window_hours: int = Field(
        default=168, ge=1, description="How far back status history is read to date alerts"
    )
    spof_threshold: int = Field(
        default=2, ge=1, description="Fan-out at which a component counts as a single point of failure"
    )

    # Modes
    dev_mode: bool = True
    testing: bool = Field(default=False, description="Enables destructive test helpers")

    @field_validator("cors_origins")
    @classmethod
    def split_cors_origins(cls, v: str) -> list[str]:
        """Split the comma-separated origin list, dropping blanks."""
        return [origin.strip() for origin in v.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
