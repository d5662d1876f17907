"""
E-Commerce Reporting Engine
Centralized Configuration Management

This module provides configuration management using Pydantic settings with
environment variable support, validation, and type safety.
"""

from datetime import date
from decimal import Decimal
from functools import lru_cache
from typing import Optional
from pydantic import AliasChoices, Field, field_validator, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Source Database Configuration"""

    model_config = SettingsConfigDict(env_prefix="POSTGRES_")

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    db: str = Field(
        default="ecommerce",
        validation_alias=AliasChoices("POSTGRES_DATABASE", "database"),
        description="Database name",
    )
    user: str = Field(default="ecommerce", description="Database user")
    password: SecretStr = Field(default="secure_password", description="Database password")
    echo: bool = Field(default=False, description="Echo SQL queries")
    url: Optional[str] = Field(default=None, alias="DATABASE_URL", description="Database URL (overrides host/port)")

    @property
    def async_url(self) -> str:
        """Async database URL - uses DATABASE_URL if set, otherwise builds one for asyncpg"""
        if self.url:
            return self.url
        return f"postgresql+asyncpg://{self.user}:{self.password.get_secret_value()}@{self.host}:{self.port}/{self.db}"


class DataSourceSettings(BaseSettings):
    """Snapshot File Source Configuration"""

    model_config = SettingsConfigDict(env_prefix="DATA_")

    snapshot_path: str = Field(default="./data/snapshot", description="Directory holding one file per relation")
    file_format: str = Field(default="csv", description="Snapshot file format: csv, parquet or jsonl")


class ReportSettings(BaseSettings):
    """Report Parameters"""

    model_config = SettingsConfigDict(env_prefix="REPORT_")

    vip_threshold: Decimal = Field(default=Decimal("15000"), description="Monetary value above which a customer is VIP")
    loyal_threshold: Decimal = Field(default=Decimal("8000"), description="Lowest monetary value of a Loyal customer")
    top_products_limit: int = Field(default=10, ge=1, description="Rows in the top products report")
    top_customers_limit: int = Field(default=5, ge=1, description="Rows in the top customers report")
    reference_date: Optional[date] = Field(default=None, description="Date recency is measured from (default: today)")
    max_workers: int = Field(default=1, ge=1, description="Threads used when computing all reports")

    @field_validator("loyal_threshold")
    @classmethod
    def validate_thresholds(cls, v: Decimal, info) -> Decimal:
        """Loyal threshold must not exceed the VIP threshold"""
        vip = info.data.get("vip_threshold")
        if vip is not None and v > vip:
            raise ValueError("loyal_threshold must be <= vip_threshold")
        return v


class MonitoringSettings(BaseSettings):
    """Logging Configuration"""

    model_config = SettingsConfigDict(env_prefix="", populate_by_name=True)

    log_level: str = Field(default="INFO", alias="LOG_LEVEL", description="Logging level")
    log_format: str = Field(default="json", description="Log format: json or text")


class DataQualitySettings(BaseSettings):
    """Data Quality Configuration"""

    model_config = SettingsConfigDict(env_prefix="", populate_by_name=True)

    enable_data_quality_checks: bool = Field(
        default=True,
        alias="ENABLE_DATA_QUALITY_CHECKS",
        description="Run quality validators when a snapshot is loaded"
    )


class Settings(BaseSettings):
    """
    Main Application Settings

    Aggregates all configuration sections and provides a single entry point
    for accessing application configuration.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Application
    app_name: str = Field(default="ecommerce-reports", alias="APP_NAME", description="Application name")
    app_env: str = Field(default="development", alias="APP_ENV", description="Environment")
    debug: bool = Field(default=False, alias="DEBUG", description="Debug mode")

    # Version
    version: str = Field(default="1.0.0", description="Application version")

    # Subsystem configurations
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    data_source: DataSourceSettings = Field(default_factory=DataSourceSettings)
    reports: ReportSettings = Field(default_factory=ReportSettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)
    data_quality: DataQualitySettings = Field(default_factory=DataQualitySettings)

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment value"""
        allowed = ["development", "staging", "production", "testing"]
        if v.lower() not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v.lower()

    @property
    def is_production(self) -> bool:
        """Check if running in production"""
        return self.app_env == "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to ensure settings are only loaded once.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
