"""
Storefront Analytics
Centralized Configuration Management

Pydantic settings with environment variable support for the database,
the analytics engine, logging and the HTTP layer.
"""

from functools import lru_cache
from typing import Optional, List
from pydantic import Field, field_validator, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Order/product/user store configuration"""

    model_config = SettingsConfigDict(env_prefix="POSTGRES_")

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    db: str = Field(default="storefront", description="Database name")
    user: str = Field(default="storefront", description="Database user")
    password: SecretStr = Field(default="secure_password", description="Database password")
    echo: bool = Field(default=False, description="Echo SQL queries")
    url: Optional[str] = Field(default=None, alias="DATABASE_URL", description="Async database URL (overrides host/port)")

    @property
    def async_url(self) -> str:
        """Async database URL - uses DATABASE_URL if set, otherwise asyncpg from host/port"""
        if self.url:
            return self.url
        return f"postgresql+asyncpg://{self.user}:{self.password.get_secret_value()}@{self.host}:{self.port}/{self.db}"


class AnalyticsSettings(BaseSettings):
    """Metrics engine defaults and limits"""

    model_config = SettingsConfigDict(env_prefix="ANALYTICS_")

    # Result cache
    cache_ttl_seconds: int = Field(default=300, description="Result cache TTL in seconds")
    cache_max_entries: Optional[int] = Field(default=1024, description="LRU bound on cached results (None = unbounded)")

    # Default lookback windows when `from` is omitted
    default_window_days: int = Field(default=30, description="Default window for KPI, trend and ranking views")
    cohort_window_days: int = Field(default=180, description="Default window for cohort analysis")
    segments_window_days: int = Field(default=365, description="Default window for RFM segmentation")

    # Inventory risk
    critical_stock_threshold: int = Field(default=5, description="Stock at or below this is Critical")
    safety_days: int = Field(default=14, description="Days of cover at or below this is Low Stock")
    critical_cover_days: float = Field(default=7.0, description="Days of cover at or below this is Critical")

    # Rankings and lists
    top_products_limit: int = Field(default=50, description="Default number of ranked products")
    max_products_limit: int = Field(default=500, description="Largest accepted product ranking limit")
    customer_list_cap: int = Field(default=100, description="Customers returned by segmentation")
    retention_months: int = Field(default=12, description="Retention offsets tracked per cohort")

    # Without session tracking the conversion rate is a configured constant
    conversion_rate: float = Field(default=2.5, description="Reported storefront conversion rate")


class SecuritySettings(BaseSettings):
    """HTTP security configuration"""

    model_config = SettingsConfigDict(env_prefix="")

    cors_origins: List[str] = Field(
        default=["http://localhost:3000"],
        description="Allowed CORS origins"
    )


class MonitoringSettings(BaseSettings):
    """Logging configuration"""

    model_config = SettingsConfigDict(env_prefix="")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL", description="Logging level")
    log_format: str = Field(default="json", alias="LOG_FORMAT", description="Log format: json or text")


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
    )

    # Application
    app_name: str = Field(default="storefront-analytics", alias="APP_NAME", description="Application name")
    app_env: str = Field(default="development", alias="APP_ENV", description="Environment")
    debug: bool = Field(default=False, alias="DEBUG", description="Debug mode")

    # API Server
    api_host: str = Field(default="0.0.0.0", alias="API_HOST", description="API host")
    api_port: int = Field(default=8000, alias="API_PORT", description="API port")

    # Version
    version: str = Field(default="1.0.0", description="Application version")

    # Subsystem configurations
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    analytics: AnalyticsSettings = Field(default_factory=AnalyticsSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment value"""
        allowed = ["development", "staging", "production", "testing"]
        if v.lower() not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v.lower()

    @property
    def is_development(self) -> bool:
        """Check if running in development"""
        return self.app_env == "development"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to ensure settings are only loaded once.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
