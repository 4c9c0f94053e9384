"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = "sqlite:///./ledger_insights.db"

    # Service
    service_name: str = "ledger-insights"
    log_level: str = "INFO"

    # Settings cache
    settings_cache_ttl_seconds: float = 300.0  # 5 minutes

    # Reports
    trend_default_months: int = 6
    trend_max_months: int = 24
    score_history_limit: int = 12


settings = Settings()
