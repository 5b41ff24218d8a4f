"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = "sqlite:///./agency_tracker.db"

    # Service
    service_name: str = "agency-tracker"
    log_level: str = "INFO"

    # Agency calculation
    agency_lookahead_days: int = 45
    agency_credit_buffer_percent: float = 0.05  # Fraction of total credit limit held back
    recurrence_max_steps: int = 500

    # Category budgets
    budget_default_warning_threshold: float = 0.85


settings = Settings()
