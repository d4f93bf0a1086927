"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Remote store
    store_backend: str = "sql"  # sql | postgrest | memory
    database_url: str = "sqlite+aiosqlite:///./coop_notify.db"
    postgrest_url: str = "http://localhost:54321/rest/v1"
    postgrest_api_key: str = ""
    due_date_function: str = "get_due_date_notifications"

    # Service
    service_name: str = "coop-notify"
    log_level: str = "INFO"

    # HTTP Client
    http_timeout_seconds: float = 5.0
    connectivity_timeout_seconds: float = 10.0

    # Installment reminders
    reminder_lookahead_days: int = 3
    reminder_lookback_days: int = 3

    # Fetch cache
    cache_ttl_seconds: float = 300.0
    notification_page_size: int = 50


settings = Settings()
