from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Environment
    environment: str = "development"  # "development" or "production"

    # Database
    database_url: str = "sqlite+aiosqlite:///./data/auto_connect.db"

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    debug: bool = False

    # Scheduler
    scheduler_enabled: bool = True
    bump_cron: str = "0 * * * *"  # every hour, on the hour
    bump_claim_lease_seconds: int = 600

    # Bump defaults
    bump_default_remaining: int = 5
    bump_default_interval_hours: int = 24
    bump_max_remaining: int = 1000
    bump_max_interval_hours: int = 8760  # one year
    # Deferred activations mark the ad as promoted before the first bump fires
    bump_promote_on_schedule: bool = True

    # CORS (comma-separated origins, empty means localhost only)
    cors_origins: str = ""

    # Admin
    admin_api_key: str = ""

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def sync_database_url(self) -> str:
        return self.database_url.replace("+aiosqlite", "")


@lru_cache
def get_settings() -> Settings:
    return Settings()
