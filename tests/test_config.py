from src.config import Settings


def test_defaults(monkeypatch):
    monkeypatch.delenv("BUMP_CRON", raising=False)
    settings = Settings(_env_file=None)
    assert settings.bump_cron == "0 * * * *"
    assert settings.bump_default_remaining == 5
    assert settings.bump_default_interval_hours == 24
    assert settings.bump_max_remaining == 1000
    assert settings.bump_max_interval_hours == 8760
    assert settings.bump_promote_on_schedule is True
    assert settings.is_production is False


def test_sync_database_url_strips_async_driver():
    settings = Settings(_env_file=None, database_url="sqlite+aiosqlite:///./data/test.db")
    assert settings.sync_database_url == "sqlite:///./data/test.db"


def test_env_override(monkeypatch):
    monkeypatch.setenv("ENVIRONMENT", "production")
    monkeypatch.setenv("BUMP_DEFAULT_INTERVAL_HOURS", "12")
    settings = Settings(_env_file=None)
    assert settings.is_production is True
    assert settings.bump_default_interval_hours == 12
