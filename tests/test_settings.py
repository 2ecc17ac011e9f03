"""Tests for settings and small formatting helpers."""

from datetime import datetime, timedelta, timezone

from shortlinks.api.schemas import iso_z
from shortlinks.core.setting import Settings
from shortlinks.services.registry import utc_now


class TestSettings:

    def test_defaults(self, monkeypatch):
        for name in ["BASE_URL", "RATE_LIMIT_ENABLED", "LOG_LEVEL"]:
            monkeypatch.delenv(name, raising=False)
        config = Settings(_env_file=None)
        assert config.DEFAULT_VALIDITY_MINUTES == 30
        assert config.MAX_VALIDITY_MINUTES == 1440
        assert config.SHORT_CODE_LENGTH == 6
        assert config.MAX_GENERATION_ATTEMPTS == 10
        assert config.SWEEP_INTERVAL_SECONDS == 3600
        assert config.RATE_LIMIT_ENABLED is True

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("SWEEP_INTERVAL_SECONDS", "60")
        monkeypatch.setenv("RATE_LIMIT_ENABLED", "false")
        config = Settings(_env_file=None)
        assert config.SWEEP_INTERVAL_SECONDS == 60
        assert config.RATE_LIMIT_ENABLED is False

    def test_declared_settings(self):
        assert set(Settings.model_fields) == {
            "LOG_LEVEL",
            "BASE_URL",
            "DEFAULT_VALIDITY_MINUTES",
            "MAX_VALIDITY_MINUTES",
            "SHORT_CODE_LENGTH",
            "MAX_GENERATION_ATTEMPTS",
            "SWEEP_INTERVAL_SECONDS",
            "RATE_LIMIT_ENABLED",
        }


class TestTimeHelpers:

    def test_utc_now_is_aware(self):
        now = utc_now()
        assert now.tzinfo is not None
        assert now.utcoffset() == timedelta(0)

    def test_iso_z(self):
        assert iso_z(datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)) == "2026-01-01T12:00:00Z"
        plus_two = timezone(timedelta(hours=2))
        assert iso_z(datetime(2026, 1, 1, 14, 0, tzinfo=plus_two)) == "2026-01-01T12:00:00Z"
