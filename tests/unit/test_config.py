"""Unit tests for configuration and settings."""
from hostel.config import Settings, get_settings, reset_settings_cache


class TestSettings:
    """Test configuration management."""

    def test_get_settings_returns_same_instance(self):
        """Test that get_settings returns cached instance."""
        assert get_settings() is get_settings()

    def test_reset_settings_cache(self):
        """Test that cache can be reset."""
        settings1 = get_settings()
        reset_settings_cache()
        settings2 = get_settings()

        assert settings1 is not settings2

    def test_database_url_from_environment(self):
        """Test the test suite points at the SQLite file."""
        settings = get_settings()

        assert settings.database_url.startswith("sqlite")

    def test_rate_limiting_disabled_for_tests(self):
        assert get_settings().rate_limiting_enabled is False

    def test_isolation_level_read_from_environment(self, monkeypatch):
        monkeypatch.setenv("DATABASE_ISOLATION_LEVEL", "REPEATABLE READ")

        assert Settings().database_isolation_level == "REPEATABLE READ"

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("DATABASE_ISOLATION_LEVEL", raising=False)
        settings = Settings()

        assert settings.database_isolation_level is None
        assert settings.jwt_algorithm == "HS256"
        assert settings.access_token_expire_minutes > 0
        assert settings.guests_service_port == 8001
        assert settings.reservations_service_port == 8002
        assert isinstance(settings.cors_origins, list)
