"""
Tests for application settings.
"""

from syncora.config import Settings


class TestSettings:
    def test_no_signing_secret(self, monkeypatch):
        monkeypatch.setenv("SECRET_KEY", "leftover-from-old-deploy")

        config = Settings(_env_file=None)

        assert "secret_key" not in Settings.model_fields
        assert not hasattr(config, "secret_key")

    def test_cookie_secure_follows_environment(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "production")

        assert Settings(_env_file=None).cookie_secure is True

    def test_cookie_secure_override(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.setenv("SESSION_COOKIE_SECURE", "false")

        assert Settings(_env_file=None).cookie_secure is False
