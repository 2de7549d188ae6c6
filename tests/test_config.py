"""Tests for settings loading from the environment and app.yaml."""

from datetime import timedelta

import pytest

from wildtrip.config import DraftsConfig, get_config_path, get_settings, interpolate_env_vars


@pytest.fixture
def fresh_settings(monkeypatch, temp_app_yaml):
    """Point settings at a temporary app.yaml and clear the cache around the test."""
    monkeypatch.setenv("SECRET_KEY", "test-secret")

    def _load(config: dict):
        path = temp_app_yaml(config)
        monkeypatch.setenv("WILDTRIP_CONFIG", str(path))
        get_settings.cache_clear()
        return get_settings()

    yield _load
    get_settings.cache_clear()


class TestInterpolation:
    def test_replaces_variables_recursively(self, monkeypatch):
        monkeypatch.setenv("DB_HOST", "db.internal")

        result = interpolate_env_vars({"db": {"url": "postgresql+asyncpg://$DB_HOST/wildtrip"}, "list": ["$DB_HOST"]})

        assert result == {"db": {"url": "postgresql+asyncpg://db.internal/wildtrip"}, "list": ["db.internal"]}

    def test_missing_variable_raises(self, monkeypatch):
        monkeypatch.delenv("WILDTRIP_MISSING", raising=False)

        with pytest.raises(ValueError, match="WILDTRIP_MISSING"):
            interpolate_env_vars("$WILDTRIP_MISSING")


class TestSettings:
    def test_defaults(self, fresh_settings):
        settings = fresh_settings({})

        assert settings.secret_key == "test-secret"
        assert settings.drafts.lock_duration_minutes == 10
        assert settings.drafts.max_page_size == 100
        assert settings.drafts.require_version is False
        assert settings.identity.enabled is False

    def test_yaml_sections_override(self, fresh_settings, monkeypatch):
        monkeypatch.setenv("IDENTITY_SECRET", "sk_from_env")

        settings = fresh_settings({
            "debug": True,
            "db": {"url": "sqlite+aiosqlite:///./other.db"},
            "drafts": {"lock_duration_minutes": 15, "require_version": True},
            "identity": {"secret_key": "$IDENTITY_SECRET"},
        })

        assert settings.debug is True
        assert settings.db.url == "sqlite+aiosqlite:///./other.db"
        assert settings.drafts.lock_duration == timedelta(minutes=15)
        assert settings.drafts.require_version is True
        assert settings.identity.secret_key == "sk_from_env"
        assert settings.identity.enabled is True

    def test_lock_duration_property(self):
        assert DraftsConfig(lock_duration_minutes=3).lock_duration == timedelta(minutes=3)


class TestConfigPath:
    """Which YAML file settings are read from."""

    def test_explicit_file_wins(self, monkeypatch, tmp_path):
        monkeypatch.setenv("WILDTRIP_CONFIG", str(tmp_path / "custom.yaml"))
        monkeypatch.setenv("WILDTRIP_ENV", "staging")

        assert get_config_path() == tmp_path / "custom.yaml"

    def test_environment_selects_file(self, monkeypatch):
        monkeypatch.delenv("WILDTRIP_CONFIG", raising=False)
        monkeypatch.setenv("WILDTRIP_ENV", "testing")

        assert get_config_path().name == "app.testing.yaml"

    def test_production_fallback(self, monkeypatch):
        monkeypatch.delenv("WILDTRIP_CONFIG", raising=False)
        monkeypatch.delenv("WILDTRIP_ENV", raising=False)

        assert get_config_path().name == "app.yaml"
