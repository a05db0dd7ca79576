"""
PIVTOOLS Site Configuration Tests

Example usage:
    pytest tests/test_config.py -v
"""

from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from pydantic import ValidationError

from app import create_app
from core.config import BASE_DIR, SiteSettings, _env_flag, normalize_environment

ENV_VARS = ("ENVIRONMENT", "LOG_LEVEL", "LOG_FORMAT", "SITE_URL", "FORCE_HTTPS", "CONTENT_DIR", "SECURITY_CONTACT")


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.mark.parametrize("value,expected", [
    (None, "production"),
    ("", "production"),
    ("production", "production"),
    ("PROD", "production"),
    ("development", "development"),
    (" dev ", "development"),
    ("local", "development"),
    ("test", "development"),
    ("staging", "production"),
])
def test_normalize_environment(value, expected):
    assert normalize_environment(value) == expected


class TestFromEnv:

    def test_defaults(self, clean_env):
        settings = SiteSettings.from_env()

        assert settings.environment == "production"
        assert settings.is_production
        assert settings.force_https is True
        assert settings.log_format == "json"
        assert settings.content_dir == BASE_DIR / "content"

    def test_overrides(self, clean_env, tmp_path):
        clean_env.setenv("ENVIRONMENT", "dev")
        clean_env.setenv("LOG_LEVEL", "debug")
        clean_env.setenv("LOG_FORMAT", "TEXT")
        clean_env.setenv("SITE_URL", "https://example.org/")
        clean_env.setenv("CONTENT_DIR", str(tmp_path))

        settings = SiteSettings.from_env()

        assert settings.environment == "development"
        assert not settings.is_production
        assert settings.log_level == "DEBUG"
        assert settings.log_format == "text"
        assert settings.base_url == "https://example.org"
        assert settings.content_dir == Path(tmp_path)

    def test_invalid_log_format_falls_back(self, clean_env):
        clean_env.setenv("LOG_FORMAT", "xml")

        assert SiteSettings.from_env().log_format == "json"

    @pytest.mark.parametrize("value,expected", [
        ("1", True),
        ("true", True),
        ("YES", True),
        ("0", False),
        ("false", False),
        ("off", False),
    ])
    def test_force_https_flag(self, clean_env, value, expected):
        clean_env.setenv("FORCE_HTTPS", value)

        assert _env_flag("FORCE_HTTPS", not expected) is expected
        assert SiteSettings.from_env().force_https is expected

    def test_unset_flag_uses_default(self, clean_env):
        assert _env_flag("FORCE_HTTPS", False) is False


class TestSiteSettings:

    def test_frozen(self):
        settings = SiteSettings()

        with pytest.raises(ValidationError):
            settings.environment = "development"

    def test_rejects_unknown_environment(self):
        with pytest.raises(ValidationError):
            SiteSettings(environment="staging")

    def test_base_url(self):
        assert SiteSettings(site_url="https://pivtools.example/").base_url == "https://pivtools.example"


class TestHttpsRedirect:

    def test_production_redirects_to_https(self):
        settings = SiteSettings(environment="production", force_https=True, content_dir=BASE_DIR / "content")
        client = TestClient(create_app(settings), follow_redirects=False)

        response = client.get("/manual")

        assert response.status_code == 307
        assert response.headers["location"].startswith("https://")

    def test_development_never_redirects(self):
        settings = SiteSettings(environment="development", force_https=True, content_dir=BASE_DIR / "content")
        client = TestClient(create_app(settings), follow_redirects=False)

        assert client.get("/manual").status_code == 200
