"""
Site Configuration Module

Centralized environment-driven settings for the PIVTOOLS website.
All values come from environment variables with conservative defaults:
an unset or unknown ENVIRONMENT is treated as production, which selects
the stricter security header policy.

Example usage:
    from core.config import get_settings

    settings = get_settings()
    if settings.is_production:
        # HSTS and upgrade-insecure-requests are emitted
        pass
"""

import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent.parent

# Defaults
ENVIRONMENT_DEFAULT = "production"
LOG_LEVEL_DEFAULT = "INFO"
LOG_FORMAT_DEFAULT = "json"
SITE_URL_DEFAULT = "https://pivtools.soton.ac.uk"
FORCE_HTTPS_DEFAULT = True
SECURITY_CONTACT_DEFAULT = "mailto:M.T.Taylor@soton.ac.uk"

PRODUCTION_NAMES = ("production", "prod")
DEVELOPMENT_NAMES = ("development", "dev", "local", "test")


def _env_flag(name: str, default: bool) -> bool:
    """Read a boolean environment flag ("1", "true", "yes" are truthy)."""
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ["1", "true", "yes"]


def normalize_environment(value: Optional[str]) -> str:
    """
    Map an ENVIRONMENT value onto "production" or "development".

    Unknown values fall back to production with a warning.
    """
    name = (value or ENVIRONMENT_DEFAULT).strip().lower()
    if name in PRODUCTION_NAMES:
        return "production"
    if name in DEVELOPMENT_NAMES:
        return "development"
    logger.warning(f"Unknown ENVIRONMENT '{value}', falling back to production")
    return "production"


class SiteSettings(BaseModel):
    """Immutable runtime settings for the site."""
    model_config = ConfigDict(frozen=True)

    environment: str = Field("production", pattern=r"^(production|development)$")
    log_level: str = LOG_LEVEL_DEFAULT
    log_format: str = Field(LOG_FORMAT_DEFAULT, pattern=r"^(json|text)$")
    site_url: str = SITE_URL_DEFAULT
    force_https: bool = FORCE_HTTPS_DEFAULT
    content_dir: Path = BASE_DIR / "content"
    security_contact: str = SECURITY_CONTACT_DEFAULT

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def base_url(self) -> str:
        """Site URL without a trailing slash."""
        return self.site_url.rstrip("/")

    @classmethod
    def from_env(cls) -> "SiteSettings":
        """
        Build settings from the process environment.

        Returns:
            SiteSettings populated from ENVIRONMENT, LOG_LEVEL, LOG_FORMAT,
            SITE_URL, FORCE_HTTPS, CONTENT_DIR and SECURITY_CONTACT

        Example:
            >>> os.environ["ENVIRONMENT"] = "dev"
            >>> SiteSettings.from_env().environment
            'development'
        """
        log_format = os.environ.get("LOG_FORMAT", LOG_FORMAT_DEFAULT).strip().lower()
        if log_format not in ("json", "text"):
            log_format = LOG_FORMAT_DEFAULT

        return cls(
            environment=normalize_environment(os.environ.get("ENVIRONMENT")),
            log_level=os.environ.get("LOG_LEVEL", LOG_LEVEL_DEFAULT).upper(),
            log_format=log_format,
            site_url=os.environ.get("SITE_URL", SITE_URL_DEFAULT),
            force_https=_env_flag("FORCE_HTTPS", FORCE_HTTPS_DEFAULT),
            content_dir=Path(os.environ.get("CONTENT_DIR", str(BASE_DIR / "content"))),
            security_contact=os.environ.get("SECURITY_CONTACT", SECURITY_CONTACT_DEFAULT),
        )


def get_settings() -> SiteSettings:
    """Return settings for the current environment."""
    return SiteSettings.from_env()


def settings_from_request(request) -> SiteSettings:
    """Settings attached to the running app by create_app(), else from the environment."""
    settings = getattr(request.app.state, "settings", None)
    return settings if settings is not None else get_settings()
