import os
import re
from datetime import timedelta
from functools import lru_cache
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env early so $VAR references in app.yaml resolve
_env_file = Path(__file__).parent.parent / ".env"
load_dotenv(_env_file)

ENV_VAR_PATTERN = re.compile(r"\$([A-Z_][A-Z0-9_]*)")


def interpolate_env_vars(value):
    """Recursively replace $VAR_NAME with os.environ values."""
    if isinstance(value, str):

        def replace(match):
            var = match.group(1)
            val = os.environ.get(var)
            if val is None:
                raise ValueError(f"Environment variable ${var} not set")
            return val

        return ENV_VAR_PATTERN.sub(replace, value)
    elif isinstance(value, dict):
        return {k: interpolate_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [interpolate_env_vars(item) for item in value]
    return value


def get_config_path() -> Path:
    """Location of the YAML config.

    WILDTRIP_CONFIG names the file outright. Otherwise WILDTRIP_ENV selects
    ``app.{env}.yaml``, with ``production`` (the default) using ``app.yaml``.
    """
    override = os.environ.get("WILDTRIP_CONFIG")
    if override:
        return Path(override)
    env = os.environ.get("WILDTRIP_ENV", "production").strip().lower()
    if not env or env == "production":
        return Path.cwd() / "app.yaml"
    return Path.cwd() / f"app.{env}.yaml"


def load_app_config() -> dict:
    """Load and parse app.yaml with environment variable interpolation."""
    config_path = get_config_path()

    if not config_path.exists():
        raise FileNotFoundError(f"app.yaml not found at {config_path}")

    with open(config_path, "r") as f:
        config = yaml.safe_load(f) or {}

    return interpolate_env_vars(config)


class DatabaseConfig(BaseModel):
    """Database connection configuration."""

    url: str = "sqlite+aiosqlite:///./wildtrip.db"
    pool_size: int = 5
    pool_overflow: int = 10
    pool_timeout: int = 30
    pool_pre_ping: bool = True
    echo: bool = False


class SessionConfig(BaseModel):
    """Editor session cookie configuration."""

    max_age: int = 86400  # 1 day
    cookie_domain: str | None = None
    cookie_name: str = "session"


class DraftsConfig(BaseModel):
    """Editing workflow configuration."""

    lock_duration_minutes: int = 10
    max_page_size: int = 100
    # Reject draft/publish calls that do not carry the record version
    require_version: bool = False

    @property
    def lock_duration(self) -> timedelta:
        return timedelta(minutes=self.lock_duration_minutes)


class IdentityConfig(BaseModel):
    """External identity provider (user metadata sync)."""

    api_url: str = "https://api.clerk.com/v1"
    secret_key: str = ""
    timeout: float = 10.0

    @property
    def enabled(self) -> bool:
        return bool(self.secret_key)


class LogfireConfig(BaseModel):
    """Optional Pydantic Logfire tracing."""

    enabled: bool = False
    service_name: str = "wildtrip"
    environment: str | None = None
    console: bool = False


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # Application
    debug: bool = False
    secret_key: str

    db: DatabaseConfig = DatabaseConfig()
    session: SessionConfig = SessionConfig()
    drafts: DraftsConfig = DraftsConfig()
    identity: IdentityConfig = IdentityConfig()
    logfire: LogfireConfig = LogfireConfig()


_YAML_SECTIONS = {
    "db": DatabaseConfig,
    "session": SessionConfig,
    "drafts": DraftsConfig,
    "identity": IdentityConfig,
    "logfire": LogfireConfig,
}


@lru_cache
def get_settings() -> Settings:
    """Load settings from .env and app.yaml."""
    base_settings = Settings()

    try:
        app_config = load_app_config()
    except FileNotFoundError:
        return base_settings

    updates = {
        name: model(**app_config[name])
        for name, model in _YAML_SECTIONS.items()
        if name in app_config
    }
    if "debug" in app_config:
        updates["debug"] = bool(app_config["debug"])

    if updates:
        return base_settings.model_copy(update=updates)

    return base_settings
