"""Configuration loading and validation."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

import yaml

CONFIG_ENV_VAR = "RSPAMD_CLIENT_CONFIG"
DEFAULT_CONFIG_PATH = Path("~/.config/rspamd-client/config.yaml")
DEFAULT_LOG_LEVEL = "warning"
_SUPPORTED_SCHEMES = ("http", "https")


class ConfigError(ValueError):
    """Raised when configuration is invalid or missing."""


@dataclass(frozen=True)
class Credentials:
    """HTTP basic-auth credentials sent with every request."""

    username: str
    password: str = field(repr=False)

    def __post_init__(self) -> None:
        if not self.username:
            raise ConfigError("Credentials require a non-empty username.")


@dataclass(frozen=True)
class ClientConfig:
    """Connection settings for one daemon, fixed for a client's lifetime."""

    url: str
    credentials: Credentials | None = None
    timeout: float | None = None

    def __post_init__(self) -> None:
        parts = urlsplit(self.url or "")
        if parts.scheme not in _SUPPORTED_SCHEMES or not parts.netloc:
            raise ConfigError(f"Daemon URL must be an http(s) URL with a host: {self.url!r}")
        if self.timeout is not None and self.timeout <= 0:
            raise ConfigError("timeout must be a positive number of seconds.")

    @property
    def username(self) -> str | None:
        return self.credentials.username if self.credentials else None


@dataclass(frozen=True)
class LoggingConfig:
    """Logging-related configuration."""

    level: str = DEFAULT_LOG_LEVEL
    file: Path | None = None


@dataclass(frozen=True)
class Config:
    """Fully parsed configuration."""

    client: ClientConfig
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(path: Path | str | None = None) -> Config:
    """Load and validate configuration from YAML."""

    config_path = resolve_config_path(path)
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    with config_path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}

    if not isinstance(raw, dict):
        raise ConfigError("Configuration root must be a mapping.")

    return _parse_config(raw)


def resolve_config_path(explicit: Path | str | None) -> Path:
    """Return the config path from the argument, the environment, or the default."""

    if explicit:
        return Path(explicit).expanduser()
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_CONFIG_PATH.expanduser()


def _parse_config(raw: dict[str, Any]) -> Config:
    url = raw.get("url")
    if not url:
        raise ConfigError("url is required.")
    if not isinstance(url, str):
        raise ConfigError("url must be a string.")
    return Config(
        client=ClientConfig(
            url=url,
            credentials=_parse_credentials(raw.get("username"), raw.get("password")),
            timeout=_parse_timeout(raw.get("timeout")),
        ),
        logging=_parse_logging(raw.get("logging")),
    )


def _parse_credentials(username: Any, password: Any) -> Credentials | None:
    if username is None and password is None:
        return None
    if username is None or password is None:
        raise ConfigError("username and password must be configured together.")
    if not isinstance(username, str) or not isinstance(password, str):
        raise ConfigError("username and password must be strings.")
    return Credentials(username=username, password=password)


def _parse_timeout(value: Any) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError("timeout must be a number of seconds.")
    return float(value)


def _parse_logging(value: Any) -> LoggingConfig:
    if value is None:
        return LoggingConfig()
    if not isinstance(value, dict):
        raise ConfigError("logging must be a mapping.")
    level = str(value.get("level", DEFAULT_LOG_LEVEL)).lower()
    raw_file = value.get("file")
    if raw_file is not None and not isinstance(raw_file, str):
        raise ConfigError("logging.file must be a string path.")
    log_file = Path(raw_file).expanduser() if raw_file else None
    return LoggingConfig(level=level, file=log_file)


__all__ = [
    "CONFIG_ENV_VAR",
    "ClientConfig",
    "Config",
    "ConfigError",
    "Credentials",
    "LoggingConfig",
    "load_config",
    "resolve_config_path",
]
