"""Configuration loading for influxdb3_quickstart."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Union
import logging
import os

from dotenv import dotenv_values, load_dotenv

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

HOST_KEY = "INFLUXDB_HOST"
DATABASE_KEY = "INFLUXDB_DATABASE"
TOKEN_KEY = "INFLUXDB_TOKEN"
READY_TIMEOUT_KEY = "INFLUXDB_READY_TIMEOUT"
READY_INTERVAL_KEY = "INFLUXDB_READY_INTERVAL"

DEFAULT_READY_TIMEOUT = 10.0
DEFAULT_READY_INTERVAL = 0.5

ConfigSource = Union[Mapping[str, Optional[str]], str, Path, None]


def load_env() -> None:
    """Load environment variables from a .env file if present."""
    load_dotenv()


class SecretToken:
    """Owned secret buffer handed out only as copies."""

    def __init__(self, value: str) -> None:
        self._buffer = bytearray(value, "utf-8")

    def copy(self) -> bytearray:
        return bytearray(self._buffer)

    def reveal(self) -> str:
        return self._buffer.decode("utf-8")

    def clear(self) -> None:
        """Zero the buffer in place, then drop it."""
        for i in range(len(self._buffer)):
            self._buffer[i] = 0
        self._buffer = bytearray()

    def __len__(self) -> int:
        return len(self._buffer)

    def __repr__(self) -> str:
        return "SecretToken('***')"


@dataclass(frozen=True)
class InfluxDB3Config:
    host: str
    database: str
    token: SecretToken
    ready_timeout: float = DEFAULT_READY_TIMEOUT
    ready_interval: float = DEFAULT_READY_INTERVAL


def read_source(source: ConfigSource = None) -> Mapping[str, Optional[str]]:
    """Resolve a mapping, a properties file path or the environment into key/values."""
    if source is None:
        load_env()
        return dict(os.environ)
    if isinstance(source, (str, Path)):
        path = Path(source)
        if not path.is_file():
            raise ConfigurationError(f"Unable to find {path}")
        try:
            return dotenv_values(path)
        except (OSError, UnicodeDecodeError) as exc:
            raise ConfigurationError(f"Unable to read {path}: {exc}") from exc
    return source


def _require(values: Mapping[str, Optional[str]], key: str) -> str:
    value = values.get(key)
    if value is None or not str(value).strip():
        raise ConfigurationError(f"{key} is required", key=key)
    return str(value).strip()


def _get_float(values: Mapping[str, Optional[str]], key: str, default: float) -> float:
    value = values.get(key)
    if value is None or not str(value).strip():
        return default
    try:
        return float(value)
    except ValueError as exc:
        raise ConfigurationError(f"{key} must be a number, got {value!r}", key=key) from exc


def parse_config(values: Mapping[str, Optional[str]]) -> InfluxDB3Config:
    host = _require(values, HOST_KEY)
    database = _require(values, DATABASE_KEY)
    token = _require(values, TOKEN_KEY)
    return InfluxDB3Config(
        host=host,
        database=database,
        token=SecretToken(token),
        ready_timeout=_get_float(values, READY_TIMEOUT_KEY, DEFAULT_READY_TIMEOUT),
        ready_interval=_get_float(values, READY_INTERVAL_KEY, DEFAULT_READY_INTERVAL),
    )


class ConfigurationManager:
    """Holds the loaded connection settings until reset."""

    def __init__(self) -> None:
        self._config: Optional[InfluxDB3Config] = None

    def load_configuration(self, source: ConfigSource = None) -> InfluxDB3Config:
        """Load and validate settings; on failure nothing is kept."""
        try:
            config = parse_config(read_source(source))
        except ConfigurationError as exc:
            logger.error("Failed to load configuration: %s", exc)
            raise
        self.reset_configuration()
        self._config = config
        logger.info("Configuration loaded for database %s at %s", config.database, config.host)
        return config

    @property
    def host(self) -> Optional[str]:
        return self._config.host if self._config else None

    @property
    def database(self) -> Optional[str]:
        return self._config.database if self._config else None

    @property
    def token(self) -> Optional[bytearray]:
        return self._config.token.copy() if self._config else None

    def reset_configuration(self) -> None:
        if self._config is not None:
            self._config.token.clear()
        self._config = None
