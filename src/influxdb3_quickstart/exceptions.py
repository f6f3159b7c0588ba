"""Exceptions for influxdb3_quickstart."""

from __future__ import annotations

from typing import Optional


class InfluxDBError(Exception):
    """Base exception for influxdb3_quickstart."""


class ConfigurationError(InfluxDBError):
    """A required setting is missing, blank or unreadable."""

    def __init__(self, message: str, key: Optional[str] = None) -> None:
        super().__init__(message)
        self.key = key


class InfluxDBConnectionError(InfluxDBError):
    """Connection to InfluxDB failed."""


class InfluxDBWriteError(InfluxDBError):
    """Write call failed."""


class InfluxDBQueryError(InfluxDBError):
    """Query execution failed."""
