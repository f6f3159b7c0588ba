"""influxdb3_quickstart package."""

from .client import InfluxDB3Client
from .config import ConfigurationManager, InfluxDB3Config, SecretToken, load_env
from .exceptions import (
    ConfigurationError,
    InfluxDBConnectionError,
    InfluxDBError,
    InfluxDBQueryError,
    InfluxDBWriteError,
)
from .line_protocol import build_line_protocol
from .models import SensorReading, WriteResult
from .service import InfluxDBService

__all__ = [
    "InfluxDB3Client",
    "ConfigurationManager",
    "InfluxDB3Config",
    "SecretToken",
    "load_env",
    "ConfigurationError",
    "InfluxDBConnectionError",
    "InfluxDBError",
    "InfluxDBQueryError",
    "InfluxDBWriteError",
    "build_line_protocol",
    "SensorReading",
    "WriteResult",
    "InfluxDBService",
]
