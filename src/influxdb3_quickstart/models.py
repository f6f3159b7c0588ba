"""Data models for influxdb3_quickstart."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Dict, Optional

from influxdb_client_3 import Point

from .line_protocol import FieldValue, build_point


@dataclass(frozen=True)
class SensorReading:
    """A single measurement with its tags, fields and timestamp."""

    measurement: str
    fields: Dict[str, FieldValue]
    tags: Dict[str, str] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_point(self) -> Point:
        return build_point(self.measurement, self.fields, tags=self.tags, timestamp=self.timestamp)

    def to_line_protocol(self) -> str:
        return self.to_point().to_line_protocol()


@dataclass(frozen=True)
class WriteResult:
    """Result of a write operation."""

    success: bool
    message: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
