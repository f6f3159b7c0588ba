"""Point and line protocol construction on top of the SDK's Point."""

from __future__ import annotations

from datetime import datetime
from typing import Mapping, Optional, Union

from influxdb_client_3 import Point

FieldValue = Union[bool, int, float, str]


def build_point(
    measurement: str,
    fields: Mapping[str, FieldValue],
    tags: Optional[Mapping[str, str]] = None,
    timestamp: Union[datetime, int, None] = None,
) -> Point:
    if not measurement:
        raise ValueError("measurement must not be empty")
    if not fields:
        raise ValueError("fields must contain at least one field")
    point = Point(measurement)
    for key, value in (tags or {}).items():
        point = point.tag(key, value)
    for key, value in fields.items():
        point = point.field(key, value)
    if timestamp is not None:
        point = point.time(timestamp)
    return point


def build_line_protocol(
    measurement: str,
    fields: Mapping[str, FieldValue],
    tags: Optional[Mapping[str, str]] = None,
    timestamp: Union[datetime, int, None] = None,
) -> str:
    """Render ``measurement,tag=val,... field=val,...[ timestamp]``; tags are sorted by key."""
    return build_point(measurement, fields, tags=tags, timestamp=timestamp).to_line_protocol()
