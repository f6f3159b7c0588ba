"""SQL and InfluxQL query builders for the sample queries."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional


def build_recent_query(measurement: str, limit: int = 5) -> str:
    return f"SELECT time, sensor_id, location, value FROM {measurement} ORDER BY time DESC LIMIT {limit}"


def build_parametrized_query(measurement: str, tag: str = "location") -> str:
    return f"SELECT sensor_id, value FROM {measurement} WHERE {tag} = ${tag}"


def build_aggregation_query(measurement: str, group_by: str = "location") -> str:
    return (
        f"SELECT {group_by}, AVG(value) as avg_temp, COUNT(*) as count "
        f"FROM {measurement} GROUP BY {group_by} ORDER BY avg_temp DESC"
    )


def build_union_query(measurements: List[str], limit: int = 10) -> str:
    if not measurements:
        raise ValueError("measurements must contain at least one measurement")
    selects = [
        f"SELECT '{m}' as type, sensor_id, location, value FROM {m}" for m in measurements
    ]
    return " UNION ALL ".join(selects) + f" ORDER BY sensor_id LIMIT {limit}"


def build_influxql_aggregate_query(function: str, field: str, measurement: str) -> str:
    """InfluxQL aggregate, e.g. ``SELECT MEAN(value) FROM temperature``."""
    return f"SELECT {function.upper()}({field}) FROM {measurement}"


def build_count_query(measurement: str, since: Optional[datetime] = None) -> str:
    query = f"SELECT COUNT(*) AS count FROM {measurement}"
    if since is not None:
        query += f" WHERE time >= '{fmt_time(since)}'"
    return query


def fmt_time(value: datetime) -> str:
    if value.tzinfo is None:
        return value.isoformat() + "Z"
    return value.isoformat()
