"""Sample write and query sequence run against an InfluxDB 3 database."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any, Callable, Dict, List, Optional
import logging
import time

from .client import InfluxDB3Client, Row
from .line_protocol import build_line_protocol
from .models import SensorReading
from .query_builder import (
    build_aggregation_query,
    build_influxql_aggregate_query,
    build_parametrized_query,
    build_recent_query,
    build_union_query,
)

logger = logging.getLogger(__name__)

# Rows written by the line protocol path carry server time, so the
# readiness window reaches back past the client clock.
VISIBILITY_WINDOW = timedelta(minutes=1)

FEATURES = [
    "Point API writing",
    "Line Protocol writing",
    "Batch writing",
    "SQL queries",
    "Parametrized queries",
    "Aggregation operations",
    "Multi-measurement queries",
    "InfluxQL queries",
]


class InfluxDBService:
    """Writes the sample sensor data and runs the sample queries."""

    def __init__(
        self,
        client: InfluxDB3Client,
        ready_timeout: float = 10.0,
        ready_interval: float = 0.5,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.client = client
        self.ready_timeout = ready_timeout
        self.ready_interval = ready_interval
        self.clock = clock

    # -------------------- Write phase --------------------

    def write_sample_data(self) -> int:
        """Write six points via the three write paths; failures propagate."""
        print("\nWriting Sample Data")
        print("======================")

        started_at = datetime.now(UTC)
        expected: Dict[str, int] = {}
        for written in (
            self.write_using_point_api(),
            self.write_using_line_protocol(),
            self.write_batch_data(),
        ):
            for reading in written:
                expected[reading.measurement] = expected.get(reading.measurement, 0) + 1

        self.wait_until_visible(expected, since=started_at - VISIBILITY_WINDOW)
        total = sum(expected.values())
        print(f"Total data points written: {total}")
        return total

    def write_using_point_api(self) -> List[SensorReading]:
        print("1. Writing data using Point API...")
        now = datetime.now(UTC)
        readings = [
            SensorReading("temperature", {"value": 23.2}, {"sensor_id": "TH01", "location": "warehouse"}, now),
            SensorReading("humidity", {"value": 65.1}, {"sensor_id": "HH01", "location": "warehouse"}, now),
        ]
        for reading in readings:
            self.client.write_point(reading.to_point())
        print("Point API data written: temperature=23.2°C, humidity=65.1%")
        return readings

    def write_using_line_protocol(self) -> List[SensorReading]:
        print("2. Writing data using Line Protocol...")
        readings = [
            SensorReading("temperature", {"value": 21.8}, {"sensor_id": "TH02", "location": "office"}),
            SensorReading("humidity", {"value": 58.3}, {"sensor_id": "HH02", "location": "office"}),
        ]
        for reading in readings:
            # no timestamp: the server stamps the record on arrival
            self.client.write_record(build_line_protocol(reading.measurement, reading.fields, tags=reading.tags))
        print("Line Protocol data written: office sensors")
        return readings

    def write_batch_data(self) -> List[SensorReading]:
        print("3. Writing batch data...")
        now = datetime.now(UTC)
        readings = [
            SensorReading("pressure", {"value": 1013.25}, {"sensor_id": "PR01", "location": "warehouse"}, now),
            SensorReading("pressure", {"value": 1012.75}, {"sensor_id": "PR02", "location": "office"}, now),
        ]
        self.client.write_points([r.to_point() for r in readings])
        print("Batch data written: pressure readings")
        return readings

    def wait_until_visible(self, expected: Dict[str, int], since: Optional[datetime] = None) -> bool:
        """Wait for every measurement within one shared ``ready_timeout``."""
        deadline = self.clock() + self.ready_timeout
        visible = True
        for measurement, minimum in expected.items():
            ok = self.client.wait_for_rows(
                measurement,
                minimum=minimum,
                since=since,
                timeout=max(0.0, deadline - self.clock()),
                interval=self.ready_interval,
            )
            visible = visible and ok
        if not visible:
            print("Warning: not all written data is visible yet; query results may be incomplete")
        return visible

    # -------------------- Query phase --------------------

    def query_sample_data(self) -> None:
        """Run each sample query; a failing query does not stop the next one."""
        print("\nQuerying Sample Data")
        print("=======================")

        self._run("SQL Query", self.query_recent_temperatures)
        self._run("Parametrized SQL Query", self.query_with_parameters)
        self._run("Aggregation Query", self.query_aggregations)
        self._run("Multi-measurement Query", self.query_multiple_measurements)
        print("\n5. InfluxQL-Specific Queries:")
        self._run("InfluxQL MEAN()", self.query_influxql_mean)
        self._run("InfluxQL MAX()", self.query_influxql_max)
        self.print_summary()

    def _run(self, label: str, query: Callable[[], None]) -> bool:
        try:
            query()
        except Exception as exc:
            logger.warning("%s failed: %s", label, exc, exc_info=True)
            print(f"{label} failed: {exc}")
            return False
        return True

    def query_recent_temperatures(self) -> None:
        print("1. SQL Query - Recent temperature readings:")
        self._print_rows(
            build_recent_query("temperature", limit=5),
            lambda row: f"{_fmt_time(row[0])} | {row[1]} | {row[2]} | {_fmt_num(row[3])}°C",
        )

    def query_with_parameters(self) -> None:
        print("\n2. Parametrized SQL Query - Warehouse readings:")
        self._print_rows(
            build_parametrized_query("temperature", tag="location"),
            lambda row: f"{row[0]}: {_fmt_num(row[1])}°C",
            params={"location": "warehouse"},
        )

    def query_aggregations(self) -> None:
        print("\n3. Aggregation Query - Average values by location:")
        self._print_rows(
            build_aggregation_query("temperature"),
            lambda row: f"{row[0]}: avg={_fmt_num(row[1])}°C, count={row[2]}",
        )

    def query_multiple_measurements(self) -> None:
        print("\n4. Multi-measurement Query - All sensor readings:")
        self._print_rows(
            build_union_query(["temperature", "humidity"], limit=10),
            lambda row: f"{row[0]} | {row[1]} | {row[2]} | {_fmt_num(row[3])}",
        )

    def query_influxql_mean(self) -> None:
        # InfluxQL rows lead with the measurement and time columns
        print("5a. InfluxQL MEAN() function:")
        self._print_rows(
            build_influxql_aggregate_query("mean", "value", "temperature"),
            lambda row: f"Mean temperature: {_fmt_num(row[-1], 2)}°C",
            language="influxql",
        )

    def query_influxql_max(self) -> None:
        print("5b. InfluxQL MAX() function:")
        self._print_rows(
            build_influxql_aggregate_query("max", "value", "pressure"),
            lambda row: f"Max pressure: {_fmt_num(row[-1], 2)} hPa",
            language="influxql",
        )

    def _print_rows(
        self,
        query: str,
        fmt: Callable[[Row], str],
        params: Optional[Dict[str, Any]] = None,
        language: str = "sql",
    ) -> int:
        count = 0
        with self.client.query_rows(query, params=params, language=language) as rows:
            for row in rows:
                print(fmt(row))
                count += 1
        return count

    def print_summary(self) -> None:
        print("\nKey Features Demonstrated:")
        for feature in FEATURES:
            print(feature)


def _fmt_time(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, datetime):
        return value.strftime("%H:%M:%S")
    return str(value)[11:19]


def _fmt_num(value: Any, digits: int = 1) -> str:
    if value is None:
        return "null"
    return f"{float(value):.{digits}f}"
