from __future__ import annotations

from datetime import UTC, datetime

from influxdb3_quickstart.models import SensorReading

TS = datetime(2026, 1, 1, tzinfo=UTC)
TS_NS = "1767225600000000000"


def test_point_carries_measurement_tags_fields_and_time() -> None:
    reading = SensorReading(
        "temperature",
        {"value": 23.2},
        {"sensor_id": "TH01", "location": "warehouse"},
        TS,
    )

    lp = reading.to_point().to_line_protocol()

    assert lp.startswith("temperature,")
    assert "sensor_id=TH01" in lp
    assert "location=warehouse" in lp
    assert "value=23.2" in lp
    assert lp.endswith(TS_NS)


def test_point_with_multiple_fields_keeps_all() -> None:
    reading = SensorReading(
        "sensor_data",
        {"temperature": 23.5, "humidity": 65.5, "pressure": 1013.25},
        {"sensor_id": "MULTI01"},
        TS,
    )

    lp = reading.to_point().to_line_protocol()

    for part in ("temperature=23.5", "humidity=65.5", "pressure=1013.25"):
        assert part in lp


def test_point_without_tags() -> None:
    reading = SensorReading("simple_measurement", {"value": 100.5}, timestamp=TS)
    assert reading.to_point().to_line_protocol() == f"simple_measurement value=100.5 {TS_NS}"


def test_default_timestamp_is_now() -> None:
    before = datetime.now(UTC)
    reading = SensorReading("m", {"v": 1.0})
    assert reading.timestamp >= before


def test_to_line_protocol_matches_fields_and_tags() -> None:
    reading = SensorReading("pressure", {"value": 1012.75}, {"sensor_id": "PR02", "location": "office"}, TS)
    assert reading.to_line_protocol() == f"pressure,location=office,sensor_id=PR02 value=1012.75 {TS_NS}"
