from __future__ import annotations

import importlib.util
from pathlib import Path

from influxdb3_quickstart.exceptions import InfluxDBConnectionError, InfluxDBWriteError

PROPERTIES = "INFLUXDB_HOST=http://localhost:8181\nINFLUXDB_DATABASE=demo\nINFLUXDB_TOKEN=abc123\n"


def _load_script(module_name: str, relative_path: str):
    root = Path(__file__).resolve().parents[2]
    script_path = root / relative_path
    spec = importlib.util.spec_from_file_location(module_name, script_path)
    module = importlib.util.module_from_spec(spec)
    assert spec is not None and spec.loader is not None
    spec.loader.exec_module(module)
    return module


class FakeClient:
    def __init__(self, connect_error=None) -> None:
        self.closed = 0
        self.connected = False
        self.connect_error = connect_error

    def connect(self):
        if self.connect_error:
            raise self.connect_error
        self.connected = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.closed += 1
        return False


class FakeService:
    calls: list = []
    write_error = None

    def __init__(self, client, ready_timeout, ready_interval) -> None:
        self.client = client
        FakeService.calls.append(("init", ready_timeout, ready_interval))

    def write_sample_data(self):
        if FakeService.write_error:
            raise FakeService.write_error
        FakeService.calls.append("write")

    def query_sample_data(self):
        FakeService.calls.append("query")


def _properties(tmp_path, text=PROPERTIES) -> str:
    path = tmp_path / "application.properties"
    path.write_text(text, encoding="utf-8")
    return str(path)


def test_main_runs_write_then_query_and_closes(monkeypatch, tmp_path, capsys) -> None:
    qs = _load_script("quickstart_for_test_run", "scripts/quickstart.py")
    fake = FakeClient()
    FakeService.calls = []
    FakeService.write_error = None
    monkeypatch.setattr(qs, "_open_client", lambda config: fake)
    monkeypatch.setattr(qs, "InfluxDBService", FakeService)

    rc = qs.main(["--config", _properties(tmp_path)])

    out = capsys.readouterr().out
    assert rc == 0
    assert fake.connected is True
    assert fake.closed == 1
    assert FakeService.calls == [("init", 10.0, 0.5), "write", "query"]
    assert "Host: http://localhost:8181" in out
    assert "Database: demo" in out
    assert "Tutorial completed successfully!" in out


def test_main_fails_on_missing_token(monkeypatch, tmp_path, capsys) -> None:
    qs = _load_script("quickstart_for_test_config", "scripts/quickstart.py")
    opened = []
    monkeypatch.setattr(qs, "_open_client", lambda config: opened.append(config))

    rc = qs.main(["--config", _properties(tmp_path, "INFLUXDB_HOST=http://h\nINFLUXDB_DATABASE=demo\n")])

    assert rc == 1
    assert opened == []
    assert "INFLUXDB_TOKEN" in capsys.readouterr().err


def test_write_failure_aborts_and_closes_client(monkeypatch, tmp_path, capsys) -> None:
    qs = _load_script("quickstart_for_test_write", "scripts/quickstart.py")
    fake = FakeClient()
    FakeService.calls = []
    FakeService.write_error = InfluxDBWriteError("unauthorized")
    monkeypatch.setattr(qs, "_open_client", lambda config: fake)
    monkeypatch.setattr(qs, "InfluxDBService", FakeService)

    try:
        rc = qs.main(["--config", _properties(tmp_path)])
    finally:
        FakeService.write_error = None

    assert rc == 1
    assert fake.closed == 1
    assert "query" not in FakeService.calls
    assert "Tutorial failed: unauthorized" in capsys.readouterr().err


def test_health_check_failure_and_skip(monkeypatch, tmp_path) -> None:
    qs = _load_script("quickstart_for_test_health", "scripts/quickstart.py")
    fake = FakeClient(connect_error=InfluxDBConnectionError("Health check failed"))
    FakeService.calls = []
    monkeypatch.setattr(qs, "_open_client", lambda config: fake)
    monkeypatch.setattr(qs, "InfluxDBService", FakeService)
    path = _properties(tmp_path)

    assert qs.main(["--config", path]) == 1
    assert FakeService.calls == []

    assert qs.main(["--config", path, "--skip-health-check"]) == 0
    assert fake.closed == 2


def test_main_fails_on_unreadable_properties(monkeypatch, tmp_path, capsys) -> None:
    qs = _load_script("quickstart_for_test_encoding", "scripts/quickstart.py")
    opened = []
    monkeypatch.setattr(qs, "_open_client", lambda config: opened.append(config))
    path = tmp_path / "application.properties"
    path.write_bytes(PROPERTIES.replace("demo", "d\xe9mo").encode("latin-1"))

    rc = qs.main(["--config", str(path)])

    assert rc == 1
    assert opened == []
    assert "Tutorial failed: Unable to read" in capsys.readouterr().err
