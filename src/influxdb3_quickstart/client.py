"""InfluxDB 3 client wrapper (SQL and InfluxQL over Arrow Flight)."""

from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Tuple
import logging
import time

from influxdb_client_3 import InfluxDBClient3
import pandas as pd
import requests

from .config import InfluxDB3Config
from .exceptions import InfluxDBConnectionError, InfluxDBQueryError, InfluxDBWriteError
from .models import WriteResult
from .query_builder import build_count_query

logger = logging.getLogger(__name__)

Row = Tuple[Any, ...]


class InfluxDB3Client:
    """Single handle to one InfluxDB 3 database."""

    def __init__(
        self,
        host: str,
        token: str,
        database: str,
        client: Optional[object] = None,
        timeout: float = 10.0,
    ) -> None:
        if client is None:
            self._client = InfluxDBClient3(host=host, token=token, database=database)
        else:
            self._client = client
        self._host = host.rstrip("/")
        self._token = token
        self._database = database
        self._timeout = timeout
        self.connected = False
        self.closed = False

    @classmethod
    def from_config(cls, config: InfluxDB3Config, client: Optional[object] = None) -> "InfluxDB3Client":
        return cls(
            host=config.host,
            token=config.token.reveal(),
            database=config.database,
            client=client,
        )

    @property
    def host(self) -> str:
        return self._host

    @property
    def database(self) -> str:
        return self._database

    # -------------------- Connection management --------------------

    def connect(self) -> None:
        if not self.ping():
            self.connected = False
            raise InfluxDBConnectionError(f"Health check failed for {self._host}")
        self.connected = True

    def ping(self) -> bool:
        headers = {"Authorization": f"Bearer {self._token}"}
        try:
            response = requests.get(f"{self._host}/health", headers=headers, timeout=self._timeout)
        except requests.RequestException as exc:
            logger.debug("Health check for %s failed: %s", self._host, exc)
            return False
        if response.status_code != 200:
            logger.debug("Health check for %s returned %s", self._host, response.status_code)
            return False
        return True

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self.connected = False
        if hasattr(self._client, "close"):
            self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False

    # -------------------- Write methods --------------------

    def write_point(self, point: object) -> None:
        self._write(point)

    def write_record(self, record: str) -> None:
        self._write(record)

    def write_points(self, points: List[object], batch_size: Optional[int] = None) -> WriteResult:
        if batch_size is not None and batch_size <= 0:
            raise ValueError("batch_size must be greater than zero")
        if not points:
            raise ValueError("points must contain at least one point")
        chunks = _chunk_points(points, batch_size)
        for chunk in chunks:
            self._write(chunk)
        return WriteResult(
            success=True,
            details={"points": len(points), "batch_size": batch_size, "batches": len(chunks)},
        )

    def _write(self, record: object) -> None:
        try:
            self._client.write(record=record)
        except Exception as exc:
            raise InfluxDBWriteError(str(exc)) from exc

    # -------------------- Query methods --------------------

    @contextmanager
    def query_rows(
        self,
        query: str,
        params: Optional[Mapping[str, Any]] = None,
        language: str = "sql",
    ) -> Iterator[Iterator[Row]]:
        """Yield a lazy row iterator; the underlying reader is closed on exit."""
        reader = self._query(query, params, language, mode="reader")
        try:
            yield _iter_rows(reader)
        finally:
            close = getattr(reader, "close", None)
            if close is not None:
                close()

    def query_frame(
        self,
        query: str,
        params: Optional[Mapping[str, Any]] = None,
        language: str = "sql",
    ) -> pd.DataFrame:
        df = self._query(query, params, language, mode="pandas")
        if not isinstance(df, pd.DataFrame):
            return pd.DataFrame()
        return df

    def _query(
        self,
        query: str,
        params: Optional[Mapping[str, Any]],
        language: str,
        mode: str,
    ) -> Any:
        kwargs: Dict[str, Any] = {}
        if params:
            kwargs["query_parameters"] = dict(params)
        logger.debug("%s query: %s", language, query)
        try:
            return self._client.query(query=query, language=language, mode=mode, **kwargs)
        except Exception as exc:
            raise InfluxDBQueryError(str(exc)) from exc

    # -------------------- Readiness --------------------

    def wait_for_rows(
        self,
        measurement: str,
        minimum: int = 1,
        since: Optional[datetime] = None,
        timeout: float = 10.0,
        interval: float = 0.5,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> bool:
        """Poll until ``measurement`` holds at least ``minimum`` rows or ``timeout`` passes."""
        query = build_count_query(measurement, since=since)
        deadline = clock() + timeout
        while True:
            count = self._count(query)
            if count >= minimum:
                logger.debug("%s visible with %d rows", measurement, count)
                return True
            if clock() >= deadline:
                logger.warning(
                    "%s not visible after %.1fs (%d of %d rows)", measurement, timeout, count, minimum
                )
                return False
            sleep(interval)

    def _count(self, query: str) -> int:
        try:
            df = self.query_frame(query)
        except InfluxDBQueryError as exc:
            # table does not exist until the first write lands
            logger.debug("Count query failed: %s", exc)
            return 0
        if df.empty:
            return 0
        return int(df.iloc[0, 0])

    def __repr__(self) -> str:
        status = "connected" if self.connected else "disconnected"
        return f"InfluxDB3Client({self._host}, {self._database}, {status})"


def _iter_rows(reader: Any) -> Iterator[Row]:
    try:
        for batch in reader:
            columns = [column.to_pylist() for column in batch.columns]
            yield from zip(*columns)
    except Exception as exc:
        raise InfluxDBQueryError(str(exc)) from exc


def _chunk_points(points: List[object], batch_size: Optional[int]) -> List[List[object]]:
    if not batch_size:
        return [points]
    return [points[i : i + batch_size] for i in range(0, len(points), batch_size)]
