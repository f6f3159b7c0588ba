"""Getting started with Python and InfluxDB 3.

Writes sample sensor data through the Point API, line protocol and a batch
write, then runs SQL, parametrized SQL, aggregation, multi-measurement and
InfluxQL queries against it.

Usage:
    py scripts/quickstart.py
    py scripts/quickstart.py --config application.properties
    py scripts/quickstart.py --log-level DEBUG --skip-health-check
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional

from influxdb3_quickstart import ConfigurationManager, InfluxDB3Client, InfluxDBService
from influxdb3_quickstart.config import InfluxDB3Config
from influxdb3_quickstart.exceptions import InfluxDBError

logger = logging.getLogger("quickstart")


def _open_client(config: InfluxDB3Config) -> InfluxDB3Client:
    return InfluxDB3Client.from_config(config)


def run(config_path: Optional[str] = None, health_check: bool = True) -> int:
    print("Getting Started with Python and InfluxDB 3")
    print("===============================================")

    manager = ConfigurationManager()
    try:
        config = manager.load_configuration(config_path)
        with _open_client(config) as client:
            if health_check:
                client.connect()
            print("Connected to InfluxDB 3 successfully!")
            print(f"Host: {manager.host}")
            print(f"Database: {manager.database}")

            service = InfluxDBService(
                client,
                ready_timeout=config.ready_timeout,
                ready_interval=config.ready_interval,
            )
            service.write_sample_data()
            service.query_sample_data()

            print("Tutorial completed successfully!")
    except InfluxDBError as exc:
        logger.debug("Tutorial failed", exc_info=True)
        print(f"Tutorial failed: {exc}", file=sys.stderr)
        return 1
    finally:
        manager.reset_configuration()
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Write and query sample data in InfluxDB 3")
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Properties file with INFLUXDB_HOST, INFLUXDB_DATABASE and INFLUXDB_TOKEN "
        "(default: environment and .env)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )
    parser.add_argument(
        "--skip-health-check",
        action="store_true",
        help="Do not call the /health endpoint before writing",
    )
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return run(args.config, health_check=not args.skip_health_check)


if __name__ == "__main__":
    raise SystemExit(main())
