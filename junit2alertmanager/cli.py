"""CLI entry point for sending JUnit failures to Alertmanager."""

import argparse
import asyncio
import json
import logging
import os
import sys
from collections.abc import Sequence
from typing import Any

from junit2alertmanager.alert_mapper import map_alerts
from junit2alertmanager.build_info import BuildInfo
from junit2alertmanager.config import (
    DEFAULT_JUNIT_FILE,
    AppConfig,
    ConfigurationError,
    build_config,
)
from junit2alertmanager.delivery import AlertmanagerClient, DeliveryError
from junit2alertmanager.duration import parse_duration
from junit2alertmanager.models.alert import Alert
from junit2alertmanager.report_loader import (
    ReportParseError,
    ReportReadError,
    load_test_suite,
)

TARGETS_ENV_VAR = "ALERT_MANAGER_HOST"
DEFAULT_EXPIRE_FLAG = "3m"

RUN_ERRORS = (ConfigurationError, ReportReadError, ReportParseError, DeliveryError)


def log_alerts_summary(log: logging.Logger, alerts: Sequence[Alert]) -> None:
    """Log one line per alert about to be sent."""
    if not alerts:
        log.info("No failed test cases, sending an empty alert list")
        return

    log.info("Alerts to send:")
    for alert in alerts:
        log.info("  %s: %s", alert.alert_name, alert.annotations["summary"])


def format_output(alerts: Sequence[Alert], target: str) -> dict[str, Any]:
    """Format the delivery result for JSON output."""
    return {
        "total": len(alerts),
        "target": target,
        "alerts": [alert.alert_name for alert in alerts],
    }


async def run(config: AppConfig, build_info: BuildInfo) -> int:
    """Parse the report, map failures to alerts and deliver them.

    Raises:
        ReportReadError: If the report cannot be read
        ReportParseError: If the report is malformed
        DeliveryError: If no target accepted the alerts

    """
    log = logging.getLogger("junit2alertmanager")
    log.info("Starting %s", build_info)

    log.info("Loading junit report: %s", config.junit_file)
    suite = await load_test_suite(config.junit_file)

    alerts = map_alerts(suite, config)
    log_alerts_summary(log, alerts)

    log.info("Sending alerts to %d target(s)...", len(config.targets))
    async with AlertmanagerClient.from_config(config, build_info) as client:
        target = await client.send_alerts(alerts)

    print(json.dumps(format_output(alerts, target), indent=2))
    return 0


def build_parser(build_info: BuildInfo) -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog=build_info.name,
        description="Send failed test cases of a junit xml file to Alertmanager",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {build_info.version}"
    )
    parser.add_argument(
        "-t",
        "--targets",
        "--target",
        dest="targets",
        default=os.environ.get(TARGETS_ENV_VAR),
        help=(
            "Comma-separated Alertmanager base URLs tried in order, "
            f"e.g. http://127.0.0.1:9093 (env: {TARGETS_ENV_VAR})"
        ),
    )
    parser.add_argument(
        "-f",
        "--junit",
        default=DEFAULT_JUNIT_FILE,
        help="Path to a junit xml file",
    )
    parser.add_argument(
        "-n",
        "--alert-name",
        default="",
        help="Prefix to the alertname label of each alert",
    )
    parser.add_argument(
        "-g",
        "--generator-url",
        default="",
        help="URL to set as generatorURL of each alert",
    )
    parser.add_argument(
        "-e",
        "--expire",
        type=parse_duration,
        default=DEFAULT_EXPIRE_FLAG,
        help="Alert lifetime, e.g. 90s or 1h30m (0 sets endsAt to the epoch)",
    )
    parser.add_argument(
        "-k",
        "--skip-insecure",
        action="store_true",
        help="Skip TLS certificate verification of the targets (not recommended)",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point."""
    build_info = BuildInfo.from_metadata()
    args = build_parser(build_info).parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    try:
        config = build_config(
            targets=args.targets,
            junit_file=args.junit,
            alert_name=args.alert_name,
            generator_url=args.generator_url,
            expire=args.expire,
            skip_insecure=args.skip_insecure,
        )
        exit_code = asyncio.run(run(config, build_info))
    except RUN_ERRORS as e:
        print(f"error: {e}", file=sys.stderr)
        exit_code = 1

    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
