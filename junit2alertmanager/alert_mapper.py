"""Mapping of failed test cases to alerts."""

import logging
from collections.abc import Callable, Sequence
from datetime import datetime, timedelta, timezone

from junit2alertmanager.config import AppConfig
from junit2alertmanager.models.alert import Alert
from junit2alertmanager.models.report import TestCase, TestSuite

log = logging.getLogger(__name__)

# endsAt used when the configured expiration is zero
EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)

NO_FAILURE_DESCRIPTION = "no failure"


def utc_now() -> datetime:
    """Return the current time in UTC."""
    return datetime.now(timezone.utc)


def map_alerts(
    suite: TestSuite,
    config: AppConfig,
    *,
    now: Callable[[], datetime] = utc_now,
) -> Sequence[Alert]:
    """Build one alert per failed, non-skipped test case.

    Cases are visited in document order. The alert name suffix is the index of
    the case in the unfiltered sequence, so every alert can be traced back to
    its source case.

    Args:
        suite: Parsed test suite
        config: Run configuration (name prefix, generator URL, expiration)
        now: Clock called once per alert

    Returns:
        Alerts in document order, possibly empty

    """
    alerts: list[Alert] = []
    for index, test_case in enumerate(suite.test_cases):
        if test_case.skipped is not None:
            continue
        if test_case.failure_message is None:
            continue
        alerts.append(
            alert_from_test_case(test_case, config, f"-{index}", now=now)
        )

    log.info(
        "Mapped %d failed test case(s) out of %d to alerts",
        len(alerts),
        len(suite.test_cases),
    )
    return alerts


def alert_from_test_case(
    test_case: TestCase,
    config: AppConfig,
    suffix: str,
    *,
    now: Callable[[], datetime] = utc_now,
) -> Alert:
    """Build the alert for a single test case."""
    starts_at = now()
    ends_at = expiration_time(starts_at, config.expire)

    description = NO_FAILURE_DESCRIPTION
    if test_case.failure_message is not None:
        description = test_case.failure_message.message

    alert_name = generate_alert_name(config.alert_name, test_case, suffix)
    return Alert(
        starts_at=starts_at,
        ends_at=ends_at,
        labels={"alertname": alert_name},
        generator_url=config.generator_url,
        annotations={
            "summary": test_case.name,
            "description": description,
        },
    )


def expiration_time(starts_at: datetime, expire: timedelta) -> datetime:
    """Return endsAt for an alert starting at ``starts_at``.

    A zero expiration yields the Unix epoch rather than an open-ended alert.
    """
    if expire == timedelta(0):
        return EPOCH
    return starts_at + expire


def generate_alert_name(prefix: str, test_case: TestCase, suffix: str) -> str:
    """Compose ``{prefix}-{classname}`` with spaces as hyphens, then the suffix."""
    alert_name = f"{prefix}-{test_case.class_name}"
    return alert_name.replace(" ", "-") + suffix
