"""Delivery of alerts to a cluster of Alertmanager-compatible receivers."""

import logging
from collections.abc import AsyncGenerator, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any

import aiohttp
from pydantic import TypeAdapter

from junit2alertmanager.build_info import BuildInfo
from junit2alertmanager.config import AppConfig
from junit2alertmanager.models.alert import Alert

log = logging.getLogger(__name__)

ALERT_API_PATH = "/api/v1/alerts"

CONNECT_TIMEOUT = 30.0
TLS_HANDSHAKE_TIMEOUT = 10.0
IDLE_CONNECTION_TIMEOUT = 90.0
MAX_IDLE_CONNECTIONS = 100

_ALERTS_ADAPTER = TypeAdapter(list[Alert])


class DeliveryError(Exception):
    """Raised when no target accepted the alerts.

    ``errors`` holds one message per failed target, in the order the targets
    were tried.
    """

    def __init__(self, errors: Sequence[str]) -> None:
        super().__init__("\n".join(errors))
        self.errors = tuple(errors)


def serialize_alerts(alerts: Sequence[Alert]) -> list[dict[str, Any]]:
    """Convert alerts into the JSON array expected by the receiver."""
    payload: list[dict[str, Any]] = _ALERTS_ADAPTER.dump_python(
        list(alerts), mode="json", by_alias=True
    )
    return payload


@dataclass(frozen=True, kw_only=True)
class AlertmanagerClient:
    """Posts alerts to the first target that accepts them.

    Targets are redundant members of one cluster, so they are tried strictly
    in order and delivery stops at the first 2xx response.
    """

    targets: Sequence[str]
    session: aiohttp.ClientSession = field(repr=False)

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: AppConfig, build_info: BuildInfo
    ) -> AsyncGenerator["AlertmanagerClient", None]:
        """Create client with managed session lifecycle."""
        connector = aiohttp.TCPConnector(
            limit=MAX_IDLE_CONNECTIONS,
            keepalive_timeout=IDLE_CONNECTION_TIMEOUT,
            ssl=not config.skip_insecure,
        )
        timeout = aiohttp.ClientTimeout(
            total=None,
            sock_connect=CONNECT_TIMEOUT,
            connect=CONNECT_TIMEOUT + TLS_HANDSHAKE_TIMEOUT,
        )
        if config.skip_insecure:
            log.warning("TLS certificate verification is disabled")

        async with aiohttp.ClientSession(
            connector=connector,
            timeout=timeout,
            headers={"User-Agent": build_info.user_agent},
            trust_env=True,
        ) as session:
            yield cls(targets=config.targets, session=session)

    async def send_alerts(self, alerts: Sequence[Alert]) -> str:
        """Send all alerts as one batch, falling back through the targets.

        Args:
            alerts: Alerts to deliver, possibly empty

        Returns:
            The target that accepted the alerts

        Raises:
            DeliveryError: If every target failed

        """
        payload = serialize_alerts(alerts)
        errors: list[str] = []

        for raw_target in self.targets:
            target = raw_target.strip()
            if (error := await self._post_alerts(target, payload)) is None:
                log.info("Sent %d alert(s) to %s", len(payload), target)
                return target

            log.warning("Failed to send alerts to %s: %s", target, error)
            errors.append(error)

        raise DeliveryError(errors)

    async def _post_alerts(
        self, target: str, payload: list[dict[str, Any]]
    ) -> str | None:
        """Post the payload to one target, returning an error message on failure."""
        url = f"{target}{ALERT_API_PATH}"
        try:
            async with self.session.post(url, json=payload) as response:
                if 200 <= response.status < 300:
                    return None
                text = await response.text(errors="replace")
                return (
                    f"Error when sending alerts to {target} "
                    f"(code: {response.status}): {text}"
                )
        except (aiohttp.ClientError, TimeoutError) as e:
            return f"Error when sending alerts to {target}: {e!r}"
