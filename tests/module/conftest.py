"""Fixtures for module tests using WireMock testcontainers."""

import subprocess
from collections.abc import Generator

import pytest
from testcontainers.core import testcontainers_config
from wiremock.constants import Config
from wiremock.testing.testcontainer import WireMockContainer


def docker_available() -> bool:
    """Check whether a Docker daemon answers."""
    try:
        result = subprocess.run(
            ["docker", "info"], capture_output=True, check=False, timeout=30
        )
    except (OSError, subprocess.TimeoutExpired):
        return False
    return result.returncode == 0


@pytest.fixture(scope="session", autouse=True)
def _disable_ryuk() -> None:
    """Disable the extra cleanup instance, we use contexts to clean containers."""
    testcontainers_config.ryuk_disabled = True


@pytest.fixture(scope="session")
def wiremock_server() -> Generator[WireMockContainer, None, None]:
    """Start WireMock container standing in for an Alertmanager."""
    if not docker_available():
        pytest.skip("Docker is required for module tests")

    with WireMockContainer(secure=False) as wm:
        Config.base_url = wm.get_url("__admin")
        yield wm
        print(wm.get_logs())


@pytest.fixture(scope="session")
def wiremock_url(wiremock_server: WireMockContainer) -> str:
    """Base URL of the WireMock server as seen from the host."""
    return wiremock_server.get_base_url()
