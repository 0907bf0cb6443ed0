"""Runtime configuration assembled from command line flags."""

from collections.abc import Sequence
from datetime import timedelta
from pathlib import Path

from pydantic import BaseModel, ConfigDict

DEFAULT_JUNIT_FILE = "junit.xml"
DEFAULT_EXPIRE = timedelta(minutes=3)


class ConfigurationError(Exception):
    """Raised when a required setting is missing."""


class AppConfig(BaseModel):
    """Configuration for one run of the pipeline."""

    model_config = ConfigDict(frozen=True)

    targets: Sequence[str]
    junit_file: Path = Path(DEFAULT_JUNIT_FILE)
    alert_name: str = ""
    generator_url: str = ""
    expire: timedelta = DEFAULT_EXPIRE
    # Disables TLS certificate verification on outbound calls
    skip_insecure: bool = False


def parse_targets(targets: str | Sequence[str] | None) -> Sequence[str]:
    """Split comma-separated target URLs, trimming blanks and empty entries."""
    if targets is None:
        return ()
    if isinstance(targets, str):
        targets = [targets]
    return tuple(
        target.strip()
        for value in targets
        for target in value.split(",")
        if target.strip()
    )


def build_config(
    *,
    targets: str | Sequence[str] | None,
    junit_file: str | Path | None,
    alert_name: str = "",
    generator_url: str = "",
    expire: timedelta = DEFAULT_EXPIRE,
    skip_insecure: bool = False,
) -> AppConfig:
    """Validate raw settings and build the run configuration.

    Raises:
        ConfigurationError: If no target or no report path is given

    """
    parsed_targets = parse_targets(targets)
    if not parsed_targets:
        raise ConfigurationError("You must set a target")
    if not junit_file or not str(junit_file).strip():
        raise ConfigurationError("You must set a junit path file")

    return AppConfig(
        targets=parsed_targets,
        junit_file=Path(junit_file),
        alert_name=alert_name,
        generator_url=generator_url,
        expire=expire,
        skip_insecure=skip_insecure,
    )
