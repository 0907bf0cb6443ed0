"""Build metadata resolved once at startup."""

from dataclasses import dataclass
from importlib.metadata import PackageNotFoundError, version

DISTRIBUTION_NAME = "junit2alertmanager"
UNKNOWN_VERSION = "0.0.0+unknown"


@dataclass(frozen=True, kw_only=True)
class BuildInfo:
    """Name and version of the running tool."""

    name: str
    version: str

    @classmethod
    def from_metadata(cls, distribution: str = DISTRIBUTION_NAME) -> "BuildInfo":
        """Read the version from installed package metadata.

        Running from a source checkout without installing the package yields
        ``UNKNOWN_VERSION``.
        """
        try:
            resolved = version(distribution)
        except PackageNotFoundError:
            resolved = UNKNOWN_VERSION
        return cls(name=distribution, version=resolved)

    @property
    def user_agent(self) -> str:
        """Value sent as the User-Agent header."""
        return f"{self.name}/{self.version}"

    def __str__(self) -> str:
        return f"{self.name} {self.version}"
