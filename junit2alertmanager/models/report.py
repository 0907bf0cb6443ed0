"""Models for a parsed JUnit XML report."""

from collections.abc import Sequence

from pydantic import Field

from junit2alertmanager.models.base import Model


class FailureMessage(Model):
    """Content of a ``<failure>`` element."""

    type: str = Field(default="", description="Value of the type attribute")
    message: str = Field(
        default="", description="Character data directly inside the element"
    )


class Skipped(Model):
    """Marker for a ``<skipped>`` element."""

    message: str = Field(default="", description="Character data of the element")


class TestCase(Model):
    """A single ``<testcase>`` of a suite."""

    __test__ = False

    name: str = Field(default="", description="Test case name")
    class_name: str = Field(default="", description="Value of the classname attribute")
    failure_message: FailureMessage | None = Field(
        default=None, description="Present when the case failed"
    )
    skipped: Skipped | None = Field(
        default=None, description="Present when the case was skipped"
    )
    time: float = Field(default=0.0, description="Duration in seconds")
    system_out: str = Field(default="", description="Captured standard output")


class TestSuite(Model):
    """Root ``<testsuite>`` element of a report."""

    __test__ = False

    name: str = Field(default="", description="Suite name")
    tests: int = Field(default=0, description="Declared number of tests")
    failures: int = Field(default=0, description="Declared number of failures")
    errors: int = Field(default=0, description="Declared number of errors")
    time: float = Field(default=0.0, description="Duration in seconds")
    test_cases: Sequence[TestCase] = Field(
        default_factory=list, description="Test cases in document order"
    )
