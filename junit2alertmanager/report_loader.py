"""Loading of JUnit XML reports."""

import asyncio
import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from junit2alertmanager.models.report import TestSuite

log = logging.getLogger(__name__)

ROOT_TAG = "testsuite"


class ReportReadError(Exception):
    """Raised when the report file cannot be read."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Cannot read junit file '{path}': {reason}")
        self.path = path


class ReportParseError(Exception):
    """Raised when the report is not a valid JUnit document."""

    def __init__(self, path: Path | None, reason: str) -> None:
        source = f"junit file '{path}'" if path is not None else "junit document"
        super().__init__(f"Malformed {source}: {reason}")
        self.path = path


async def load_test_suite(path: Path) -> TestSuite:
    """Read a JUnit XML file and decode its test suite.

    Args:
        path: Path to the report file

    Returns:
        The decoded test suite with cases in document order

    Raises:
        ReportReadError: If the file is missing or unreadable
        ReportParseError: If the content is not a valid JUnit document

    """
    try:
        data = await asyncio.to_thread(path.read_bytes)
    except OSError as e:
        raise ReportReadError(path, e.strerror or str(e)) from e

    suite = parse_test_suite(data, path=path)
    log.info(
        "Loaded suite '%s' from %s (%d test case(s))",
        suite.name,
        path,
        len(suite.test_cases),
    )
    return suite


def parse_test_suite(data: bytes, path: Path | None = None) -> TestSuite:
    """Decode a ``<testsuite>`` document.

    Raises:
        ReportParseError: If the XML is not well formed, the root element is
            not ``<testsuite>`` or attribute values are invalid

    """
    try:
        root = ET.fromstring(data)
    except ET.ParseError as e:
        raise ReportParseError(path, str(e)) from e

    if root.tag != ROOT_TAG:
        raise ReportParseError(
            path, f"expected element type <{ROOT_TAG}> but have <{root.tag}>"
        )

    try:
        return TestSuite.model_validate(_suite_fields(root))
    except ValidationError as e:
        raise ReportParseError(path, str(e)) from e


def _suite_fields(element: ET.Element) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "test_cases": [
            _case_fields(case) for case in element.findall("testcase")
        ],
    }
    for attr in ("name", "tests", "failures", "errors", "time"):
        if (value := element.get(attr)) is not None:
            fields[attr] = value
    return fields


def _case_fields(element: ET.Element) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "name": element.get("name", ""),
        "class_name": element.get("classname", ""),
    }
    if (time := element.get("time")) is not None:
        fields["time"] = time

    if (failure := element.find("failure")) is not None:
        fields["failure_message"] = {
            "type": failure.get("type", ""),
            "message": _chardata(failure),
        }
    if (skipped := element.find("skipped")) is not None:
        fields["skipped"] = {"message": _chardata(skipped)}
    if (system_out := element.find("system-out")) is not None:
        fields["system_out"] = _chardata(system_out)

    return fields


def _chardata(element: ET.Element) -> str:
    """Return the text directly inside an element, excluding child elements."""
    parts = [element.text or ""]
    parts.extend(child.tail or "" for child in element)
    return "".join(parts)
