"""Tests for CLI module."""

import json
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from junit2alertmanager.build_info import BuildInfo
from junit2alertmanager.cli import (
    build_parser,
    format_output,
    log_alerts_summary,
    main,
)
from junit2alertmanager.delivery import DeliveryError
from junit2alertmanager.models.alert import Alert

BUILD_INFO = BuildInfo(name="junit2alertmanager", version="1.0.0")


def make_alert(name: str, summary: str = "test_it") -> Alert:
    """Create an alert with fixed times."""
    now = datetime(2024, 5, 1, tzinfo=timezone.utc)
    return Alert(
        starts_at=now,
        ends_at=now + timedelta(minutes=3),
        labels={"alertname": name},
        annotations={"summary": summary, "description": "boom"},
    )


def test_log_alerts_summary_lists_alerts(caplog: pytest.LogCaptureFixture) -> None:
    """Logs one line per alert."""
    alerts = [make_alert("job-pkg.A-0", "test_a"), make_alert("job-pkg.B-3", "test_b")]

    with caplog.at_level(logging.INFO):
        log_alerts_summary(logging.getLogger(), alerts)

    assert "Alerts to send:" in caplog.text
    assert "job-pkg.A-0: test_a" in caplog.text
    assert "job-pkg.B-3: test_b" in caplog.text


def test_log_alerts_summary_empty(caplog: pytest.LogCaptureFixture) -> None:
    """Logs that an empty list is sent when nothing failed."""
    with caplog.at_level(logging.INFO):
        log_alerts_summary(logging.getLogger(), [])

    assert "No failed test cases" in caplog.text


def test_format_output() -> None:
    """Reports the number of alerts, their names and the accepting target."""
    output = format_output([make_alert("job-pkg.A-0")], "http://am:9093")

    assert output == {
        "total": 1,
        "target": "http://am:9093",
        "alerts": ["job-pkg.A-0"],
    }


class TestBuildParser:
    """Tests for build_parser."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Uses the documented defaults."""
        monkeypatch.delenv("ALERT_MANAGER_HOST", raising=False)

        args = build_parser(BUILD_INFO).parse_args([])

        assert args.targets is None
        assert args.junit == "junit.xml"
        assert args.alert_name == ""
        assert args.generator_url == ""
        assert args.expire == timedelta(minutes=3)
        assert args.skip_insecure is False

    def test_short_flags(self) -> None:
        """Accepts the short form of every flag."""
        args = build_parser(BUILD_INFO).parse_args(
            [
                "-t",
                "http://a,http://b",
                "-f",
                "report.xml",
                "-n",
                "nightly",
                "-g",
                "https://ci",
                "-e",
                "0",
                "-k",
            ]
        )

        assert args.targets == "http://a,http://b"
        assert args.junit == "report.xml"
        assert args.alert_name == "nightly"
        assert args.generator_url == "https://ci"
        assert args.expire == timedelta(0)
        assert args.skip_insecure is True

    def test_target_alias(self) -> None:
        """Accepts --target as an alias of --targets."""
        args = build_parser(BUILD_INFO).parse_args(["--target", "http://a"])

        assert args.targets == "http://a"

    def test_targets_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Reads targets from ALERT_MANAGER_HOST."""
        monkeypatch.setenv("ALERT_MANAGER_HOST", "http://env:9093")

        args = build_parser(BUILD_INFO).parse_args([])

        assert args.targets == "http://env:9093"

    def test_rejects_invalid_duration(self) -> None:
        """Exits with a usage error for an invalid expiration."""
        with pytest.raises(SystemExit) as exc_info:
            build_parser(BUILD_INFO).parse_args(["--expire", "soon"])

        assert exc_info.value.code == 2


class TestMain:
    """Tests for main."""

    def test_exits_with_error_without_target(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Fails with a message when no target is configured."""
        monkeypatch.delenv("ALERT_MANAGER_HOST", raising=False)

        with pytest.raises(SystemExit) as exc_info:
            main(["--junit", "junit.xml"])

        assert exc_info.value.code == 1
        assert "You must set a target" in capsys.readouterr().err

    def test_exits_with_error_without_junit_path(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Fails with a message when the report path is empty."""
        with pytest.raises(SystemExit) as exc_info:
            main(["--targets", "http://a", "--junit", ""])

        assert exc_info.value.code == 1
        assert "You must set a junit path file" in capsys.readouterr().err

    def test_exits_with_error_for_missing_report(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Fails with a message when the report cannot be read."""
        missing = tmp_path / "missing.xml"

        with pytest.raises(SystemExit) as exc_info:
            main(["--targets", "http://a", "--junit", str(missing)])

        assert exc_info.value.code == 1
        assert "Cannot read junit file" in capsys.readouterr().err

    def test_exits_with_error_for_malformed_report(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Fails with a message when the report is not valid XML."""
        report = tmp_path / "junit.xml"
        report.write_text("<testsuite>")

        with pytest.raises(SystemExit) as exc_info:
            main(["--targets", "http://a", "--junit", str(report)])

        assert exc_info.value.code == 1
        assert "Malformed junit file" in capsys.readouterr().err

    def test_exits_with_error_when_delivery_fails(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Fails with the aggregated delivery errors."""
        report = tmp_path / "junit.xml"
        report.write_text('<testsuite name="s"></testsuite>')

        with patch(
            "junit2alertmanager.cli.AlertmanagerClient.send_alerts",
            new=AsyncMock(side_effect=DeliveryError(["a failed", "b failed"])),
        ):
            with pytest.raises(SystemExit) as exc_info:
                main(["--targets", "http://a,http://b", "--junit", str(report)])

        assert exc_info.value.code == 1
        assert "a failed\nb failed" in capsys.readouterr().err

    def test_exits_successfully_after_delivery(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Prints the JSON summary and exits with 0."""
        report = tmp_path / "junit.xml"
        report.write_text(
            '<testsuite name="s"><testcase name="t" classname="C">'
            "<failure>boom</failure></testcase></testsuite>"
        )

        with patch(
            "junit2alertmanager.cli.AlertmanagerClient.send_alerts",
            new=AsyncMock(return_value="http://a"),
        ):
            with pytest.raises(SystemExit) as exc_info:
                main(["-t", "http://a", "-f", str(report), "-n", "job"])

        assert exc_info.value.code == 0
        output = json.loads(capsys.readouterr().out)
        assert output == {"total": 1, "target": "http://a", "alerts": ["job-C-0"]}
