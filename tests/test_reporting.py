"""Tests for tgmcheck.reporting."""

from __future__ import annotations

import json

from tgmcheck.compliance import make_finding
from tgmcheck.models import FileReport, FindingKind
from tgmcheck.reporting import ERROR, WARNING, Reporter, ScanResult, render_message, severity_of, split_notices


def _result() -> ScanResult:
    return ScanResult(
        latest_version="2.6.1",
        files_scanned=3,
        reports=[
            FileReport(
                path="inc/class-tgm-plugin-activation.php",
                findings=[
                    make_finding(FindingKind.UPGRADE_REQUIRED, "2.6.1", "2.4.0"),
                    make_finding(FindingKind.CONFIGURATION_OPTIONS, "2.4.0", "2.6.1"),
                ],
            )
        ],
        notices=[make_finding(FindingKind.RATE_LIMIT_REACHED)],
    )


def test_severity_is_fixed_per_kind() -> None:
    assert severity_of(make_finding(FindingKind.UPGRADE_REQUIRED, "a", "b")) == ERROR
    assert severity_of(make_finding(FindingKind.VERSION_UNDETERMINED, "a")) == ERROR
    assert severity_of(make_finding(FindingKind.WRONG_GENERATOR_CHANNEL)) == ERROR
    assert severity_of(make_finding(FindingKind.CONFIGURATION_OPTIONS, "a", "b")) == WARNING
    assert severity_of(make_finding(FindingKind.AUTH_TOKEN_INVALID)) == WARNING


def test_render_message_interpolates_args() -> None:
    message = render_message(make_finding(FindingKind.UPGRADE_REQUIRED, "2.6.1", "2.4.0"))

    assert "latest version (2.6.1)" in message
    assert message.endswith("Found version: 2.4.0")


def test_text_report_lists_files_and_totals() -> None:
    output = Reporter().render(_result())

    assert output.splitlines()[0].startswith("WARNING [githubRateLimitReached]")
    assert "inc/class-tgm-plugin-activation.php" in output
    assert "  ERROR   [upgradeRequired]" in output
    assert output.splitlines()[-1] == (
        "1 error(s), 2 warning(s) in 1 of 3 file(s); latest TGMPA release: 2.6.1"
    )


def test_json_report_is_structured() -> None:
    payload = json.loads(Reporter(format="json").render(_result()))

    assert payload["latest_version"] == "2.6.1"
    assert payload["totals"] == {"errors": 1, "warnings": 2}
    entries = payload["files"]["inc/class-tgm-plugin-activation.php"]
    assert entries[0]["code"] == "upgradeRequired"
    assert entries[0]["args"] == ["2.6.1", "2.4.0"]
    assert payload["notices"][0]["severity"] == "warning"


def test_exit_code_reflects_errors_and_strict_mode() -> None:
    clean = ScanResult(latest_version="2.6.1", files_scanned=1)
    warned = ScanResult(latest_version="2.6.1", notices=[make_finding(FindingKind.RATE_LIMIT_REACHED)])

    assert Reporter().exit_code(_result()) == 1
    assert Reporter().exit_code(clean) == 0
    assert Reporter().exit_code(warned) == 0
    assert Reporter(strict=True).exit_code(warned) == 1


def test_split_notices_keeps_order() -> None:
    findings = [
        make_finding(FindingKind.AUTH_TOKEN_INVALID),
        make_finding(FindingKind.UPGRADE_REQUIRED, "2.6.1", "2.4.0"),
        make_finding(FindingKind.WRONG_GENERATOR_CHANNEL),
    ]

    notices, rest = split_notices(findings)

    assert [finding.kind for finding in notices] == [FindingKind.AUTH_TOKEN_INVALID]
    assert [finding.kind for finding in rest] == [
        FindingKind.UPGRADE_REQUIRED,
        FindingKind.WRONG_GENERATOR_CHANNEL,
    ]
