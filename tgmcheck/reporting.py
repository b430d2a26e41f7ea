"""Rendering of findings and exit-code aggregation."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from .models import FileReport, Finding, FindingKind

ERROR = "error"
WARNING = "warning"

SEVERITIES: Dict[FindingKind, str] = {
    FindingKind.UPGRADE_REQUIRED: ERROR,
    FindingKind.USE_STABLE_VERSION: ERROR,
    FindingKind.WRONG_GENERATOR_CHANNEL: ERROR,
    FindingKind.VERSION_UNDETERMINED: ERROR,
    FindingKind.CONFIGURATION_OPTIONS: WARNING,
    FindingKind.AUTH_TOKEN_INVALID: WARNING,
    FindingKind.RATE_LIMIT_REACHED: WARNING,
}

# Reported once per run rather than against a particular file.
RUN_NOTICE_KINDS = frozenset({FindingKind.AUTH_TOKEN_INVALID, FindingKind.RATE_LIMIT_REACHED})


def severity_of(finding: Finding) -> str:
    return SEVERITIES.get(finding.kind, ERROR)


def render_message(finding: Finding) -> str:
    """Interpolate the finding's arguments into its message template."""
    if not finding.args:
        return finding.message
    return finding.message % tuple(finding.args)


@dataclass
class ScanResult:
    """Everything a scan produced."""

    latest_version: str
    files_scanned: int = 0
    reports: List[FileReport] = field(default_factory=list)
    notices: List[Finding] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)

    def all_findings(self) -> List[Finding]:
        findings = list(self.notices)
        for report in self.reports:
            findings.extend(report.findings)
        return findings

    def count(self, severity: str) -> int:
        return sum(1 for finding in self.all_findings() if severity_of(finding) == severity)


class Reporter:
    """Formats a ``ScanResult`` as text or JSON."""

    def __init__(self, *, format: str = "text", strict: bool = False) -> None:
        if format not in {"text", "json"}:
            raise ValueError(f"Unknown report format: {format}")
        self.format = format
        self.strict = strict

    def render(self, result: ScanResult) -> str:
        if self.format == "json":
            return self._render_json(result)
        return self._render_text(result)

    def exit_code(self, result: ScanResult) -> int:
        if result.count(ERROR):
            return 1
        if self.strict and result.count(WARNING):
            return 1
        return 0

    def _render_text(self, result: ScanResult) -> str:
        lines: List[str] = []
        for notice in result.notices:
            lines.append(self._format_line(notice))
        if result.notices:
            lines.append("")

        for report in result.reports:
            if not report.findings:
                continue
            lines.append(report.path)
            lines.extend(f"  {self._format_line(finding)}" for finding in report.findings)
            lines.append("")

        errors = result.count(ERROR)
        warnings = result.count(WARNING)
        flagged = sum(1 for report in result.reports if report.findings)
        lines.append(
            f"{errors} error(s), {warnings} warning(s) in {flagged} of "
            f"{result.files_scanned} file(s); latest TGMPA release: {result.latest_version}"
        )
        return "\n".join(lines)

    @staticmethod
    def _format_line(finding: Finding) -> str:
        severity = severity_of(finding).upper()
        return f"{severity:<7} [{finding.kind.value}] {render_message(finding)}"

    def _render_json(self, result: ScanResult) -> str:
        payload = {
            "latest_version": result.latest_version,
            "files_scanned": result.files_scanned,
            "notices": [_finding_to_dict(finding) for finding in result.notices],
            "files": {
                report.path: [_finding_to_dict(finding) for finding in report.findings]
                for report in result.reports
                if report.findings
            },
            "skipped": list(result.skipped),
            "totals": {"errors": result.count(ERROR), "warnings": result.count(WARNING)},
        }
        return json.dumps(payload, indent=2)


def _finding_to_dict(finding: Finding) -> Dict[str, object]:
    return {
        "code": finding.kind.value,
        "severity": severity_of(finding),
        "position": finding.position,
        "message": render_message(finding),
        "args": list(finding.args),
    }


def split_notices(findings: Sequence[Finding]) -> tuple[List[Finding], List[Finding]]:
    """Separate run-level notices from file findings, keeping order."""
    notices = [finding for finding in findings if finding.kind in RUN_NOTICE_KINDS]
    rest = [finding for finding in findings if finding.kind not in RUN_NOTICE_KINDS]
    return notices, rest


__all__ = [
    "ERROR",
    "Reporter",
    "RUN_NOTICE_KINDS",
    "SEVERITIES",
    "ScanResult",
    "WARNING",
    "render_message",
    "severity_of",
    "split_notices",
]
