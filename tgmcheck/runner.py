"""Run a TGMPA scan over a project tree."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from .config import TgmCheckConfig
from .coordinator import ScanCoordinator, ScanState
from .file_scanner import FileScanner
from .lexers import PhpLexer
from .logging import get_logger
from .models import FileReport
from .reporting import ScanResult, split_notices
from .resolver import VersionResolver
from .source import TokenizedFile


class ScanRunner:
    """Coordinates discovery, tokenizing and the per-file checks for one run."""

    def __init__(
        self,
        coordinator: ScanCoordinator | None = None,
        *,
        file_scanner: FileScanner | None = None,
        lexer: PhpLexer | None = None,
    ) -> None:
        self.coordinator = coordinator or ScanCoordinator()
        self.file_scanner = file_scanner or FileScanner()
        self._lexer = lexer
        self.logger = get_logger("runner")

    @classmethod
    def from_config(
        cls,
        config: TgmCheckConfig,
        *,
        token: Optional[str] = None,
        lexer: PhpLexer | None = None,
    ) -> "ScanRunner":
        resolver = VersionResolver(
            token=config.github.oauth_token,
            api_url=config.github.api_url,
            request_timeout=config.github.request_timeout,
            offline=config.github.offline,
        )
        coordinator = ScanCoordinator(resolver, token=token)
        file_scanner = FileScanner(
            extensions=config.scan.extensions,
            exclude_paths=config.scan.exclude_paths,
        )
        return cls(coordinator, file_scanner=file_scanner, lexer=lexer)

    @property
    def lexer(self) -> PhpLexer:
        if self._lexer is None:
            self._lexer = PhpLexer()
        return self._lexer

    def run(self, path: str | Path) -> ScanResult:
        """Scan ``path`` and return findings grouped per file."""
        root = Path(path).expanduser().resolve()
        files = self.file_scanner.scan(root)
        self.logger.info("Scanning %d file(s) under %s", len(files), root)

        state = self.coordinator.new_state()
        result = ScanResult(latest_version=state.resolved_version or "")

        for source_file in files:
            try:
                tokenized = self.lexer.tokenize_path(source_file.path, display_path=source_file.relative)
            except OSError as exc:
                self.logger.warning("Skipping %s: %s", source_file.relative, exc)
                result.skipped.append(source_file.relative)
                continue
            result.files_scanned += 1
            self._scan_file(state, tokenized, result)

        return result

    def _scan_file(self, state: ScanState, tokenized: TokenizedFile, result: ScanResult) -> None:
        self.logger.debug("Checking %s (%d tokens)", tokenized.path, len(tokenized))
        findings = self.coordinator.process_file(state, tokenized)
        notices, file_findings = split_notices(findings)
        result.notices.extend(notices)
        if file_findings:
            result.reports.append(FileReport(path=tokenized.path or "", findings=file_findings))


__all__ = ["ScanRunner"]
