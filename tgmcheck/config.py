"""Configuration loading for tgmcheck (.tgmcheck.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import urlsplit

import yaml

CONFIG_FILENAME = ".tgmcheck.yml"
DEFAULT_EXTENSIONS = [".php"]
REPORT_FORMATS = ("text", "json")


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class GitHubConfig:
    """Settings for the latest-release lookup."""

    oauth_token: Optional[str] = None
    api_url: Optional[str] = None
    request_timeout: float = 10.0
    offline: bool = False


@dataclass
class ScanConfig:
    """File discovery settings."""

    extensions: List[str] = field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    exclude_paths: List[str] = field(default_factory=list)


@dataclass
class ReportConfig:
    """Output settings."""

    format: str = "text"
    strict: bool = False


@dataclass
class TgmCheckConfig:
    """Represents the settings defined in .tgmcheck.yml."""

    root: Path
    github: GitHubConfig = field(default_factory=GitHubConfig)
    scan: ScanConfig = field(default_factory=ScanConfig)
    report: ReportConfig = field(default_factory=ReportConfig)


def load_config(config_path: Path) -> TgmCheckConfig:
    """Load configuration from disk."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return TgmCheckConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    github = GitHubConfig()
    github_data = _as_dict(data.get("github"))
    if github_data:
        github.oauth_token = _as_str(github_data.get("oauth_token")) or None
        github.api_url = _as_str(github_data.get("api_url")) or None
        if github.api_url is not None and urlsplit(github.api_url).scheme not in {"http", "https"}:
            raise ConfigError(f"github.api_url must be an http(s) URL, got '{github.api_url}'")
        timeout = _as_float(github_data.get("request_timeout"))
        if timeout is not None:
            if timeout <= 0:
                raise ConfigError("github.request_timeout must be positive")
            github.request_timeout = timeout
        github.offline = _as_bool(github_data.get("offline")) or False

    scan = ScanConfig()
    scan_data = _as_dict(data.get("scan"))
    if scan_data:
        extensions = _as_str_list(scan_data.get("extensions"))
        if extensions:
            scan.extensions = [_normalise_extension(ext) for ext in extensions]
        scan.exclude_paths = _as_str_list(scan_data.get("exclude_paths"))

    report = ReportConfig()
    report_data = _as_dict(data.get("report"))
    if report_data:
        report_format = _as_str(report_data.get("format"))
        if report_format is not None:
            report_format = report_format.lower()
            if report_format not in REPORT_FORMATS:
                raise ConfigError(
                    f"report.format must be one of {', '.join(REPORT_FORMATS)}, got '{report_format}'"
                )
            report.format = report_format
        report.strict = _as_bool(report_data.get("strict")) or False

    return TgmCheckConfig(root=root, github=github, scan=scan, report=report)


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _normalise_extension(value: str) -> str:
    value = value.strip().lower()
    return value if value.startswith(".") else f".{value}"


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []
