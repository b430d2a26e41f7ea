"""Parsing of TGMPA ``@version`` tag values and version comparison."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from packaging.version import InvalidVersion, Version

_VERSION_PATTERN = re.compile(
    r"^(?P<raw>(?P<numeric>[0-9.]+)(?:-(?P<label>(?:alpha|beta|RC)[0-9]?))?)"
)
_PROVENANCE_TEMPLATE = (
    r"^{version}\s+for\s+(?P<target_kind>parent theme|child theme|plugin)"
    r"\s+(?P<target_name>.+?)\s+for publication on (?P<channel>WordPress\.org|ThemeForest)"
)


class TargetKind(str, Enum):
    PARENT_THEME = "parent theme"
    CHILD_THEME = "child theme"
    PLUGIN = "plugin"


class Channel(str, Enum):
    WORDPRESS_ORG = "WordPress.org"
    THEMEFOREST = "ThemeForest"


@dataclass(frozen=True)
class VersionSpec:
    """Leading version of a tag value, e.g. ``2.6.0-beta1``."""

    numeric: str
    prerelease_label: Optional[str]
    raw: str

    def __str__(self) -> str:
        return self.raw


@dataclass(frozen=True)
class GeneratorProvenance:
    """Details the Custom TGMPA Generator writes after the version number."""

    declared_version: str
    target_kind: TargetKind
    target_name: str
    channel: Channel


def parse_version(value: str) -> Optional[VersionSpec]:
    """Parse the leading version of a tag value, or ``None`` when there is none."""
    match = _VERSION_PATTERN.match(value.strip())
    if match is None:
        return None
    raw = match.group("raw")
    try:
        Version(raw)
    except InvalidVersion:
        return None
    return VersionSpec(numeric=match.group("numeric"), prerelease_label=match.group("label"), raw=raw)


def parse_provenance(value: str, spec: VersionSpec) -> Optional[GeneratorProvenance]:
    """Parse the generator suffix that must follow ``spec`` in the tag value."""
    pattern = _PROVENANCE_TEMPLATE.format(version=re.escape(spec.raw))
    match = re.match(pattern, value.strip())
    if match is None:
        return None
    return GeneratorProvenance(
        declared_version=spec.raw,
        target_kind=TargetKind(match.group("target_kind")),
        target_name=match.group("target_name"),
        channel=Channel(match.group("channel")),
    )


def normalise_release_tag(tag: str) -> Optional[str]:
    """Return a release tag such as ``v2.6.1`` as ``2.6.1``; ``None`` if it is not a version."""
    cleaned = tag.strip()
    if cleaned[:1] in {"v", "V"}:
        cleaned = cleaned[1:]
    if not cleaned:
        return None
    try:
        Version(cleaned)
    except InvalidVersion:
        return None
    return cleaned


def compare_versions(left: str, right: str) -> int:
    """Three-way comparison: negative, zero or positive like ``left - right``."""
    left_key = Version(left)
    right_key = Version(right)
    if left_key > right_key:
        return 1
    if left_key < right_key:
        return -1
    return 0


__all__ = [
    "Channel",
    "GeneratorProvenance",
    "TargetKind",
    "VersionSpec",
    "compare_versions",
    "normalise_release_tag",
    "parse_provenance",
    "parse_version",
]
