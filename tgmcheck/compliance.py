"""Version currency and generator provenance checks for a TGMPA doc block."""

from __future__ import annotations

from typing import List, Optional

from .models import DocTagSet, Finding, FindingKind
from .versioning import Channel, VersionSpec, compare_versions, parse_provenance, parse_version

VENDOR_PACKAGE_NAME = "TGM-Plugin-Activation"
EXAMPLE_SUBPACKAGE = "Example"
# Configuration arrays changed shape in this release.
CONFIGURATION_CHANGE_VERSION = "2.5.0"

GENERATOR_URL = "http://tgmpluginactivation.com/download/"
CONFIGURATION_URL = "http://tgmpluginactivation.com/configuration/"

MESSAGES = {
    FindingKind.UPGRADE_REQUIRED: (
        "Please upgrade the included version of the TGM plugin activation class to the "
        "latest version (%s). Found version: %s"
    ),
    FindingKind.CONFIGURATION_OPTIONS: (
        "There have been some minor changes to the TGMPA configuration options between "
        "version %s and the current version %s. Please verify your configuration arrays. "
        f"For more information: {CONFIGURATION_URL}"
    ),
    FindingKind.USE_STABLE_VERSION: (
        "Please do not use non-stable versions of the TGM plugin activation class. "
        "The current version is %s. Found version: %s"
    ),
    FindingKind.WRONG_GENERATOR_CHANNEL: (
        "Your version of the TGM Plugin Activation class was not downloaded through the "
        "Custom TGMPA Generator. Please download a fresh copy and make sure you select "
        '"WordPress.org" as your publication channel to get the correct version of TGMPA. '
        f"The Custom TGMPA Generator is located at {GENERATOR_URL}"
    ),
    FindingKind.VERSION_UNDETERMINED: (
        "TGMPA was detected in your theme, but the version could not be determined. "
        "Please ensure you use the latest stable release of the TGM Plugin Activation "
        "library (%s). Download a fresh copy now using the Custom TGMPA Generator at "
        f"{GENERATOR_URL}"
    ),
    FindingKind.AUTH_TOKEN_INVALID: (
        "The GitHub OAuth token you provided is invalid. Please update the token in your "
        ".tgmcheck.yml or the GITHUB_OAUTH_TOKEN environment variable."
    ),
    FindingKind.RATE_LIMIT_REACHED: (
        "The GitHub API rate limit was reached, so the latest TGMPA version could not be "
        "looked up. Consider setting github.oauth_token in .tgmcheck.yml or the "
        "GITHUB_OAUTH_TOKEN environment variable."
    ),
}


def make_finding(kind: FindingKind, *args: str, position: int = 0) -> Finding:
    return Finding.create(kind, MESSAGES[kind], args, position=position)


class ComplianceEngine:
    """Compares a doc block's ``@version`` against the latest release and generator rules."""

    def __init__(self, *, package_name: str = VENDOR_PACKAGE_NAME) -> None:
        self.package_name = package_name

    def version_spec(self, tags: DocTagSet) -> Optional[VersionSpec]:
        """Return the parsed version when the block is the library's own, else ``None``."""
        if tags.get("subpackage") == EXAMPLE_SUBPACKAGE:
            # Example file doc block; some authors keep it in the same file.
            return None
        if tags.get("package") != self.package_name or "version" not in tags:
            return None
        return parse_version(tags["version"])

    def is_applicable(self, tags: DocTagSet) -> bool:
        return self.version_spec(tags) is not None

    def evaluate(self, tags: DocTagSet, latest: str) -> List[Finding]:
        spec = self.version_spec(tags)
        if spec is None:
            return []

        findings: List[Finding] = []
        found = spec.raw
        order = compare_versions(latest, found)
        if order > 0:
            findings.append(make_finding(FindingKind.UPGRADE_REQUIRED, latest, found))
            if compare_versions(CONFIGURATION_CHANGE_VERSION, found) > 0:
                findings.append(make_finding(FindingKind.CONFIGURATION_OPTIONS, found, latest))
        elif order < 0:
            findings.append(make_finding(FindingKind.USE_STABLE_VERSION, latest, found))

        provenance = parse_provenance(tags["version"], spec)
        if provenance is None or provenance.channel is not Channel.WORDPRESS_ORG:
            findings.append(make_finding(FindingKind.WRONG_GENERATOR_CHANNEL))

        return findings


__all__ = [
    "CONFIGURATION_CHANGE_VERSION",
    "ComplianceEngine",
    "EXAMPLE_SUBPACKAGE",
    "MESSAGES",
    "VENDOR_PACKAGE_NAME",
    "make_finding",
]
