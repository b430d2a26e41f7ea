"""Core data models shared across tgmcheck components."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple


class TokenKind(str, Enum):
    """Semantic token kinds supplied by a lexer adapter."""

    FILE_START = "file_start"
    CLASS = "class"
    FUNCTION = "function"
    CONST = "const"
    IDENTIFIER = "identifier"
    DOC_COMMENT_OPEN = "doc_comment_open"
    DOC_COMMENT_TAG = "doc_comment_tag"
    DOC_COMMENT_STRING = "doc_comment_string"
    DOC_COMMENT_CLOSE = "doc_comment_close"
    WHITESPACE = "whitespace"
    COMMENT = "comment"
    OTHER = "other"


# Tokens skipped when looking for the next meaningful token.
TRIVIAL_KINDS = frozenset({TokenKind.WHITESPACE, TokenKind.COMMENT})


@dataclass(frozen=True)
class Token:
    """A single classified token at a stable, ordered position."""

    kind: TokenKind
    position: int
    content: str = ""
    name: Optional[str] = None


@dataclass(frozen=True)
class DocBlock:
    """A documentation comment region and the positions of its tag markers."""

    opener: int
    closer: Optional[int]
    tags: Tuple[int, ...] = ()


# Tag name (without the leading ``@``) mapped to its trimmed value.
DocTagSet = Dict[str, str]


class FindingKind(str, Enum):
    """Codes of every finding the scan can report."""

    AUTH_TOKEN_INVALID = "githubOauthTokenInvalid"
    RATE_LIMIT_REACHED = "githubRateLimitReached"
    UPGRADE_REQUIRED = "upgradeRequired"
    CONFIGURATION_OPTIONS = "configurationOptions"
    USE_STABLE_VERSION = "useStableVersion"
    WRONG_GENERATOR_CHANNEL = "wrongVersion"
    VERSION_UNDETERMINED = "versionUndetermined"


@dataclass(frozen=True)
class Finding:
    """Structured result handed to the reporter; ``message`` is an uninterpolated template."""

    kind: FindingKind
    position: int
    message: str
    args: Tuple[str, ...] = ()

    @classmethod
    def create(
        cls, kind: FindingKind, message: str, args: Sequence[str] = (), *, position: int = 0
    ) -> "Finding":
        return cls(kind=kind, position=position, message=message, args=tuple(args))


@dataclass
class FileReport:
    """Findings collected for one scanned file."""

    path: str
    findings: List[Finding] = field(default_factory=list)
