"""Per-file orchestration of classification, doc block lookup and compliance checks."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Hashable, List, Optional

from .classifier import SignatureClassifier
from .compliance import ComplianceEngine, make_finding
from .doctags import DocTagExtractor
from .logging import get_logger
from .models import Finding, FindingKind, TokenKind
from .resolver import ResolverError, VersionResolver
from .source import TokenSource

_ERROR_NOTICES = {
    ResolverError.AUTH_INVALID: FindingKind.AUTH_TOKEN_INVALID,
    ResolverError.RATE_LIMITED: FindingKind.RATE_LIMIT_REACHED,
}


@dataclass
class ScanState:
    """Run-scoped state; create one per run and pass it to every ``process`` call."""

    resolved_version: Optional[str] = None
    resolver_error: Optional[ResolverError] = None
    files_checked: Dict[Hashable, bool] = field(default_factory=dict)

    def is_resolved(self, file_id: Hashable) -> bool:
        return self.files_checked.get(file_id, False)


class ScanCoordinator:
    """Drives the checks for each relevant token of a file.

    A file goes from unseen to confirmed when the classifier matches, and is
    resolved once its TGMPA doc block was evaluated, or once it is clear that
    no such block exists. Resolved files are never looked at again in the run.
    """

    LISTEN_KINDS: FrozenSet[TokenKind] = frozenset(
        {
            TokenKind.FILE_START,
            TokenKind.CLASS,
            TokenKind.CONST,
            TokenKind.FUNCTION,
            TokenKind.IDENTIFIER,
        }
    )

    def __init__(
        self,
        resolver: VersionResolver | None = None,
        *,
        classifier: SignatureClassifier | None = None,
        extractor: DocTagExtractor | None = None,
        engine: ComplianceEngine | None = None,
        token: Optional[str] = None,
    ) -> None:
        self.resolver = resolver or VersionResolver()
        self.classifier = classifier or SignatureClassifier()
        self.extractor = extractor or DocTagExtractor()
        self.engine = engine or ComplianceEngine()
        self.token = token
        self.logger = get_logger("coordinator")

    def new_state(self, *, prefetch: bool = True) -> ScanState:
        """Return fresh run state, resolving the latest version up front unless told not to."""
        state = ScanState()
        if prefetch:
            self._ensure_resolved(state)
        return state

    def process(self, state: ScanState, source: TokenSource, position: int) -> List[Finding]:
        """Handle one relevant token of ``source`` and return any new findings."""
        latest = self._ensure_resolved(state)
        findings: List[Finding] = []

        if state.resolver_error is not None:
            findings.append(make_finding(_ERROR_NOTICES[state.resolver_error]))
            state.resolver_error = None

        file_id = self.file_id(source)
        if state.is_resolved(file_id):
            return findings

        if not self.classifier.classify(source.path, source, position):
            return findings

        self.logger.debug("Recognised TGMPA in %s", source.path or "<unnamed source>")

        # Normally the first doc block is the right one, so this walk is short.
        first_class = source.find_next({TokenKind.CLASS}, 0)
        boundary = first_class.position if first_class is not None else None
        for block in source.doc_blocks(0, boundary):
            tags = self.extractor.extract(source, block)
            if not tags or not self.engine.is_applicable(tags):
                continue
            findings.extend(self.engine.evaluate(tags, latest))
            state.files_checked[file_id] = True
            return findings

        findings.append(make_finding(FindingKind.VERSION_UNDETERMINED, latest))
        state.files_checked[file_id] = True
        return findings

    def process_file(self, state: ScanState, source: TokenSource) -> List[Finding]:
        """Feed every token the coordinator listens for, in file order."""
        findings: List[Finding] = []
        file_id = self.file_id(source)
        position = 0
        while True:
            token = source.find_next(self.LISTEN_KINDS, position)
            if token is None:
                break
            findings.extend(self.process(state, source, token.position))
            if state.is_resolved(file_id):
                break
            position = token.position + 1
        return findings

    @staticmethod
    def file_id(source: TokenSource) -> Hashable:
        """Key for ``files_checked``: the path, or the source itself when it has none."""
        if source.path is not None:
            return source.path
        return source

    def _ensure_resolved(self, state: ScanState) -> str:
        if state.resolved_version is None:
            resolution = self.resolver.resolve(self.token)
            state.resolved_version = resolution.version
            state.resolver_error = resolution.error
        return state.resolved_version


__all__ = ["ScanCoordinator", "ScanState"]
