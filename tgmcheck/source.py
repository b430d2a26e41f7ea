"""Token source contract consumed by the scan core, plus an in-memory implementation."""

from __future__ import annotations

from bisect import bisect_left
from typing import Collection, Iterator, List, Optional, Protocol, Sequence

from .models import TRIVIAL_KINDS, DocBlock, Token, TokenKind


class TokenSource(Protocol):
    """Minimal view of a tokenized file that lexer adapters must provide."""

    path: Optional[str]

    def token_at(self, position: int) -> Optional[Token]:
        """Return the token starting at ``position``."""

    def find_next(
        self, kinds: Collection[TokenKind], start: int = 0, end: Optional[int] = None
    ) -> Optional[Token]:
        """Return the first token of one of ``kinds`` in ``[start, end)``."""

    def next_significant(self, position: int) -> Optional[Token]:
        """Return the first non-whitespace, non-comment token after ``position``."""

    def declaration_name(self, position: int) -> Optional[str]:
        """Return the declared name for a class/function/const token."""

    def doc_blocks(self, start: int = 0, end: Optional[int] = None) -> Iterator[DocBlock]:
        """Yield documentation blocks whose opener lies in ``[start, end)``."""

    def find_doc_string(self, start: int, end: Optional[int]) -> Optional[Token]:
        """Return the first doc-comment string strictly after ``start`` and before ``end``."""


class TokenizedFile:
    """Ordered token list with the lookups the scan core needs."""

    def __init__(self, tokens: Sequence[Token], path: Optional[str] = None) -> None:
        self.path = path
        self.tokens: List[Token] = sorted(tokens, key=lambda token: token.position)
        self._positions = [token.position for token in self.tokens]
        self._blocks = self._collect_doc_blocks(self.tokens)

    def __len__(self) -> int:
        return len(self.tokens)

    def __iter__(self) -> Iterator[Token]:
        return iter(self.tokens)

    def token_at(self, position: int) -> Optional[Token]:
        index = bisect_left(self._positions, position)
        if index < len(self.tokens) and self._positions[index] == position:
            return self.tokens[index]
        return None

    def find_next(
        self, kinds: Collection[TokenKind], start: int = 0, end: Optional[int] = None
    ) -> Optional[Token]:
        index = bisect_left(self._positions, start)
        for token in self._iter_from(index):
            if end is not None and token.position >= end:
                return None
            if token.kind in kinds:
                return token
        return None

    def next_significant(self, position: int) -> Optional[Token]:
        index = bisect_left(self._positions, position + 1)
        for token in self._iter_from(index):
            if token.kind not in TRIVIAL_KINDS:
                return token
        return None

    def declaration_name(self, position: int) -> Optional[str]:
        token = self.token_at(position)
        if token is None:
            return None
        if token.name:
            return token.name
        if token.kind is TokenKind.CONST:
            following = self.next_significant(position)
            if following is not None and following.kind is TokenKind.IDENTIFIER:
                return following.content
        return None

    def doc_blocks(self, start: int = 0, end: Optional[int] = None) -> Iterator[DocBlock]:
        for block in self._blocks:
            if block.opener < start:
                continue
            if end is not None and block.opener >= end:
                break
            yield block

    def find_doc_string(self, start: int, end: Optional[int]) -> Optional[Token]:
        index = bisect_left(self._positions, start + 1)
        for token in self._iter_from(index):
            if end is not None and token.position >= end:
                return None
            if token.kind is TokenKind.DOC_COMMENT_STRING:
                return token
        return None

    def _iter_from(self, index: int) -> Iterator[Token]:
        tokens = self.tokens
        for current in range(index, len(tokens)):
            yield tokens[current]

    @staticmethod
    def _collect_doc_blocks(tokens: Sequence[Token]) -> List[DocBlock]:
        blocks: List[DocBlock] = []
        opener: Optional[int] = None
        tags: List[int] = []
        for token in tokens:
            if token.kind is TokenKind.DOC_COMMENT_OPEN:
                if opener is not None:
                    blocks.append(DocBlock(opener=opener, closer=None, tags=tuple(tags)))
                opener = token.position
                tags = []
            elif opener is None:
                continue
            elif token.kind is TokenKind.DOC_COMMENT_TAG:
                tags.append(token.position)
            elif token.kind is TokenKind.DOC_COMMENT_CLOSE:
                blocks.append(DocBlock(opener=opener, closer=token.position, tags=tuple(tags)))
                opener = None
                tags = []
        if opener is not None:
            # Unterminated comment at end of file.
            blocks.append(DocBlock(opener=opener, closer=None, tags=tuple(tags)))
        return blocks


__all__ = ["TokenSource", "TokenizedFile"]
