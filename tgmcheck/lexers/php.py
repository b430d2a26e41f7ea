"""Tree-sitter powered PHP tokenizer producing ``TokenizedFile`` objects."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Iterator, List, Optional

from ..models import Token, TokenKind
from ..source import TokenizedFile

try:  # pragma: no cover - optional dependency
    import tree_sitter_php
    from tree_sitter import Language, Parser

    TREE_SITTER_AVAILABLE = True
except ModuleNotFoundError:  # pragma: no cover - optional dependency
    tree_sitter_php = None  # type: ignore[assignment]
    Language = None  # type: ignore[assignment]
    Parser = None  # type: ignore[assignment]
    TREE_SITTER_AVAILABLE = False


_DOC_TAG_PATTERN = re.compile(r"@[A-Za-z_][\w-]*")

_FUNCTION_NODES = {"function_definition", "method_declaration"}


class LexerUnavailableError(RuntimeError):
    """Raised when the tree-sitter PHP grammar is not installed."""


class PhpLexer:
    """Parses PHP source with tree-sitter and flattens it into classified tokens."""

    def __init__(self) -> None:
        if not TREE_SITTER_AVAILABLE:
            raise LexerUnavailableError(
                "PHP tokenizing requires the 'tree-sitter' and 'tree-sitter-php' packages."
            )
        self._parser = Parser(Language(tree_sitter_php.language_php()))

    def tokenize(self, source: str | bytes, path: Optional[str] = None) -> TokenizedFile:
        source_bytes = source.encode("utf-8") if isinstance(source, str) else source
        tree = self._parser.parse(source_bytes)
        tokens: List[Token] = [Token(kind=TokenKind.FILE_START, position=0)]
        tokens.extend(self._collect_tokens(tree.root_node, source_bytes))
        return TokenizedFile(_dedupe(tokens), path=path)

    def tokenize_path(self, path: Path, display_path: Optional[str] = None) -> TokenizedFile:
        return self.tokenize(path.read_bytes(), path=display_path or str(path))

    def _collect_tokens(self, root, source_bytes: bytes) -> Iterator[Token]:  # type: ignore[no-untyped-def]
        stack = [root]
        while stack:
            node = stack.pop()
            yield from self._tokens_for_node(node, source_bytes)
            stack.extend(reversed(node.children))

    def _tokens_for_node(self, node, source_bytes: bytes) -> Iterator[Token]:  # type: ignore[no-untyped-def]
        node_type = node.type
        if node_type == "class_declaration":
            yield Token(
                kind=TokenKind.CLASS,
                position=node.start_byte,
                content="class",
                name=self._field_text(node, "name", source_bytes),
            )
        elif node_type in _FUNCTION_NODES:
            yield Token(
                kind=TokenKind.FUNCTION,
                position=node.start_byte,
                content="function",
                name=self._field_text(node, "name", source_bytes),
            )
        elif node_type == "const_declaration":
            yield Token(kind=TokenKind.CONST, position=node.start_byte, content="const")
        elif node_type == "const_element":
            name_node = next((child for child in node.named_children if child.type == "name"), None)
            if name_node is not None:
                yield Token(
                    kind=TokenKind.IDENTIFIER,
                    position=name_node.start_byte,
                    content=_node_text(name_node, source_bytes),
                )
        elif node_type == "function_call_expression":
            function = node.child_by_field_name("function")
            if function is not None and function.type in {"name", "qualified_name"}:
                name = _node_text(function, source_bytes).rsplit("\\", 1)[-1]
                yield Token(kind=TokenKind.IDENTIFIER, position=function.start_byte, content=name)
        elif node_type == "comment":
            text = _node_text(node, source_bytes)
            if text.startswith("/**") and text != "/**/":
                yield from _doc_comment_tokens(text, node.start_byte)
            else:
                yield Token(kind=TokenKind.COMMENT, position=node.start_byte, content=text)

    @staticmethod
    def _field_text(node, field: str, source_bytes: bytes) -> Optional[str]:  # type: ignore[no-untyped-def]
        child = node.child_by_field_name(field)
        return _node_text(child, source_bytes) if child is not None else None


def _node_text(node, source_bytes: bytes) -> str:  # type: ignore[no-untyped-def]
    return source_bytes[node.start_byte : node.end_byte].decode("utf-8", errors="ignore")


def _doc_comment_tokens(text: str, start_byte: int) -> Iterator[Token]:
    """Split a ``/** ... */`` comment into opener, tag, string and closer tokens."""
    yield Token(kind=TokenKind.DOC_COMMENT_OPEN, position=start_byte, content="/**")

    closed = text.endswith("*/") and len(text) >= 5
    body_end = len(text) - 2 if closed else len(text)
    offset = 3
    for line in text[3:body_end].splitlines(keepends=True):
        line_start = offset
        offset += len(line)

        lead = len(line) - len(line.lstrip())
        content = line[lead:]
        if content.startswith("*"):
            lead += 1
            content = content[1:]
        lead += len(content) - len(content.lstrip())
        content = content.strip()
        if not content:
            continue

        content_start = line_start + lead
        match = _DOC_TAG_PATTERN.match(content)
        if match is None:
            yield Token(
                kind=TokenKind.DOC_COMMENT_STRING,
                position=start_byte + _byte_len(text, content_start),
                content=content,
            )
            continue

        yield Token(
            kind=TokenKind.DOC_COMMENT_TAG,
            position=start_byte + _byte_len(text, content_start),
            content=match.group(0),
        )
        remainder = content[match.end() :]
        value = remainder.strip()
        if value:
            value_start = content_start + match.end() + (len(remainder) - len(remainder.lstrip()))
            yield Token(
                kind=TokenKind.DOC_COMMENT_STRING,
                position=start_byte + _byte_len(text, value_start),
                content=value,
            )

    if closed:
        yield Token(
            kind=TokenKind.DOC_COMMENT_CLOSE,
            position=start_byte + _byte_len(text, len(text) - 2),
            content="*/",
        )


def _byte_len(text: str, index: int) -> int:
    return len(text[:index].encode("utf-8"))


def _dedupe(tokens: List[Token]) -> List[Token]:
    seen = set()
    unique: List[Token] = []
    for token in tokens:
        if token.position in seen:
            continue
        seen.add(token.position)
        unique.append(token)
    return unique


__all__ = ["LexerUnavailableError", "PhpLexer", "TREE_SITTER_AVAILABLE"]
