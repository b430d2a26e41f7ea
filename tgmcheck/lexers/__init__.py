"""Lexer adapters turning source text into token streams."""

from .php import TREE_SITTER_AVAILABLE, LexerUnavailableError, PhpLexer

__all__ = ["LexerUnavailableError", "PhpLexer", "TREE_SITTER_AVAILABLE"]
