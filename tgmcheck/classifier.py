"""Heuristics recognising a vendored TGM Plugin Activation file."""

from __future__ import annotations

import os
from typing import FrozenSet, Optional

from .models import TokenKind
from .source import TokenSource

VENDOR_FILENAMES: FrozenSet[str] = frozenset(
    {"class-tgm-plugin-activation.php", "tgm-plugin-activation.php"}
)
VENDOR_CLASS_NAME = "TGM_Plugin_Activation"
VENDOR_BOOTSTRAP_FUNCTION = "tgmpa"
VENDOR_VERSION_CONSTANT = "TGMPA_VERSION"
HOOK_REGISTRATION_CALLS: FrozenSet[str] = frozenset({"do_action"})


class SignatureClassifier:
    """Decides from a file name and a single token whether a file is TGMPA.

    Authors regularly rename the file, prefix the class or strip its docs, so
    several independent signatures are checked. A miss on one token says
    nothing about the file; the next token gets its own chance.
    """

    def __init__(
        self,
        *,
        filenames: FrozenSet[str] = VENDOR_FILENAMES,
        class_name: str = VENDOR_CLASS_NAME,
        bootstrap_function: str = VENDOR_BOOTSTRAP_FUNCTION,
        version_constant: str = VENDOR_VERSION_CONSTANT,
    ) -> None:
        self.filenames = frozenset(name.lower() for name in filenames)
        self.class_name = class_name
        self.bootstrap_function = bootstrap_function
        self.version_constant = version_constant

    def classify(self, filename: Optional[str], source: TokenSource, position: int) -> bool:
        if filename and self.matches_filename(filename):
            return True

        token = source.token_at(position)
        if token is None:
            return False

        if token.kind is TokenKind.CLASS:
            return source.declaration_name(position) == self.class_name
        if token.kind is TokenKind.FUNCTION:
            return source.declaration_name(position) == self.bootstrap_function
        if token.kind is TokenKind.CONST:
            name_token = source.next_significant(position)
            return (
                name_token is not None
                and name_token.kind is TokenKind.IDENTIFIER
                and name_token.content == self.version_constant
            )
        if token.kind is TokenKind.IDENTIFIER and token.content in HOOK_REGISTRATION_CALLS:
            # TODO: match `do_action( 'tgmpa_register' )` once call arguments are exposed by the lexer.
            return False
        return False

    def matches_filename(self, filename: str) -> bool:
        basename = os.path.basename(filename.replace("\\", "/")).lower()
        return basename in self.filenames


__all__ = [
    "HOOK_REGISTRATION_CALLS",
    "SignatureClassifier",
    "VENDOR_BOOTSTRAP_FUNCTION",
    "VENDOR_CLASS_NAME",
    "VENDOR_FILENAMES",
    "VENDOR_VERSION_CONSTANT",
]
