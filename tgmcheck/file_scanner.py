"""Discovery of the PHP files a scan should look at."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from fnmatch import translate
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Pattern, Sequence

# Tooling and dependency folders that never hold a theme's own bundled copy.
_SKIPPED_DIRS = frozenset(
    {".git", ".hg", ".svn", ".idea", ".vscode", ".venv", "node_modules", "__pycache__"}
)


@dataclass(frozen=True)
class PathPattern:
    """A gitignore-style pattern compiled against POSIX paths relative to the scan root."""

    source: str
    regex: Pattern[str]
    directories_only: bool
    reinclude: bool

    def applies_to(self, rel_path: str, is_dir: bool) -> bool:
        if self.directories_only and not is_dir:
            return False
        return self.regex.match(rel_path) is not None


def compile_pattern(line: str) -> Optional[PathPattern]:
    """Compile one ``.gitignore`` line or ``scan.exclude_paths`` entry.

    Patterns containing a slash are anchored at the scan root; bare names
    match at any depth. A leading ``!`` re-includes what an earlier pattern
    excluded, and a trailing ``/`` restricts the pattern to directories.
    """
    text = line.strip()
    if not text or text.startswith("#"):
        return None

    reinclude = text.startswith("!")
    if reinclude:
        text = text[1:]
    directories_only = text.endswith("/")
    anchored = "/" in text.rstrip("/")
    text = text.strip("/")
    if not text:
        return None

    prefix = "" if anchored else r"(?:.*/)?"
    return PathPattern(
        source=line.strip(),
        regex=re.compile(prefix + translate(text)),
        directories_only=directories_only,
        reinclude=reinclude,
    )


@dataclass(frozen=True)
class SourceFile:
    """A file selected for scanning."""

    path: Path
    relative: str


class FileScanner:
    """Walks a theme or plugin tree and lists files with a scannable extension.

    ``exclude_paths`` entries and the root ``.gitignore`` form one ordered
    pattern list; the last pattern matching a path decides whether it is
    skipped, so the configured excludes can override the repository's own.
    """

    def __init__(
        self,
        *,
        extensions: Iterable[str] = (".php",),
        exclude_paths: Iterable[str] = (),
    ) -> None:
        self.extensions = frozenset(ext.lower() for ext in extensions)
        self.exclude_patterns: List[PathPattern] = _compile_all(exclude_paths)

    def scan(self, root: str | Path) -> List[SourceFile]:
        """Return matching files below ``root`` (or ``root`` itself when it is a file), sorted."""
        root_path = Path(root).expanduser().resolve()
        if not root_path.exists():
            raise FileNotFoundError(f"Path not found: {root}")
        if root_path.is_file():
            return [SourceFile(path=root_path, relative=root_path.name)]

        patterns = self.patterns_for(root_path)
        files = [
            SourceFile(path=root_path / relative, relative=relative)
            for relative in self._walk(root_path, patterns)
            if Path(relative).suffix.lower() in self.extensions
        ]
        return sorted(files, key=lambda item: item.relative)

    def patterns_for(self, root: Path) -> List[PathPattern]:
        gitignore = root / ".gitignore"
        lines: Sequence[str] = ()
        if gitignore.is_file():
            lines = gitignore.read_text(encoding="utf-8", errors="ignore").splitlines()
        return _compile_all(lines) + self.exclude_patterns

    def _walk(self, root: Path, patterns: Sequence[PathPattern]) -> Iterator[str]:
        for dirpath, dirnames, filenames in os.walk(root):
            base = Path(dirpath).relative_to(root).as_posix()
            prefix = "" if base == "." else f"{base}/"
            dirnames[:] = [
                name
                for name in dirnames
                if name not in _SKIPPED_DIRS and not _excluded(f"{prefix}{name}", True, patterns)
            ]
            for filename in filenames:
                relative = f"{prefix}{filename}"
                if not _excluded(relative, False, patterns):
                    yield relative


def _compile_all(lines: Iterable[str]) -> List[PathPattern]:
    return [pattern for pattern in map(compile_pattern, lines) if pattern is not None]


def _excluded(rel_path: str, is_dir: bool, patterns: Sequence[PathPattern]) -> bool:
    excluded = False
    for pattern in patterns:
        if pattern.applies_to(rel_path, is_dir):
            excluded = not pattern.reinclude
    return excluded


__all__ = ["FileScanner", "PathPattern", "SourceFile", "compile_pattern"]
