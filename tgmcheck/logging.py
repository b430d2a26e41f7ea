"""Logging setup for tgmcheck; logs go to stderr so stdout carries only the report."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

_ROOT = "tgmcheck"
_CONSOLE_FORMAT = "[%(name)s] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(component: str | None = None) -> logging.Logger:
    """Return ``tgmcheck`` or ``tgmcheck.<component>``."""
    return logging.getLogger(f"{_ROOT}.{component}" if component else _ROOT)


def console_level(*, verbose: bool, report_format: str = "text") -> int:
    """DEBUG when verbose; JSON runs only surface warnings, text runs also show progress."""
    if verbose:
        return logging.DEBUG
    if report_format == "json":
        return logging.WARNING
    return logging.INFO


def configure_logging(
    *,
    verbose: bool = False,
    report_format: str = "text",
    log_file: Path | None = None,
) -> logging.Logger:
    root = logging.getLogger(_ROOT)
    root.propagate = False
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    level = console_level(verbose=verbose, report_format=report_format)
    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    root.addHandler(console)

    if log_file is not None:
        # The file always gets the full debug trail.
        sink = logging.FileHandler(log_file, encoding="utf-8")
        sink.setLevel(logging.DEBUG)
        sink.setFormatter(logging.Formatter(_FILE_FORMAT))
        root.addHandler(sink)
        level = logging.DEBUG

    root.setLevel(level)
    return root


__all__ = ["configure_logging", "console_level", "get_logger"]
