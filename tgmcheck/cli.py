"""CLI entrypoints for tgmcheck commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import REPORT_FORMATS, ConfigError, load_config
from .lexers import LexerUnavailableError
from .logging import configure_logging
from .reporting import Reporter
from .resolver import VersionResolver
from .runner import ScanRunner


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_github_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--github-token",
        default=None,
        help="GitHub token for the release lookup (overrides .tgmcheck.yml and GITHUB_OAUTH_TOKEN).",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Timeout in seconds for the release lookup.",
    )
    parser.add_argument(
        "--offline",
        action="store_true",
        help="Skip the release lookup and compare against the bundled fallback version.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tgmcheck",
        description="Detect bundled copies of TGM Plugin Activation and verify their version.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write logs to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    scan_parser = subparsers.add_parser(
        "scan",
        help="Scan a theme or plugin directory for TGMPA.",
    )
    _add_verbose_option(scan_parser, suppress_default=True)
    _add_github_options(scan_parser)
    scan_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Directory or file to scan (defaults to current directory).",
    )
    scan_parser.add_argument(
        "--format",
        choices=REPORT_FORMATS,
        default=None,
        help="Output format (defaults to text or report.format from .tgmcheck.yml).",
    )
    scan_parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with a failure status when only warnings were reported.",
    )

    latest_parser = subparsers.add_parser(
        "latest",
        help="Print the latest stable TGMPA release known to GitHub.",
    )
    _add_verbose_option(latest_parser, suppress_default=True)
    _add_github_options(latest_parser)

    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint for tgmcheck commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    config_root = Path(getattr(args, "path", "."))
    if config_root.is_file():
        config_root = config_root.parent
    try:
        config = load_config(config_root)
    except ConfigError as exc:
        parser.exit(2, f"{exc}\n")

    if args.timeout is not None:
        if args.timeout <= 0:
            parser.exit(2, "--timeout must be positive\n")
        config.github.request_timeout = args.timeout
    if args.offline:
        config.github.offline = True
    if getattr(args, "format", None) is not None:
        config.report.format = args.format

    configure_logging(
        verbose=bool(args.verbose),
        report_format=config.report.format,
        log_file=args.log_file,
    )

    if args.command == "latest":
        resolver = VersionResolver(
            token=config.github.oauth_token,
            api_url=config.github.api_url,
            request_timeout=config.github.request_timeout,
            offline=config.github.offline,
        )
        resolution = resolver.resolve(args.github_token)
        suffix = "" if resolution.from_upstream else " (fallback)"
        print(f"{resolution.version}{suffix}")
        if resolution.error is not None:
            print(f"warning: release lookup failed: {resolution.error.value}", file=sys.stderr)
        return 0

    if args.command == "scan":
        if args.strict:
            config.report.strict = True

        runner = ScanRunner.from_config(config, token=args.github_token)
        try:
            result = runner.run(args.path)
        except FileNotFoundError as exc:
            parser.exit(2, f"{exc}\n")
        except LexerUnavailableError as exc:
            parser.exit(2, f"{exc}\n")

        reporter = Reporter(format=config.report.format, strict=config.report.strict)
        print(reporter.render(result))
        return reporter.exit_code(result)

    parser.exit(2, "Unknown command\n")  # pragma: no cover - argparse enforces choices
    return 2


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
