"""Command line entry point for release-note."""

from __future__ import annotations

import argparse
import sys

from rich.console import Console
from rich_argparse import RichHelpFormatter

from release_note import __version__
from release_note.cli.commands.generate import run_generate
from release_note.logging import configure_logging


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="release-note",
        description="Generate a release note from conventional commits.",
        formatter_class=RichHelpFormatter,
    )
    parser.add_argument(
        "from_ref",
        metavar="FROM",
        nargs="?",
        default=None,
        help="Start of the commit range, inclusive (default: HEAD)",
    )
    parser.add_argument(
        "to_ref",
        metavar="TO",
        nargs="?",
        default=None,
        help="End of the commit range, exclusive (default: previous release tag)",
    )
    parser.add_argument("--path", metavar="DIR", default=None, help="Repository directory")
    parser.add_argument(
        "--previous-version",
        metavar="VERSION",
        default=None,
        help="Previous release version ('none' for a first release)",
    )
    parser.add_argument(
        "--format",
        dest="output_format",
        choices=["markdown", "text", "json"],
        default=None,
        help="Output format (default: from configuration, else markdown)",
    )
    parser.add_argument("--template", metavar="FILE", default=None, help="Jinja2 template file")
    parser.add_argument("--workers", type=_positive_int, default=None, help="Parser threads")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("-q", "--quiet", action="store_true", help="Only log warnings and errors")
    parser.add_argument("--json-log", action="store_true", help="Log as JSON lines")
    parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Parse arguments and run the generate command.

    Returns:
        Process exit code
    """
    args = build_parser().parse_args(argv)
    configure_logging(verbose=args.verbose, quiet=args.quiet, json_log=args.json_log)

    console = Console()
    err_console = Console(stderr=True)

    try:
        run_generate(
            path=args.path,
            from_ref=args.from_ref,
            to_ref=args.to_ref,
            previous_version=args.previous_version,
            output_format=args.output_format,
            template_path=args.template,
            workers=args.workers,
            console=console,
            err_console=err_console,
        )
    except SystemExit as e:
        return int(e.code or 0)
    return 0


if __name__ == "__main__":
    sys.exit(main())
