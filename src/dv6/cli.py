"""
CLI interface for DV6.

Reads a glossary from a file or stdin, prints the parsed entries and reports
diagnostics on stderr.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from .config import get_config
from .dom import render_xml
from .errors import DV6Error
from .parser import ParseResult, parse

logger = logging.getLogger(__name__)


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="dv6",
        description="Parse DV6 glossary markup and report errors and warnings",
    )

    parser.add_argument(
        "file",
        nargs="?",
        help="Input file (reads from stdin if not provided)",
    )

    parser.add_argument(
        "--format",
        "-f",
        choices=["xml", "json"],
        default="xml",
        dest="output_format",
        help="Output format for parsed entries (default: xml)",
    )

    parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with an error status on warnings too",
    )

    parser.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Only report diagnostics, do not print entries",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )

    return parser.parse_args(args)


def read_input(filepath: str | None) -> str:
    """Read from file or stdin."""
    if filepath:
        with open(filepath, encoding="utf-8") as f:
            return f.read()
    return sys.stdin.read()


def format_entries(result: ParseResult, output_format: str) -> str:
    if output_format == "json":
        return json.dumps(result.to_data(), ensure_ascii=False, indent=2)
    return "\n".join(render_xml(entry.to_data(), indent=True) for entry in result.entries)


def configure_logging(verbose: bool) -> None:
    level = "DEBUG" if verbose else get_config().logging.level
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main(args: list[str] | None = None) -> int:
    """Main entry point. Returns exit code."""
    parsed = parse_args(args)

    try:
        configure_logging(parsed.verbose)
        content = read_input(parsed.file)
    except FileNotFoundError:
        print(f"Error: File not found: {parsed.file}", file=sys.stderr)
        return 1
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error reading input: {e}", file=sys.stderr)
        return 1
    except DV6Error as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    result = parse(content)
    logger.debug("read %d characters from %s", len(content), parsed.file or "stdin")

    if not parsed.quiet:
        output = format_entries(result, parsed.output_format)
        if output:
            print(output)

    for diagnostic in result.errors:
        print(f"error: {diagnostic}", file=sys.stderr)
    for diagnostic in result.warnings:
        print(f"warning: {diagnostic}", file=sys.stderr)

    if result.errors or (parsed.strict and result.warnings):
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
