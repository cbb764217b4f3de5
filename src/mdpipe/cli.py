#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdpipe/cli.py
"""Command-line interface for mdpipe.

Subcommands:

- ``format``: parse a markdown file and write it back out normalized
- ``tree``: print the document tree (or syntax tree) as JSON
- ``check``: report parser selection, sniffed extensions and round-trip stability

Exit codes are 0 on success, 1 when a check fails, 2 on usage errors and
3 when the pipeline fails.

"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, get_args

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from mdpipe.ast.serialization import ast_to_json, document_to_json
from mdpipe.constants import HardBreakStyle
from mdpipe.escaping import preprocess_escaped_markers
from mdpipe.exceptions import MdPipeError
from mdpipe.logging_utils import configure_logging
from mdpipe.options import PipelineOptions
from mdpipe.pipeline import PipelineContext
from mdpipe.sniffing import analyze_content, select_parser

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_CHECK_FAILED = 1
EXIT_USAGE_ERROR = 2
EXIT_PIPELINE_ERROR = 3


def get_version() -> str:
    """Get the installed version of mdpipe."""
    try:
        from importlib.metadata import PackageNotFoundError, version

        return version("mdpipe")
    except PackageNotFoundError:
        return "unknown"


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands.

    Returns
    -------
    argparse.ArgumentParser
        Configured parser

    """
    parser = argparse.ArgumentParser(
        prog="mdpipe",
        description="Parse, inspect and normalize markdown documents.",
    )
    parser.add_argument("--version", "-V", action="version", version=f"mdpipe {get_version()}")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Set logging level (default: WARNING)",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        metavar="PATH",
        help="Write log messages to specified file in addition to console output",
    )
    parser.add_argument(
        "--trace",
        action="store_true",
        help="Enable trace mode with timestamps and logger names in log output",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    format_parser = subparsers.add_parser("format", help="Parse and re-serialize a markdown file")
    format_parser.add_argument("file", type=Path, help="Markdown file to normalize")
    format_parser.add_argument("-o", "--out", type=Path, metavar="OUT", help="Write output here instead of stdout")
    format_parser.add_argument(
        "--preserve-line-breaks",
        action="store_true",
        help="Treat single newlines inside paragraphs as hard line breaks",
    )
    format_parser.add_argument(
        "--hard-break-style",
        choices=list(get_args(HardBreakStyle)),
        default=None,
        help="Markup used for hard line breaks (default: backslash)",
    )

    tree_parser = subparsers.add_parser("tree", help="Print the parsed tree as JSON")
    tree_parser.add_argument("file", type=Path, help="Markdown file to parse")
    tree_parser.add_argument("--syntax", action="store_true", help="Print the syntax tree instead of the document tree")

    check_parser = subparsers.add_parser("check", help="Check parser selection and round-trip stability")
    check_parser.add_argument("file", type=Path, help="Markdown file to check")

    return parser


def _options_from_args(args: argparse.Namespace) -> Optional[PipelineOptions]:
    """Build pipeline options only when an option flag was given."""
    if not args.preserve_line_breaks and args.hard_break_style is None:
        return None
    return PipelineOptions(
        preserve_line_breaks=args.preserve_line_breaks,
        hard_break_style=args.hard_break_style or "backslash",
    )


def _read_input(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def run_format(args: argparse.Namespace, context: PipelineContext, console: Console) -> int:
    """Normalize a markdown file."""
    text = _read_input(args.file)
    options = _options_from_args(args)
    result = context.serialize(context.parse(text, options), options) + "\n"

    if args.out:
        args.out.write_text(result, encoding="utf-8")
        logger.info(f"Wrote {len(result)} characters to {args.out}")
    else:
        sys.stdout.write(result)
    return EXIT_SUCCESS


def run_tree(args: argparse.Namespace, context: PipelineContext, console: Console) -> int:
    """Print the document tree or syntax tree of a markdown file as JSON."""
    text = _read_input(args.file)
    if args.syntax:
        console.print_json(ast_to_json(context.parse_to_syntax_tree(text)))
    else:
        console.print_json(document_to_json(context.parse(text)))
    return EXIT_SUCCESS


def run_check(args: argparse.Namespace, context: PipelineContext, console: Console) -> int:
    """Report how a file is parsed and whether it round-trips stably.

    The round trip is stable when serializing the re-parsed output gives
    the output back unchanged.
    """
    text = _read_input(args.file)
    source = preprocess_escaped_markers(text)
    parser_kind = select_parser(source)
    extensions = analyze_content(source).enabled()

    first = context.serialize(context.parse(text))
    second = context.serialize(context.parse(first))
    stable = first == second

    table = Table(title=escape(str(args.file)), show_header=False)
    table.add_column("Property", style="cyan")
    table.add_column("Value")
    table.add_row("Parser", parser_kind)
    table.add_row("Extensions", ", ".join(extensions) or "none")
    table.add_row("Round trip", "[green]stable[/green]" if stable else "[red]unstable[/red]")
    console.print(table)

    if not stable:
        logger.debug(f"First serialization:\n{first}\nSecond serialization:\n{second}")
        return EXIT_CHECK_FAILED
    return EXIT_SUCCESS


COMMANDS = {
    "format": run_format,
    "tree": run_tree,
    "check": run_check,
}


def main(argv: Optional[list[str]] = None) -> int:
    """Run the command-line interface.

    Parameters
    ----------
    argv : list of str, optional
        Arguments; ``sys.argv[1:]`` when omitted

    Returns
    -------
    int
        Process exit code

    """
    parser = create_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else EXIT_SUCCESS

    configure_logging(args.log_level, log_file=args.log_file, trace_mode=args.trace)
    console = Console()
    error_console = Console(stderr=True)

    if not args.file.is_file():
        error_console.print(f"[red]Error:[/red] Input file not found: {escape(str(args.file))}")
        return EXIT_USAGE_ERROR

    with PipelineContext() as context:
        try:
            return COMMANDS[args.command](args, context, console)
        except (OSError, UnicodeDecodeError) as e:
            error_console.print(f"[red]Error:[/red] Could not access {escape(str(args.file))}: {escape(str(e))}")
            return EXIT_USAGE_ERROR
        except MdPipeError as e:
            logger.debug("Pipeline failure", exc_info=True)
            error_console.print(f"[red]Error:[/red] {escape(str(e))}")
            return EXIT_PIPELINE_ERROR


if __name__ == "__main__":
    sys.exit(main())
