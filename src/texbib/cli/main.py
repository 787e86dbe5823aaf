from __future__ import annotations

import argparse
import logging

from rich.console import Console

from texbib.cli.commands import check_cmd, format_cmd, list_cmd, names_cmd, show_cmd
from texbib.cli.context import CLIContext
from texbib.core.config import load_settings
from texbib.core.errors import TexbibError
from texbib.core.logging import configure_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="texbib",
        description="Read, check and rewrite BibTeX/BibLaTeX files",
    )
    parser.add_argument(
        "--encoding",
        default=None,
        help="Encoding of .bib files (default: $TEXBIB_ENCODING or utf-8)",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0)

    subparsers = parser.add_subparsers(dest="command", required=True)
    check_cmd.register(subparsers)
    list_cmd.register(subparsers)
    show_cmd.register(subparsers)
    format_cmd.register(subparsers)
    names_cmd.register(subparsers)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose)
    console = Console()

    handler = getattr(args, "handler", None)
    if handler is None:
        parser.print_help()
        return 2

    try:
        ctx = CLIContext(settings=load_settings(args.encoding), console=console)
        return handler(args, ctx)
    except TexbibError as exc:
        logger.error(str(exc))
        return 1
