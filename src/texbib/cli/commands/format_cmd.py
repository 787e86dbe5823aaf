from __future__ import annotations

import argparse
from pathlib import Path

from rich.panel import Panel

from texbib.application.services.bibliography_service import BibliographyService
from texbib.cli.context import CLIContext


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("format", help="Rewrite a .bib file in canonical field order")
    parser.add_argument("bib_path", help="Path to .bib file")
    parser.add_argument("-o", "--output", type=Path, default=None, help="Write here instead of in place")
    parser.add_argument("--sort", action="store_true", help="Sort on author, year and title")
    parser.set_defaults(handler=run_format)


def run_format(args: argparse.Namespace, ctx: CLIContext) -> int:
    service = BibliographyService(ctx.settings)
    summary = service.normalize(Path(args.bib_path), args.output, sort=args.sort)

    panel = Panel.fit(
        "\n".join(
            [
                f"Written to: {summary.path}",
                f"Entries: {summary.entries}",
                f"Preambles: {summary.preambles}",
                f"Comments: {summary.comments}",
            ]
        ),
        title="Format Summary",
    )
    ctx.console.print(panel)
    return 0
