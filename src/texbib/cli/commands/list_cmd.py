from __future__ import annotations

import argparse
from pathlib import Path

from rich.table import Table

from texbib.application.services.bibliography_service import BibliographyService
from texbib.cli.context import CLIContext


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("list", help="List entries with resolved year and title")
    parser.add_argument("bib_path", help="Path to .bib file")
    parser.add_argument("--limit", type=int, default=50)
    parser.add_argument("--sort", action="store_true", help="Sort on author, year and title")
    parser.set_defaults(handler=run_list)


def run_list(args: argparse.Namespace, ctx: CLIContext) -> int:
    service = BibliographyService(ctx.settings)
    db = service.open(Path(args.bib_path))
    if args.sort:
        db.sort()

    entries = db.entries[: args.limit]
    table = Table(title=f"Entries ({len(entries)} of {len(db)})")
    table.add_column("Key")
    table.add_column("Type")
    table.add_column("Authors", overflow="fold")
    table.add_column("Year")
    table.add_column("Title", overflow="fold")

    german = ctx.settings.german
    for entry in entries:
        names = entry.cleaned_authors(german=german) or entry.cleaned_editors(german=german)
        title = entry.cleaned_field("title", german=german) or ""
        year = entry.resolve("year") or entry.resolve("date") or ""
        table.add_row(
            entry.key or "",
            (entry.type or "").lower(),
            "; ".join(name.to_string("abbrev") for name in names),
            str(year),
            title,
        )

    ctx.console.print(table)
    return 0
