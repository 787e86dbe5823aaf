from __future__ import annotations

import argparse
from pathlib import Path

from rich.table import Table

from texbib.application.services.bibliography_service import BibliographyService
from texbib.cli.context import CLIContext
from texbib.core.errors import BibliographyError


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("show", help="Show one entry, including inherited fields")
    parser.add_argument("bib_path", help="Path to .bib file")
    parser.add_argument("key", help="Entry key")
    parser.add_argument(
        "--names",
        default="lastfirst",
        choices=["lastfirst", "firstlast", "abbrev", "last"],
        help="Format for author/editor names",
    )
    parser.set_defaults(handler=run_show)


def run_show(args: argparse.Namespace, ctx: CLIContext) -> int:
    service = BibliographyService(ctx.settings)
    db = service.open(Path(args.bib_path))
    entry = db.lookup(args.key)
    if entry is None:
        raise BibliographyError(f"Entry not found for key: {args.key}")

    table = Table(title=f"@{(entry.type or '').lower()}{{{entry.key}}}")
    table.add_column("Field")
    table.add_column("Value", overflow="fold")
    table.add_column("Inherited From")
    for view in service.describe(entry):
        table.add_row(view.name, str(view.value), view.inherited_from or "")
    ctx.console.print(table)

    people = Table(title="Names")
    people.add_column("Role")
    people.add_column("First")
    people.add_column("von")
    people.add_column("Last")
    people.add_column("Jr")
    people.add_column("Formatted", overflow="fold")
    for role, persons in (("author", entry.authors()), ("editor", entry.editors())):
        for person in persons:
            people.add_row(
                role,
                person.first or "",
                person.von or "",
                person.last or "",
                person.jr or "",
                person.to_string(args.names),
            )
    if people.row_count:
        ctx.console.print(people)
    return 0
