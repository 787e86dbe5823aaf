from __future__ import annotations

import argparse

from rich.table import Table

from texbib.cli.context import CLIContext
from texbib.domain.models.person import split_name


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("names", help="Split personal names into first/von/last/jr")
    parser.add_argument("names", nargs="+", help="Names such as 'Ludwig van Beethoven'")
    parser.set_defaults(handler=run_names)


def run_names(args: argparse.Namespace, ctx: CLIContext) -> int:
    table = Table(title="Name Parts")
    table.add_column("Input", overflow="fold")
    table.add_column("First")
    table.add_column("von")
    table.add_column("Last")
    table.add_column("Jr")
    for raw in args.names:
        person = split_name(raw)
        table.add_row(raw, person.first or "", person.von or "", person.last or "", person.jr or "")
    ctx.console.print(table)
    return 0
