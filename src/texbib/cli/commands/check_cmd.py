from __future__ import annotations

import argparse
from pathlib import Path

from rich.panel import Panel
from rich.table import Table

from texbib.application.services.bibliography_service import BibliographyService
from texbib.cli.context import CLIContext


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("check", help="Parse a .bib file and validate mandatory fields")
    parser.add_argument("bib_path", help="Path to .bib file")
    parser.set_defaults(handler=run_check)


def run_check(args: argparse.Namespace, ctx: CLIContext) -> int:
    service = BibliographyService(ctx.settings)
    db = service.open(Path(args.bib_path), strict=False)
    summary = service.summarize(db)
    report = service.validate(db)

    lines = [
        f"Entries: {summary.entries}",
        f"Preambles: {summary.preambles}",
        f"Comments: {summary.comments}",
        f"Cross-references linked: {summary.crossrefs_linked}",
        f"Validation issues: {len(report.issues)}",
        f"Status: {'PASS' if summary.ok and report.ok else 'FAIL'}",
    ]
    if summary.error:
        lines.append(f"[red]{summary.error}[/red]")
    ctx.console.print(Panel.fit("\n".join(lines), title="Check Summary"))

    if summary.warnings:
        warnings = Table(title="Warnings")
        warnings.add_column("Message", overflow="fold")
        for message in summary.warnings:
            warnings.add_row(message)
        ctx.console.print(warnings)

    if report.issues:
        table = Table(title="Validation Issues")
        table.add_column("Key")
        table.add_column("Type")
        table.add_column("Message", overflow="fold")
        for issue in report.issues:
            table.add_row(issue.key, issue.entry_type, issue.message)
        ctx.console.print(table)

    return 0 if summary.ok and report.ok else 1
