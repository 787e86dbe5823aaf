from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from texbib.core.config import Settings
from texbib.core.errors import BibliographyError
from texbib.domain.models.entry import Entry, FieldValue
from texbib.domain.tables import CROSSREF_INHERITANCE
from texbib.infrastructure.db.bib_database import BibDatabase

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class LoadSummary:
    path: Path
    entries: int
    preambles: int
    comments: int
    crossrefs_linked: int
    warnings: list[str] = field(default_factory=list)
    ok: bool = True
    error: str | None = None


@dataclass(slots=True)
class ValidationIssue:
    key: str
    entry_type: str
    message: str


@dataclass(slots=True)
class ValidationReport:
    entries_checked: int
    issues: list[ValidationIssue]

    @property
    def ok(self) -> bool:
        return not self.issues


@dataclass(slots=True)
class FieldView:
    name: str
    value: FieldValue
    inherited_from: str | None = None


class BibliographyService:
    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def open(self, bib_path: Path, *, strict: bool = True) -> BibDatabase:
        path = bib_path.expanduser().resolve()
        if not path.exists() or not path.is_file():
            raise BibliographyError(f"BibTeX file not found: {path}")

        db = BibDatabase(path, settings=self.settings)
        if not db.open() and strict:
            raise BibliographyError(f"Failed to load {path}: {db.error}")
        return db

    def summarize(self, db: BibDatabase) -> LoadSummary:
        return LoadSummary(
            path=db.path or Path(),
            entries=len(db),
            preambles=len(db.preambles),
            comments=len(db.comments),
            crossrefs_linked=sum(1 for entry in db if entry.crossref_link is not None),
            warnings=list(db.warnings),
            ok=db.ok,
            error=db.error,
        )

    def validate(self, db: BibDatabase) -> ValidationReport:
        issues: list[ValidationIssue] = []
        for entry in db:
            if entry.validate():
                continue
            for message in entry.validation_errors:
                issues.append(
                    ValidationIssue(key=entry.key or "", entry_type=entry.type or "", message=message)
                )
        logger.info("Validated %d entries, %d issues", len(db), len(issues))
        return ValidationReport(entries_checked=len(db), issues=issues)

    def normalize(self, bib_path: Path, output: Path | None = None, *, sort: bool = False) -> LoadSummary:
        """Re-emit a bibliography in canonical field order, optionally sorted."""
        db = self.open(bib_path)
        if sort:
            db.sort()
        target = (output or db.path or bib_path).expanduser()
        if not db.write(target):
            raise BibliographyError(f"Failed to write {target}: {db.error}")
        summary = self.summarize(db)
        summary.path = target
        return summary

    def describe(self, entry: Entry) -> list[FieldView]:
        """Return local fields plus values inherited through ``crossref``."""
        views = [FieldView(name=name, value=value) for name, value in entry.fields.items()]
        parent = entry.crossref_link
        if parent is None:
            return views

        local = set(entry.field_names())
        inheritable = CROSSREF_INHERITANCE.get(parent.type or "", {}).get(entry.type or "", {})
        for name in sorted(set(inheritable) - local):
            value = entry.resolve(name)
            if value is not None:
                views.append(FieldView(name=name, value=value, inherited_from=parent.key))
        return views
