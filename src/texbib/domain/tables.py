"""Static per-type tables shared by every entry.

The mandatory field groups and the cross-reference inheritance map follow the
BibLaTeX manual (entry types and appendix B, "Default Inheritance Setup"). A
mandatory group such as ``"author/editor"`` is satisfied by any one of its
alternatives.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType


def _freeze(table: dict) -> Mapping:
    return MappingProxyType(
        {key: _freeze(value) if isinstance(value, dict) else value for key, value in table.items()}
    )


MANDATORY_FIELDS: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        "ARTICLE": ("author", "title", "journaltitle", "year/date"),
        "BOOK": ("author", "title", "year/date"),
        "MVBOOK": ("author", "title", "year/date"),
        "INBOOK": ("author", "title", "booktitle", "year/date"),
        "BOOKINBOOK": ("author", "title", "booktitle", "year/date"),
        "SUPPBOOK": ("author", "title", "booktitle", "year/date"),
        "BOOKLET": ("author/editor", "title", "year/date"),
        "COLLECTION": ("editor", "title", "year/date"),
        "MVCOLLECTION": ("editor", "title", "year/date"),
        "INCOLLECTION": ("author", "title", "booktitle", "year/date"),
        "SUPPCOLLECTION": ("author", "title", "booktitle", "year/date"),
        "MANUAL": ("author/editor", "title", "year/date"),
        "MISC": ("author/editor", "title", "year/date"),
        "ONLINE": ("author/editor", "title", "year/date", "url"),
        "PATENT": ("author", "title", "number", "year/date"),
        "PERIODICAL": ("editor", "title", "year/date"),
        "SUPPPERIODICAL": ("author", "title", "journaltitle", "year/date"),
        "PROCEEDINGS": ("title", "year/date"),
        "MVPROCEEDINGS": ("title", "year/date"),
        "INPROCEEDINGS": ("author", "title", "booktitle", "year/date"),
        "REFERENCE": ("editor", "title", "year/date"),
        "MVREFERENCE": ("editor", "title", "year/date"),
        "INREFERENCE": ("author", "title", "booktitle", "year/date"),
        "REPORT": ("author", "title", "type", "institution", "year/date"),
        "SET": ("entryset",),
        "THESIS": ("author", "title", "type", "institution", "year/date"),
        "UNPUBLISHED": ("author", "title", "year/date"),
        "XDATA": (),
        # BibTeX aliases
        "CONFERENCE": ("author", "title", "booktitle", "year/date"),
        "ELECTRONIC": ("author/editor", "title", "year/date", "url"),
        "MASTERSTHESIS": ("author", "title", "type", "institution", "year/date"),
        "PHDTHESIS": ("author", "title", "type", "institution", "year/date"),
        "TECHREPORT": ("author", "title", "type", "institution", "year/date"),
        "WWW": ("author/editor", "title", "year/date", "url"),
    }
)

SERIALISATION_ORDER: tuple[str, ...] = (
    "author",
    "title",
    "subtitle",
    "titleaddon",
    "editor",
    "booktitle",
    "booksubtitle",
    "booktitleaddon",
    "maintitle",
    "mainsubtitle",
    "maintitleaddon",
    "journaltitle",
    "journalsubtitle",
    "issuetitle",
    "publisher",
    "institution",
    "location",
    "year",
    "date",
    "series",
    "volumes",
    "volume",
    "number",
    "pages",
    "doi",
    "url",
    "file",
)

_MAIN_TITLE = {
    "maintitle": "title",
    "mainsubtitle": "subtitle",
    "maintitleaddon": "titleaddon",
    "year": "year",
    "date": "date",
}
_MAIN_TITLE_WITH_AUTHOR = {"author": "author", "bookauthor": "author", **_MAIN_TITLE}
_BOOK_TITLE = {
    "booktitle": "title",
    "booksubtitle": "subtitle",
    "booktitleaddon": "titleaddon",
    "year": "year",
    "date": "date",
}
_BOOK_TITLE_WITH_AUTHOR = {"author": "author", "bookauthor": "author", **_BOOK_TITLE}
_JOURNAL_TITLE = {
    "journaltitle": "title",
    "journalsubtitle": "subtitle",
    "year": "year",
    "date": "date",
}

# parent type -> child type -> child field -> parent field
CROSSREF_INHERITANCE: Mapping[str, Mapping[str, Mapping[str, str]]] = _freeze(
    {
        "MVBOOK": {
            "INBOOK": _MAIN_TITLE_WITH_AUTHOR,
            "BOOK": _MAIN_TITLE,
            "BOOKINBOOK": _MAIN_TITLE_WITH_AUTHOR,
            "SUPPBOOK": _MAIN_TITLE_WITH_AUTHOR,
        },
        "MVCOLLECTION": {
            "COLLECTION": _MAIN_TITLE,
            "INCOLLECTION": _MAIN_TITLE,
            "SUPPCOLLECTION": _MAIN_TITLE,
        },
        "MVREFERENCE": {
            "REFERENCE": _MAIN_TITLE,
            "INREFERENCE": _MAIN_TITLE,
        },
        "MVPROCEEDINGS": {
            "PROCEEDINGS": _MAIN_TITLE,
            "INPROCEEDINGS": _MAIN_TITLE,
        },
        "BOOK": {
            "INBOOK": _BOOK_TITLE_WITH_AUTHOR,
            "BOOKINBOOK": _BOOK_TITLE_WITH_AUTHOR,
            "SUPPBOOK": _BOOK_TITLE_WITH_AUTHOR,
        },
        "COLLECTION": {
            "INCOLLECTION": _BOOK_TITLE,
            "SUPPCOLLECTION": _BOOK_TITLE,
        },
        "REFERENCE": {
            "INREFERENCE": _BOOK_TITLE,
        },
        "PROCEEDINGS": {
            "INPROCEEDINGS": _BOOK_TITLE,
        },
        "PERIODICAL": {
            "ARTICLE": _JOURNAL_TITLE,
            "SUPPPERIODICAL": _JOURNAL_TITLE,
        },
    }
)


def inherited_field(parent_type: str, child_type: str, field: str) -> str | None:
    """Return the parent field a child field inherits from, if any."""
    return CROSSREF_INHERITANCE.get(parent_type, {}).get(child_type, {}).get(field)
