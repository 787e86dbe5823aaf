"""Read, modify and write BibTeX/BibLaTeX files.

``BibDatabase`` loads a file into ``Entry`` objects, links cross-referenced
entries so ``Entry.resolve`` can inherit fields, and writes the entries back.
``split_name`` decomposes personal names into first, von, last and jr parts.
"""

from texbib.core.text import split_braced
from texbib.domain.models.entry import Entry
from texbib.domain.models.file_link import FileLink
from texbib.domain.models.person import PersonName, split_name
from texbib.infrastructure.db.bib_database import BibDatabase
from texbib.infrastructure.parsers.bibtex_parser import BibTeXParser, MacroTable, parse_bibtex

__version__ = "0.1.0"

__all__ = [
    "BibDatabase",
    "BibTeXParser",
    "Entry",
    "FileLink",
    "MacroTable",
    "PersonName",
    "parse_bibtex",
    "split_braced",
    "split_name",
]
