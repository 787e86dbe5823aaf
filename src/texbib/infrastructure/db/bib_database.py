from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterator
from pathlib import Path

from texbib.core.config import Settings, load_settings
from texbib.core.errors import DuplicateKeyError
from texbib.core.text import collation_key
from texbib.domain.models.entry import Entry
from texbib.infrastructure.parsers.bibtex_parser import BibTeXParser

logger = logging.getLogger(__name__)

_NON_DIGITS = re.compile(r"[^0-9]")


class BibDatabase:
    """Ordered, key-indexed collection of entries backed by a ``.bib`` file.

    Ingestion stops at the first entry that failed to parse or repeats a key;
    everything read before that point is kept and ``ok`` turns false.
    """

    def __init__(self, path: Path | str | None = None, *, settings: Settings | None = None) -> None:
        self.path = Path(path) if path is not None else None
        self.settings = settings or load_settings()
        self.entries: list[Entry] = []
        self.preambles: list[Entry] = []
        self.comments: list[Entry] = []
        self.warnings: list[str] = []
        self.ok = True
        self._error: str | None = None
        self._index: dict[str, Entry] = {}
        self._isbn_index: dict[str, Entry] | None = None
        self._bibid_index: dict[str, Entry] | None = None

    @property
    def error(self) -> str | None:
        return None if self.ok else self._error

    def _fail(self, message: str) -> bool:
        self._error = message
        self.ok = False
        logger.error(message)
        return False

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[Entry]:
        return iter(self.entries)

    def __getitem__(self, position: int) -> Entry:
        return self.entries[position]

    def open(self, path: Path | str | None = None) -> bool:
        if path is not None:
            self.path = Path(path)
        if self.path is None or not self.path.is_file():
            return self._fail("File not found")

        try:
            text = self.path.read_text(encoding=self.settings.encoding)
        except UnicodeDecodeError as exc:
            return self._fail(f"Cannot decode {self.path} as {self.settings.encoding}: {exc.reason}")
        except LookupError:
            return self._fail(f"Unknown encoding {self.settings.encoding}")
        return self.load_text(text)

    def load_text(self, text: str) -> bool:
        self.ok = True
        self._error = None
        self.entries = []
        self.preambles = []
        self.comments = []
        self.warnings = []
        self._index = {}
        self._isbn_index = None
        self._bibid_index = None
        parser = BibTeXParser(text)
        for entry in parser:
            if not entry.parse_ok:
                self._fail(f"Parse failed: {entry.error} (line {entry.line})")
                break
            try:
                self.add(entry)
            except DuplicateKeyError as exc:
                self._fail(str(exc))
                break

        # Linking after the read loop makes source order irrelevant.
        self.link_crossrefs()
        return self.ok

    def add(self, entry: Entry) -> None:
        if entry.is_comment:
            self.comments.append(entry)
            return
        if entry.is_preamble:
            self.preambles.append(entry)
            return

        if entry.key in self._index:
            raise DuplicateKeyError(entry.key or "")
        self.entries.append(entry)
        self._index[entry.key or ""] = entry
        self._isbn_index = None
        self._bibid_index = None

    def link_crossrefs(self) -> int:
        """Point each entry with a ``crossref`` field at its parent; return links made."""
        linked = 0
        for entry in self.entries:
            target_key = entry.field("crossref")
            if target_key is None:
                continue
            parent = self._index.get(str(target_key))
            if parent is None:
                message = f"{target_key} cross-referenced from {entry.key} not found"
                self.warnings.append(message)
                logger.warning(message)
                continue
            entry.crossref_link = parent
            linked += 1
        return linked

    def lookup(self, key: str) -> Entry | None:
        return self._index.get(key)

    def lookup_isbn(self, isbn: str) -> Entry | None:
        if self._isbn_index is None:
            self._isbn_index = self._build_index("isbn", normalize=lambda v: _NON_DIGITS.sub("", v))
        return self._isbn_index.get(_NON_DIGITS.sub("", isbn))

    def lookup_bibid(self, bibid: str) -> Entry | None:
        """Find an entry by its LIBRIS ``bibid`` field."""
        if self._bibid_index is None:
            self._bibid_index = self._build_index("bibid")
        return self._bibid_index.get(bibid)

    def _build_index(self, field: str, normalize: Callable[[str], str] = str) -> dict[str, Entry]:
        index: dict[str, Entry] = {}
        for entry in self.entries:
            value = entry.field(field)
            if value is not None:
                index[normalize(str(value))] = entry
        return index

    def sort(self) -> None:
        """Sort entries on author, year and title."""
        self.entries.sort(key=lambda entry: (collation_key(entry.sort_key), entry.sort_key))

    def write(self, path: Path | str | None = None) -> bool:
        target = Path(path) if path is not None else self.path
        if target is None:
            return self._fail("No output file specified")

        blocks: list[str] = []
        if self.settings.write_header:
            # JabRef 3.2 misreads files without it.
            blocks.append(f"% Encoding: {self.settings.encoding.upper()}")
        blocks.extend(entry.to_string() for entry in self.preambles)
        blocks.extend(
            entry.to_string(timestamp_format=self.settings.timestamp_format) for entry in self.entries
        )
        blocks.extend(entry.to_string() for entry in self.comments)

        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text("".join(f"{block}\n\n" for block in blocks), encoding=self.settings.encoding)
        return True
