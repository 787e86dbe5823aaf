"""A single BibTeX/BibLaTeX entry.

Architecture
: Field values are stored under lowercase names, either as ``str`` or, for bare
  numeric literals, as ``int`` so that serialization can write them unbraced.
: ``crossref_link`` is a non-owning reference to the parent entry. It is set by
  the owning collection after the whole file has been read, which keeps source
  order irrelevant for inheritance.
: Person lists (author/editor) and file links are derived lazily from field
  values and cached until the underlying field is replaced.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from types import MappingProxyType

from texbib.core.errors import MissingMandatoryFieldError, UnknownTypeError
from texbib.core.text import split_braced
from texbib.core.time import today_stamp
from texbib.domain.models.file_link import FileLink
from texbib.domain.models.person import PersonName, split_name
from texbib.domain.tables import MANDATORY_FIELDS, SERIALISATION_ORDER, inherited_field
from texbib.infrastructure.parsers.latex_text import convert

logger = logging.getLogger(__name__)

FieldValue = str | int

VERBATIM_TYPES = frozenset({"COMMENT", "PREAMBLE"})
PERSON_FIELDS = ("author", "editor")

_AND = re.compile(r"\s+and\s+", re.IGNORECASE)
_TITLE_STRIP = re.compile(r"[-\s.]+")


class Entry:
    def __init__(
        self,
        type: str | None = None,
        key: str | None = None,
        fields: Mapping[str, FieldValue] | None = None,
        *,
        parse_ok: bool = True,
        raw: str = "",
        line: int | None = None,
    ) -> None:
        self._type = type.upper() if type else None
        self.key = key
        self._fields: dict[str, FieldValue] = {}
        for name, value in (fields or {}).items():
            self._fields[name.lower()] = value
        self.parse_ok = parse_ok
        self.raw = raw
        self.line = line
        self.modified = False
        self.crossref_link: Entry | None = None
        self.validation_errors: list[str] = []
        self._error: str | None = None
        self._error_kind: str | None = None
        self._persons: dict[str, list[PersonName]] = {}
        self._files: list[FileLink] | None = None
        self._sort_key: str | None = None

    def __repr__(self) -> str:
        return f"Entry(type={self._type!r}, key={self.key!r}, parse_ok={self.parse_ok})"

    @property
    def type(self) -> str | None:
        """Entry type, always uppercase (e.g. ``ARTICLE``)."""
        return self._type

    @type.setter
    def type(self, value: str) -> None:
        self._type = value.upper()

    @property
    def error(self) -> str | None:
        return None if self.parse_ok else self._error

    @property
    def error_kind(self) -> str | None:
        return None if self.parse_ok else self._error_kind

    def fail(self, message: str, *, kind: str | None = None, line: int | None = None) -> None:
        self._error = message
        self._error_kind = kind
        if line is not None:
            self.line = line
        self.parse_ok = False

    @property
    def is_comment(self) -> bool:
        return self._type == "COMMENT"

    @property
    def is_preamble(self) -> bool:
        return self._type == "PREAMBLE"

    @property
    def fields(self) -> Mapping[str, FieldValue]:
        return MappingProxyType(self._fields)

    def field_names(self) -> list[str]:
        return list(self._fields)

    def has(self, name: str) -> bool:
        return self._fields.get(name.lower()) is not None

    def field(self, name: str) -> FieldValue | None:
        return self._fields.get(name.lower())

    def set_field(self, name: str, value: FieldValue) -> None:
        self._store(name.lower(), value)
        self.modified = True

    def remove(self, name: str) -> bool:
        name = name.lower()
        if name not in self._fields:
            return False
        del self._fields[name]
        self._forget_derived(name)
        self.modified = True
        return True

    def _store(self, name: str, value: FieldValue) -> None:
        self._fields[name] = value
        self._forget_derived(name)

    def _forget_derived(self, name: str) -> None:
        self._persons.pop(name, None)
        if name == "file":
            self._files = None

    def resolve(self, name: str) -> FieldValue | None:
        """Return a field, falling back to the cross-referenced parent.

        The parent field consulted depends on the parent and child types, e.g.
        ``booktitle`` of an INCOLLECTION comes from ``title`` of its COLLECTION.
        """
        return self._resolve(name.lower(), set())

    def _resolve(self, name: str, seen: set[int]) -> FieldValue | None:
        value = self._fields.get(name)
        if value is not None:
            return value

        parent = self.crossref_link
        if parent is None or parent._type is None or self._type is None:
            return None
        seen.add(id(self))
        if id(parent) in seen:
            logger.warning("Cross-reference cycle detected at %s -> %s", self.key, parent.key)
            return None

        parent_field = inherited_field(parent._type, self._type, name)
        if parent_field is None:
            return None
        return parent._resolve(parent_field, seen)

    def authors(self) -> list[PersonName]:
        return self._person_list("author")

    def editors(self) -> list[PersonName]:
        return self._person_list("editor")

    def set_authors(self, names: Iterable[str | PersonName]) -> None:
        self._set_person_list("author", names)

    def set_editors(self, names: Iterable[str | PersonName]) -> None:
        self._set_person_list("editor", names)

    def _person_list(self, role: str) -> list[PersonName]:
        if role not in self._persons:
            raw = self.resolve(role)
            text = str(raw).strip() if raw is not None else ""
            # Unbalanced braces: the whole value becomes a single name.
            names = (split_braced(text, _AND) or [text]) if text else []
            self._persons[role] = [split_name(name) for name in names]
        return list(self._persons[role])

    def _set_person_list(self, role: str, names: Iterable[str | PersonName]) -> None:
        persons = [name if isinstance(name, PersonName) else split_name(name) for name in names]
        self.set_field(role, " and ".join(str(person) for person in persons))
        self._persons[role] = persons

    def author_string(self, fmt: str = "lastfirst", join: str = ", ", join_last: str = " & ") -> str:
        return _join_names(self.authors(), fmt, join, join_last)

    def editor_string(self, fmt: str = "lastfirst", join: str = ", ", join_last: str = " & ") -> str:
        return _join_names(self.editors(), fmt, join, join_last)

    def cleaned_field(self, name: str, *, german: bool = False) -> str | None:
        """Return a field with TeX markup converted to plain text.

        Author and editor fields are returned unchanged; use
        ``cleaned_authors()``/``cleaned_editors()`` for those.
        """
        value = self.field(name)
        if value is None:
            return None
        if name.lower() in PERSON_FIELDS:
            return str(value)
        return convert(str(value), german=german)

    def cleaned_authors(self, *, german: bool = False) -> list[PersonName]:
        return [_clean_person(person, german) for person in self.authors()]

    def cleaned_editors(self, *, german: bool = False) -> list[PersonName]:
        return [_clean_person(person, german) for person in self.editors()]

    def files(self) -> list[FileLink]:
        if self._files is None:
            raw = self.field("file")
            self._files = [FileLink.parse(part) for part in str(raw).split(";")] if raw else []
        return self._files

    def validate(self) -> bool:
        """Check mandatory fields; messages are kept in ``validation_errors``."""
        self.validation_errors = []
        groups = MANDATORY_FIELDS.get(self._type or "")
        if groups is None:
            self.validation_errors.append(f"unknown entry type '{self._type}'")
            return False

        for group in groups:
            if not any(self.resolve(name) not in (None, "") for name in group.split("/")):
                self.validation_errors.append(f"missing mandatory field '{group}'")
        return not self.validation_errors

    def ensure_valid(self) -> None:
        if self.validate():
            return
        message = f"{self.key}: " + "; ".join(self.validation_errors)
        if (self._type or "") not in MANDATORY_FIELDS:
            raise UnknownTypeError(message)
        raise MissingMandatoryFieldError(message)

    @property
    def sort_key(self) -> str:
        """Author (or editor) names, year and title folded into one string.

        Computed once; later field changes do not refresh it.
        """
        if self._sort_key is None:
            persons = self.cleaned_authors() or self.cleaned_editors()
            name = "".join(person.sortname for person in persons).lower()

            date = self.resolve("date")
            if date is not None:
                year = str(date).split("-", 1)[0]
            else:
                year = str(self.resolve("year") or "")

            title = ""
            if self.has("title"):
                title = _TITLE_STRIP.sub("", (self.cleaned_field("title") or "").lower())

            self._sort_key = f"{name}{year}{title}" if name else f"{title}{year}"
        return self._sort_key

    def to_string(self, timestamp_format: str = "%Y.%m.%d") -> str:
        if self._type in VERBATIM_TYPES:
            return self.raw

        if self._files is not None:
            self._store("file", ";".join(link.to_string() for link in self._files))

        if self.modified:
            self._store("timestamp", today_stamp(timestamp_format))

        names = [name for name, value in self._fields.items() if value is not None]
        width = max((len(name) for name in names), default=0)

        lines = [f"@{(self._type or '').lower()}{{{self.key or ''},"]
        printed = set()
        for name in SERIALISATION_ORDER:
            if name in names:
                lines.append(_field_line(name, self._fields[name], width))
                printed.add(name)
        for name in sorted(names):
            if name not in printed:
                lines.append(_field_line(name, self._fields[name], width))
        lines.append("}")
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.to_string()


def _field_line(name: str, value: FieldValue, width: int) -> str:
    if isinstance(value, int):
        return f"  {name:<{width}} = {value},"
    return f"  {name:<{width}} = {{{value}}},"


def _join_names(persons: list[PersonName], fmt: str, join: str, join_last: str) -> str:
    names = [person.to_string(fmt) for person in persons]
    if len(names) > 1:
        return join.join(names[:-1]) + join_last + names[-1]
    return "".join(names)


def _clean_person(person: PersonName, german: bool) -> PersonName:
    return PersonName(
        first=convert(person.first, german=german) if person.first else person.first,
        von=convert(person.von, german=german) if person.von else person.von,
        last=convert(person.last, german=german) if person.last else person.last,
        jr=convert(person.jr, german=german) if person.jr else person.jr,
    )
