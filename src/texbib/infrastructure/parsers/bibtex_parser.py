from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from typing import TextIO

from texbib.core.errors import LexicalError, ParseError, StructuralError
from texbib.core.text import find_closing_brace
from texbib.domain.models.entry import Entry, FieldValue

logger = logging.getLogger(__name__)

_IDENTIFIER_RE = re.compile(r"[A-Za-z_][\w\-]*")
_KEY_RE = re.compile(r"[^\s,{}()]+")
_FIELD_NAME_RE = re.compile(r"[^\s=,{}()\"#]+")
_NUMBER_RE = re.compile(r"\d+")
_MACRO_NAME_RE = re.compile(r"[^\s=,{}()\"#]+")
_INTEGER_RE = re.compile(r"[1-9][0-9]*")

_CLOSERS = {"{": "}", "(": ")"}


class MacroTable:
    """Name to expansion mapping filled by ``@string`` blocks of one parse session.

    Names are case-insensitive. Redefining a name only affects values read
    afterwards.
    """

    def __init__(self) -> None:
        self._macros: dict[str, str] = {}

    def define(self, name: str, value: str) -> None:
        self._macros[name.lower()] = value

    def lookup(self, name: str) -> str | None:
        return self._macros.get(name.lower())

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._macros

    def __len__(self) -> int:
        return len(self._macros)


class BibTeXParser:
    """Streaming parser producing one Entry per ``@`` block.

    ``@string`` blocks only update ``macros``. Parse failures are returned as
    entries with ``parse_ok`` false instead of being raised.
    """

    def __init__(self, source: str | TextIO) -> None:
        self.text = source if isinstance(source, str) else source.read()
        self.macros = MacroTable()
        self.pos = 0

    @property
    def line(self) -> int:
        return self._line_at(self.pos)

    def _line_at(self, index: int) -> int:
        return self.text.count("\n", 0, min(index, len(self.text))) + 1

    def __iter__(self) -> Iterator[Entry]:
        while True:
            entry = self.next()
            if entry is None:
                return
            yield entry

    def next(self) -> Entry | None:
        text = self.text
        while True:
            start = text.find("@", self.pos)
            if start == -1:
                self.pos = len(text)
                return None

            i = self._skip_ws(start + 1)
            match = _IDENTIFIER_RE.match(text, i)
            if match is None:
                self.pos = start + 1
                continue
            block_type = match.group(0).lower()
            i = self._skip_ws(match.end())
            if i >= len(text) or text[i] not in _CLOSERS:
                self.pos = start + 1
                continue

            try:
                if block_type in ("comment", "preamble"):
                    return self._read_verbatim(block_type, start, i)
                if block_type == "string":
                    self._read_macro(i)
                    continue
                return self._read_entry(block_type, start, i)
            except ParseError as exc:
                entry = Entry(block_type, raw=text[start : self.pos], line=self._line_at(start))
                entry.fail(exc.message, kind=type(exc).__name__, line=exc.line)
                logger.debug("Parse failure at line %s: %s", exc.line, exc.message)
                self.pos = start + 1
                return entry

    def _skip_ws(self, i: int) -> int:
        text = self.text
        while i < len(text) and text[i].isspace():
            i += 1
        return i

    def _block_end(self, open_index: int) -> int:
        """Index just past the delimiter closing the block opened at ``open_index``."""
        text = self.text
        closer = _CLOSERS[text[open_index]]
        depth = 0
        parens = 0
        for i in range(open_index + 1, len(text)):
            ch = text[i]
            if ch == "{":
                depth += 1
            elif ch == "}":
                if depth == 0 and closer == "}":
                    return i + 1
                depth -= 1
            elif closer == ")" and depth == 0:
                if ch == "(":
                    parens += 1
                elif ch == ")":
                    if parens == 0:
                        return i + 1
                    parens -= 1
        self.pos = len(text)
        raise StructuralError("missing closing brace", self._line_at(len(text)))

    def _read_verbatim(self, block_type: str, start: int, open_index: int) -> Entry:
        end = self._block_end(open_index)
        self.pos = end
        return Entry(block_type, raw=self.text[start:end], line=self._line_at(start))

    def _read_macro(self, open_index: int) -> None:
        closer = _CLOSERS[self.text[open_index]]
        i = self._skip_ws(open_index + 1)
        match = _MACRO_NAME_RE.match(self.text, i)
        if match is None:
            self.pos = i
            raise StructuralError("missing macro name", self._line_at(i))
        name = match.group(0)
        i = self._expect(match.end(), "=", f"missing '=' after macro '{name}'")
        value, i = self._read_value(i, name)
        i = self._skip_ws(i)
        if i >= len(self.text) or self.text[i] != closer:
            self.pos = i
            raise StructuralError("missing closing brace", self._line_at(i))
        self.pos = i + 1
        self.macros.define(name, str(value))

    def _read_entry(self, block_type: str, start: int, open_index: int) -> Entry:
        text = self.text
        closer = _CLOSERS[text[open_index]]
        i = self._skip_ws(open_index + 1)
        match = _KEY_RE.match(text, i)
        after_key = self._skip_ws(match.end()) if match else i
        if match is None or text.startswith("=", after_key):
            self.pos = i
            raise StructuralError("missing key", self._line_at(i))
        key = match.group(0)
        i = after_key

        fields: dict[str, FieldValue] = {}
        while True:
            if i >= len(text):
                self.pos = i
                raise StructuralError("missing closing brace", self._line_at(i))
            if text[i] == closer:
                break
            if text[i] != ",":
                self.pos = i
                raise StructuralError(f"expected ',' or '{closer}' in entry '{key}'", self._line_at(i))
            i = self._skip_ws(i + 1)
            if i < len(text) and text[i] == closer:
                break

            match = _FIELD_NAME_RE.match(text, i)
            if match is None:
                self.pos = i
                raise StructuralError(f"missing field name in entry '{key}'", self._line_at(i))
            name = match.group(0).lower()
            i = self._expect(match.end(), "=", f"missing '=' after field '{name}'")
            value, i = self._read_value(i, name)
            if name in fields:
                logger.warning("Field '%s' repeated in entry '%s'; keeping the last value", name, key)
            fields[name] = value
            i = self._skip_ws(i)

        end = i + 1
        self.pos = end
        return Entry(block_type, key, fields, raw=text[start:end], line=self._line_at(start))

    def _expect(self, i: int, char: str, message: str) -> int:
        i = self._skip_ws(i)
        if i >= len(self.text) or self.text[i] != char:
            self.pos = i
            raise StructuralError(message, self._line_at(i))
        return self._skip_ws(i + 1)

    def _read_value(self, i: int, name: str) -> tuple[FieldValue, int]:
        """Read ``piece # piece # ...`` starting at ``i``."""
        text = self.text
        pieces: list[str] = []
        numeric = False
        while True:
            i = self._skip_ws(i)
            if i >= len(text):
                self.pos = i
                raise StructuralError(f"missing value for '{name}'", self._line_at(i))
            ch = text[i]
            if ch == "{":
                piece, i = self._read_braced(i, name)
                numeric = False
            elif ch == '"':
                piece, i = self._read_quoted(i, name)
                numeric = False
            elif ch.isdigit():
                match = _NUMBER_RE.match(text, i)
                piece, i = match.group(0), match.end()
                numeric = True
            else:
                match = _MACRO_NAME_RE.match(text, i)
                if match is None:
                    self.pos = i
                    raise StructuralError(f"missing value for '{name}'", self._line_at(i))
                macro = match.group(0)
                expansion = self.macros.lookup(macro)
                if expansion is None:
                    logger.debug("Undefined macro '%s' in field '%s' kept literally", macro, name)
                    expansion = macro
                piece, i = expansion, match.end()
                numeric = False
            pieces.append(piece)

            i = self._skip_ws(i)
            if i < len(text) and text[i] == "#":
                i += 1
                continue
            break

        if len(pieces) == 1 and numeric and _INTEGER_RE.fullmatch(pieces[0]):
            return int(pieces[0]), i
        return "".join(pieces), i

    def _read_braced(self, open_index: int, name: str) -> tuple[str, int]:
        close = find_closing_brace(self.text, open_index)
        if close is None:
            self.pos = len(self.text)
            raise LexicalError(f"unmatched brace in value of '{name}'", self._line_at(open_index))
        return self.text[open_index + 1 : close], close + 1

    def _read_quoted(self, open_index: int, name: str) -> tuple[str, int]:
        text = self.text
        depth = 0
        for i in range(open_index + 1, len(text)):
            ch = text[i]
            if ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth < 0:
                    self.pos = i
                    raise LexicalError(f"unmatched brace in value of '{name}'", self._line_at(i))
            elif ch == '"' and depth == 0:
                return text[open_index + 1 : i], i + 1
        self.pos = len(text)
        raise LexicalError(f"unterminated quote in value of '{name}'", self._line_at(open_index))


def parse_bibtex(text: str) -> list[Entry]:
    return list(BibTeXParser(text))
