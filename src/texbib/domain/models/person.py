"""Decomposition of personal names into first, von, last and jr parts.

Three input forms are understood:

1. ``First von Last``
2. ``von Last, First``
3. ``von Last, Jr, First``

The von part consists of tokens whose first letter at brace level 0 is
lowercase. A token made only of a braced group (``{von}``) is never a von
token, while ``\\NOOP{von}Von`` is. Segmentation never raises: malformed input
degrades to a single ``last`` component.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from texbib.core.text import split_braced

_WHITESPACE = re.compile(r"\s+")
_COMMA = re.compile(r"\s*,\s*")
_SORTNAME_STRIP = re.compile(r"[-\s.]+")
_FIRST_NAME_WORD = re.compile(r"[^\W\d_]+\.?")


@dataclass(slots=True)
class PersonName:
    first: str | None = None
    von: str | None = None
    last: str | None = None
    jr: str | None = None

    @classmethod
    def parse(cls, full_name: str) -> PersonName:
        return split_name(full_name)

    def to_string(self, fmt: str = "lastfirst") -> str:
        """Render the name as ``lastfirst`` (default), ``firstlast``, ``abbrev`` or ``last``."""
        fmt = fmt.lower()
        if fmt.startswith("firstlast"):
            parts = [part for part in (self.first, self.von, self.last, self.jr) if part]
            return " ".join(parts)

        s = f"{self.von} " if self.von else ""
        s += self.last or ""
        if self.jr:
            s += f", {self.jr}"
        if fmt == "last":
            return s
        if fmt.startswith("abbrev"):
            if self.first:
                s += f", {_abbreviate(self.first)}"
            return s
        if self.first:
            s += f", {self.first}"
        return s

    @property
    def sortname(self) -> str:
        name = (self.last or "") + (self.first or "")
        return _SORTNAME_STRIP.sub("", name).lower()

    def __str__(self) -> str:
        return self.to_string()


def _abbreviate(first: str) -> str:
    def initial(match: re.Match[str]) -> str:
        word = match.group(0)
        return f"{word[0]}." if word[0].isupper() else word

    return _FIRST_NAME_WORD.sub(initial, first)


def _join(tokens: list[str]) -> str | None:
    joined = " ".join(tokens)
    return joined or None


def split_name(full_name: str) -> PersonName:
    name = full_name.strip()
    if not name:
        return PersonName()

    segments = split_braced(name, _COMMA)
    if not segments:
        # Unbalanced braces: keep the text intact rather than guessing.
        return PersonName(last=name)

    if len(segments) == 1:
        tokens = split_braced(name, _WHITESPACE)
        start_von, start_last = _von_last_bounds(tokens)
        return PersonName(
            first=_join(tokens[:start_von]),
            von=_join(tokens[start_von:start_last]),
            last=_join(tokens[start_last:]),
        )

    if len(segments) == 2:
        jr = None
        first = _join(split_braced(segments[1], _WHITESPACE))
    else:
        jr = _join(split_braced(segments[1], _WHITESPACE))
        first = _join(split_braced(segments[2], _WHITESPACE))

    tokens = split_braced(segments[0], _WHITESPACE)
    start_last = _last_start(tokens)
    return PersonName(
        first=first,
        von=_join(tokens[:start_last]),
        last=_join(tokens[start_last:]),
        jr=jr,
    )


def _von_last_bounds(tokens: list[str]) -> tuple[int, int]:
    """Return the index of the first von token and of the first last-name token.

    Without a von part both indices point at the final token, so everything
    before it is the first name.
    """
    length = len(tokens)
    if length <= 1:
        return 0, 0

    start_von = next((i for i, token in enumerate(tokens) if is_von_token(token)), None)
    if start_von is None or start_von == length - 1:
        return length - 1, length - 1

    start_last = length - 1
    for i in range(start_von + 1, length):
        if not is_von_token(tokens[i]):
            start_last = i
            break
    return start_von, start_last


def _last_start(tokens: list[str]) -> int:
    length = len(tokens)
    if length <= 1:
        return 0
    for i, token in enumerate(tokens):
        if not is_von_token(token):
            return i
    return length - 1


def is_von_token(token: str) -> bool:
    """Return True if the first letter at brace level 0 is lowercase."""
    rest = token
    while rest:
        ch = rest[0]
        if ch == "\\":
            j = 1
            while j < len(rest) and rest[j].isalpha():
                j += 1
            if j > 1 and j < len(rest) and rest[j] == "{":
                # \command{ : the argument text is tested as if unbraced
                rest = rest[j + 1 :]
            elif len(rest) > 1 and not rest[1].isalpha():
                rest = rest[2:]
            else:
                rest = rest[1:]
        elif ch == "{":
            rest = _skip_group(rest)
        elif not ch.isalpha():
            rest = rest[1:]
        else:
            return ch == ch.lower()
    return False


def _skip_group(text: str) -> str:
    depth = 0
    for i, ch in enumerate(text):
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[i + 1 :]
    return ""
