from __future__ import annotations

import re

from unidecode import unidecode


def split_braced(text: str, pattern: str | re.Pattern[str], flags: int = 0) -> list[str]:
    """Split ``text`` on ``pattern`` matches that sit outside every ``{...}`` group.

    Braced regions are opaque: a delimiter inside them never splits. Returns an
    empty list for empty input and for unbalanced braces, so callers can tell a
    failed split from a single-token result.
    """
    if not text:
        return []

    delimiter = pattern if isinstance(pattern, re.Pattern) else re.compile(pattern, flags)
    tokens: list[str] = []
    buffer: list[str] = []
    depth = 0
    i = 0
    n = len(text)

    while i < n:
        if depth == 0:
            match = delimiter.match(text, i)
            if match is not None and match.end() > i:
                tokens.append("".join(buffer))
                buffer = []
                i = match.end()
                continue

        ch = text[i]
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth < 0:
                return []
        buffer.append(ch)
        i += 1

    if depth != 0:
        return []

    tokens.append("".join(buffer))
    return tokens


def find_closing_brace(text: str, open_index: int) -> int | None:
    """Return the index of the ``}`` matching the ``{`` at ``open_index``."""
    depth = 0
    for i in range(open_index, len(text)):
        ch = text[i]
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i
    return None


def collation_key(text: str) -> str:
    # Accented letters sort with their base letter.
    return unidecode(text).casefold()
