"""Markup-to-plain-text conversion for cleaned and sortable field renditions."""

from __future__ import annotations

from pylatexenc.latex2text import LatexNodes2Text

# Shorthands of the `german' package, e.g. "a for ä.
GERMAN_SHORTHANDS: dict[str, str] = {
    '"a': "ä",
    '"o': "ö",
    '"u': "ü",
    '"A': "Ä",
    '"O': "Ö",
    '"U': "Ü",
    '"s': "ß",
    '"`': "„",
    "\"'": "“",
    '"<': "«",
    '">': "»",
    '"-': "­",
    '""': "",
}

_converter = LatexNodes2Text(math_mode="verbatim", strict_latex_spaces=False)


def convert(raw: str, *, german: bool = False) -> str:
    """Convert TeX markup in ``raw`` to plain Unicode text.

    Accent and special-character commands become their Unicode equivalents and
    formatting commands are dropped, keeping their content.
    """
    text = _converter.latex_to_text(str(raw))
    if german:
        for shorthand, replacement in GERMAN_SHORTHANDS.items():
            text = text.replace(shorthand, replacement)
    return text
