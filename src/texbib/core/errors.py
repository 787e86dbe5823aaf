from __future__ import annotations


class TexbibError(Exception):
    """Base error for all user-facing texbib exceptions."""


class ConfigurationError(TexbibError):
    """Raised when configuration is invalid or incomplete."""


class BibliographyError(TexbibError):
    """Raised when a bibliography file cannot be loaded or written."""


class ParseError(TexbibError):
    """Raised inside the grammar parser; attached to the failed entry, never propagated."""

    def __init__(self, message: str, line: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.line = line


class LexicalError(ParseError):
    """Raised for an unbalanced brace or quote inside a field value."""


class StructuralError(ParseError):
    """Raised for a missing key, missing '=' or missing closing delimiter."""


class DuplicateKeyError(TexbibError):
    """Raised when a collection already holds an entry with the same key."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Duplicate key {key}")
        self.key = key


class ValidationError(TexbibError):
    """Raised when an entry fails validation."""


class UnknownTypeError(ValidationError):
    """Raised when an entry type has no mandatory-field rule."""


class MissingMandatoryFieldError(ValidationError):
    """Raised when a mandatory field group has no present alternative."""
