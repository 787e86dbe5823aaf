"""JabRef-style file links stored in the ``file`` field as ``description:path:type``."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

_FILE_LINK_RE = re.compile(r"^[^:]*:[^:]+:[^:]+$")
_ESCAPED_AMPERSAND = re.compile(r"\\(?=&)")
_FORBIDDEN_PATH_CHARS = re.compile(r'[!:;*"?\0]')
_EXTENSION_RE = re.compile(r"(\.\w+)$")


@dataclass(slots=True)
class FileLink:
    description: str = ""
    path: str = ""
    type: str = ""
    parse_ok: bool = False
    # Original text, written back unchanged when it could not be parsed.
    source: str = field(default="", compare=False, repr=False)

    @classmethod
    def parse(cls, text: str) -> FileLink:
        if not text or not _FILE_LINK_RE.match(text):
            return cls(source=text or "")
        description, path, file_type = text.split(":")
        path = _ESCAPED_AMPERSAND.sub("", path)
        # JabRef on Windows writes backslash separators.
        path = path.replace("\\", "/")
        return cls(description=description, path=path, type=file_type, parse_ok=True, source=text)

    @property
    def ext(self) -> str:
        """Extension of the path including the dot, e.g. ``.pdf``."""
        if not self.path:
            return ""
        match = _EXTENSION_RE.search(self.path)
        return match.group(1) if match else ""

    def exists(self) -> bool:
        return bool(self.path) and Path(self.path).is_file()

    def rename(self, new_path: str) -> bool:
        """Move the linked file; the stored path only changes on success."""
        if new_path.lower() == self.path.lower():
            # Case-only renames are skipped; they misbehave on case-insensitive file systems.
            return True
        if not self.exists() or Path(new_path).is_file() or _FORBIDDEN_PATH_CHARS.search(new_path):
            return False
        try:
            Path(self.path).rename(new_path)
        except OSError as exc:
            logger.warning("Unable to rename %s to %s: %s", self.path, new_path, exc)
            return False
        self.path = new_path
        return True

    def to_string(self) -> str:
        if not self.parse_ok and self.source:
            return self.source
        return f"{self.description}:{self.path}:{self.type}"

    def __str__(self) -> str:
        return self.to_string()
