from __future__ import annotations

import os
from dataclasses import dataclass

from texbib.core.errors import ConfigurationError


@dataclass(frozen=True)
class Settings:
    encoding: str
    timestamp_format: str
    write_header: bool
    german: bool


DEFAULT_ENCODING = "utf-8"
DEFAULT_TIMESTAMP_FORMAT = "%Y.%m.%d"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _read_bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be a boolean flag, got {raw!r}")


def load_settings(encoding: str | None = None) -> Settings:
    return Settings(
        encoding=encoding or os.getenv("TEXBIB_ENCODING") or DEFAULT_ENCODING,
        timestamp_format=os.getenv("TEXBIB_TIMESTAMP_FORMAT") or DEFAULT_TIMESTAMP_FORMAT,
        write_header=_read_bool_env("TEXBIB_WRITE_HEADER", True),
        german=_read_bool_env("TEXBIB_GERMAN", False),
    )
