from __future__ import annotations

from datetime import datetime


def today_stamp(fmt: str = "%Y.%m.%d") -> str:
    """Return today's local date rendered with ``fmt`` (used for the timestamp field)."""
    return datetime.now().strftime(fmt)
