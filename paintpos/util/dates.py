"""Date helpers for values read back from SQLite.

Stored dates may come back as ``date``/``datetime`` objects, ISO text, or epoch
milliseconds (older rows). The parse functions never raise: they return ``None``
and leave the fallback to the caller.
"""

from __future__ import annotations

import re
from datetime import date, datetime

from .logging import get_logger

logger = get_logger(__name__)

_DIGITS = re.compile(r"^-?\d+$")


def _from_epoch_millis(millis: int) -> datetime | None:
    try:
        return datetime.fromtimestamp(millis / 1000.0)
    except (OverflowError, OSError, ValueError):
        return None


def parse_datetime(value) -> datetime | None:
    """Parse a stored timestamp; ``None`` when it cannot be understood."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return _from_epoch_millis(int(value))

    text = str(value).strip()
    if not text:
        return None
    if _DIGITS.match(text):
        return _from_epoch_millis(int(text))
    try:
        return datetime.fromisoformat(text[:19].replace("T", " ") if len(text) >= 19 else text)
    except ValueError:
        pass
    try:
        d = date.fromisoformat(text[:10])
        return datetime(d.year, d.month, d.day)
    except ValueError:
        logger.debug("Unparseable stored date: %r", value)
        return None


def parse_date(value) -> date | None:
    """Parse a stored calendar date; ``None`` when it cannot be understood."""
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    dt = parse_datetime(value)
    return dt.date() if dt is not None else None


def date_text(value) -> str | None:
    """ISO ``YYYY-MM-DD`` text for storage (``None`` stays ``None``)."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    parsed = parse_date(value)
    return parsed.isoformat() if parsed else None


def datetime_text(value: datetime) -> str:
    return value.strftime("%Y-%m-%d %H:%M:%S")
