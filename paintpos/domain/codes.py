"""Day-scoped sequential codes in ``MMDDYYNNN`` form.

Inventory batches and sale references each get their own sequence per calendar
day: ``031524001`` is the first code minted on 15 March 2024, ``031524002`` the
second. The functions here are pure; the existing codes come from a lookup
callable supplied by the persistence layer.
"""

from __future__ import annotations

import time
from datetime import date
from typing import Callable, Iterable, Optional

from ..util.logging import get_logger

logger = get_logger(__name__)

BATCH_NAMESPACE = "batch"
SALE_NAMESPACE = "sale"

PREFIX_LENGTH = 6
SUFFIX_LENGTH = 3
CODE_LENGTH = PREFIX_LENGTH + SUFFIX_LENGTH
MAX_INCREMENT = 10 ** SUFFIX_LENGTH - 1
DEFAULT_RETRY_ATTEMPTS = 10

CodeLookup = Callable[[str], Iterable[str]]
Clock = Callable[[], float]


class CodeLookupUnavailable(Exception):
    """The store holding existing codes could not be queried."""


def date_prefix(day: date) -> str:
    return f"{day.month:02d}{day.day:02d}{day.year % 100:02d}"


def format_code(prefix: str, increment: int) -> str:
    return f"{prefix}{increment:0{SUFFIX_LENGTH}d}"


def fallback_code(prefix: str, clock: Clock = time.time) -> str:
    """Timestamp-derived code. Best effort only: it is not checked for uniqueness."""
    millis = int(clock() * 1000)
    return format_code(prefix, millis % 1000)


def parse_increment(code: Optional[str], prefix: str) -> Optional[int]:
    """Numeric suffix of a well-formed code under ``prefix``, else ``None``."""
    if not code or len(code) != CODE_LENGTH or not code.startswith(prefix):
        return None
    suffix = code[PREFIX_LENGTH:]
    if not (suffix.isascii() and suffix.isdigit()):
        return None
    return int(suffix)


def max_increment(codes: Iterable[str], prefix: str) -> int:
    highest = 0
    for code in codes:
        increment = parse_increment(code, prefix)
        if increment is None:
            logger.debug("Skipping malformed code %r under prefix %s", code, prefix)
            continue
        highest = max(highest, increment)
    return highest


def next_code(lookup: Optional[CodeLookup], day: Optional[date] = None, *, clock: Clock = time.time) -> str:
    """Next free code for ``day`` (today when omitted).

    Uses the highest existing suffix, not the count, so gaps left by deleted
    rows are never refilled. Falls back to a timestamp suffix when the lookup
    is unavailable or the day's 999 suffixes are used up.
    """
    if day is None:
        day = date.today()
    prefix = date_prefix(day)

    if lookup is None:
        logger.warning("No code lookup available, using timestamp code for prefix %s", prefix)
        return fallback_code(prefix, clock)
    try:
        existing = list(lookup(prefix))
    except CodeLookupUnavailable as e:
        logger.warning("Code lookup failed (%s), using timestamp code for prefix %s", e, prefix)
        return fallback_code(prefix, clock)

    increment = max_increment(existing, prefix) + 1
    if increment > MAX_INCREMENT:
        logger.warning("All %d codes for prefix %s are taken, using timestamp code", MAX_INCREMENT, prefix)
        return fallback_code(prefix, clock)
    return format_code(prefix, increment)


def resolve_collision(
    code: str,
    exists: Callable[[str], bool],
    *,
    max_attempts: int = DEFAULT_RETRY_ATTEMPTS,
    clock: Clock = time.time,
) -> str:
    """Step the suffix of ``code`` forward until ``exists`` says it is free.

    Gives up after ``max_attempts`` increments, or as soon as the suffix cannot
    be parsed, and returns a timestamp-derived code instead.
    """
    if not exists(code):
        return code

    logger.warning("Generated code %s already exists, looking for the next free one", code)
    prefix = code[:PREFIX_LENGTH]
    candidate = code
    for _ in range(max_attempts):
        increment = parse_increment(candidate, prefix)
        if increment is None or increment >= MAX_INCREMENT:
            break
        candidate = format_code(prefix, increment + 1)
        if not exists(candidate):
            return candidate

    fallback = fallback_code(prefix, clock)
    logger.warning("No free code found after %s, falling back to %s", code, fallback)
    return fallback
