"""
Normalization of captured text into typed values.

Captured snippets come straight out of upstream text extraction, so they
carry stray whitespace, line breaks and thousands separators.

Design Decisions:
- Parsing never raises; a value that cannot be parsed becomes None
- None means "not found", it is never replaced by 0
- Only ',' is treated as a thousands separator
"""

import logging
import math
import re

logger = logging.getLogger(__name__)


_LINE_BREAKS = re.compile(r"\s*[\r\n]+\s*")
_SPACES = re.compile(r"[ \t]+")


def clean_capture(raw: str) -> str:
    """Trim a captured snippet and collapse internal newlines to single spaces."""
    collapsed = _LINE_BREAKS.sub(" ", raw)
    return _SPACES.sub(" ", collapsed).strip()


def parse_number(raw: str) -> float | None:
    """
    Parse a captured amount or weight.

    Strips thousands separators then parses as float. Returns None if the
    result is not a finite number.

    Example:
        >>> parse_number("12,500.50")
        12500.5
    """
    cleaned = raw.replace(",", "").strip()
    if not cleaned:
        return None
    try:
        value = float(cleaned)
    except ValueError:
        logger.debug(f"Unparseable number: '{raw}'")
        return None
    if not math.isfinite(value):
        return None
    return value


def normalize_filename(filename: str) -> str:
    """Lower-case a filename and turn '_', '-' and '.' into spaces."""
    lowered = filename.lower()
    for separator in ("_", "-", "."):
        lowered = lowered.replace(separator, " ")
    return _SPACES.sub(" ", lowered).strip()
