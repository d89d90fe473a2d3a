"""Best-effort scalar coercion used by the field normalizer and by repairs."""

import re
from datetime import date, datetime
from typing import Any

from tradedocs.normalization.models import DateField

# Tried in this order after ISO-8601; the first valid calendar date wins.
FALLBACK_DATE_FORMATS: tuple[str, ...] = ("%m/%d/%Y", "%Y-%m-%d", "%d/%m/%Y")

_NUMBER_RE = re.compile(
    r"^\s*([-+]?(?:\d{1,3}(?:,\d{3})+|\d+)(?:\.\d+)?|[-+]?\.\d+)\s*([A-Za-z][A-Za-z.]*)?\s*$"
)


def coerce_text(raw: Any) -> str | None:
    """Strip strings; empty means absent. Integers become their decimal text."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, str):
        cleaned = raw.strip()
        return cleaned or None
    if isinstance(raw, int):
        return str(raw)
    if isinstance(raw, float):
        return str(int(raw)) if raw.is_integer() else repr(raw)
    return None


def coerce_number(raw: Any) -> float | None:
    """Parse a measured quantity.

    Accepts ints, floats and strings such as ``"23,680"`` or ``"20,729.17 KG"``.
    Returns None when the value is missing or unparseable; 0 stays 0.0.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        return float(raw)
    if not isinstance(raw, str):
        return None
    match = _NUMBER_RE.match(raw)
    if match is None:
        return None
    return float(match.group(1).replace(",", ""))


def parse_date(raw: str) -> date | None:
    """Parse ISO-8601 first, then each fallback format in fixed order."""
    text = raw.strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    for fmt in FALLBACK_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def coerce_date(raw: Any) -> DateField | None:
    """Coerce to a DateField; unparseable strings are kept and marked unvalidated."""
    text = coerce_text(raw)
    if text is None:
        return None
    parsed = parse_date(text)
    if parsed is None:
        return DateField(value=text, validated=False)
    return DateField(value=parsed.isoformat(), validated=True)
