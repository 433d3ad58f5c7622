from __future__ import annotations

import re
from typing import Dict, List, Optional, Sequence, Tuple

from cardscan.models import ExpiryDate, TextFragment

EXPIRY_LABELS = ("VALID THRU", "VALID THROUGH", "GOOD THRU", "EXPIRES", "EXPIRY", "EXP")

_MM = r"(?<![0-9])([0-9]{2})"
_YY = r"([0-9]{2})(?![0-9])"
_YYYY = r"([0-9]{4})(?![0-9])"

LABELLED_EXPIRY_RE = re.compile(
    r"(?:VALID\s*(?:THRU|THROUGH)|GOOD\s*THRU|EXP(?:IRES|IRY)?)\.?\s*:?\s*"
    + _MM
    + r"\s*/?\s*([0-9]{4}|[0-9]{2})(?![0-9])",
    re.IGNORECASE,
)

EXPIRY_PATTERNS: List[Tuple[str, re.Pattern[str]]] = [
    ("mm/yy", re.compile(_MM + "/" + _YY)),
    ("mm/yyyy", re.compile(_MM + "/" + _YYYY)),
    ("mm / yy", re.compile(_MM + r"\s*/\s*" + _YY)),
    ("mm / yyyy", re.compile(_MM + r"\s*/\s*" + _YYYY)),
    ("mm yy", re.compile(_MM + r"\s+" + _YY)),
    ("mm yyyy", re.compile(_MM + r"\s+" + _YYYY)),
]


def _first_valid(pattern: re.Pattern[str], text: str) -> Optional[ExpiryDate]:
    for match in pattern.finditer(text):
        month, year = match.group(1), match.group(2)
        if 1 <= int(month) <= 12:
            return ExpiryDate.from_parts(month, year)
    return None


def _parse_with_pattern(text: str) -> Tuple[Optional[ExpiryDate], Optional[str]]:
    if not text:
        return None, None
    found = _first_valid(LABELLED_EXPIRY_RE, text)
    if found:
        return found, "labelled"
    for name, pattern in EXPIRY_PATTERNS:
        found = _first_valid(pattern, text)
        if found:
            return found, name
    return None, None


def parse_expiry_from_text(text: str) -> Optional[ExpiryDate]:
    """Parse an expiry date such as ``12/30``, ``12 / 2030`` or ``VALID THRU 1230``."""
    found, _ = _parse_with_pattern(text)
    return found


def find_expiry_date(
    fragments: Sequence[TextFragment],
    trace: Dict[str, object] | None = None,
) -> Optional[ExpiryDate]:
    expiry_trace: Dict[str, object] = {"hit": False, "pattern": None, "fragment_index": None}
    found: Optional[ExpiryDate] = None
    for idx, frag in enumerate(fragments):
        found, pattern_name = _parse_with_pattern(frag.text)
        if found:
            expiry_trace.update({"hit": True, "pattern": pattern_name, "fragment_index": idx})
            break
    if trace is not None:
        trace.update(expiry_trace)
    return found


__all__ = ["EXPIRY_LABELS", "EXPIRY_PATTERNS", "parse_expiry_from_text", "find_expiry_date"]
