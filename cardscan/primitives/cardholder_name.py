from __future__ import annotations

import re
from typing import Dict, Optional, Sequence

from cardscan.models import TextFragment

NAME_RE = re.compile(r"(?<![A-Za-z])([A-Z]{2,})\s+([A-Z]{2,})(?![A-Za-z])")
EXCLUDED_WORDS = frozenset({"VALID", "THRU", "MEMBER", "SINCE", "VISA", "MASTERCARD", "DEBIT", "CREDIT"})


def _is_excluded(text: str) -> bool:
    words = re.findall(r"[A-Za-z]+", text.upper())
    return any(word in EXCLUDED_WORDS for word in words)


def find_cardholder_name(
    fragments: Sequence[TextFragment],
    trace: Dict[str, object] | None = None,
) -> Optional[str]:
    name_trace: Dict[str, object] = {"hit": False, "excluded": 0}
    found: Optional[str] = None
    for frag in fragments:
        match = NAME_RE.search(frag.text or "")
        if not match:
            continue
        if _is_excluded(frag.text):
            name_trace["excluded"] += 1
            continue
        found = f"{match.group(1)} {match.group(2)}"
        name_trace["hit"] = True
        break
    if trace is not None:
        trace.update(name_trace)
    return found


__all__ = ["EXCLUDED_WORDS", "find_cardholder_name"]
