from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from itertools import permutations
from typing import Dict, List, Optional, Sequence

from cardscan.models import TextFragment
from cardscan.primitives.registry import list_strategies, register_strategy
from cardscan.validator import (
    extract_digits,
    is_pan_length,
    is_valid_card_number,
    mask_card_number,
    strip_separators,
)

LOGGER = logging.getLogger(__name__)

_FOUR_DIGIT_GROUP_RE = re.compile(r"[0-9]{4}")


@dataclass
class ReconstructConfig:
    row_tolerance: float = 0.1
    max_combination_fragments: int = 50
    min_group_digits: int = 4
    vertical_group_size: int = 4


def _accept(digits: str) -> bool:
    return is_pan_length(digits) and is_valid_card_number(digits)


def _number_fragments(fragments: Sequence[TextFragment], cfg: ReconstructConfig) -> List[TextFragment]:
    return [frag for frag in fragments if len(extract_digits(frag.text)) >= cfg.min_group_digits]


def _record_hit(trace_entry: Dict[str, object], digits: str) -> str:
    trace_entry["hit"] = True
    trace_entry["preview"] = mask_card_number(digits)
    return digits


@register_strategy("single_fragment")
def find_in_single_fragment(
    fragments: Sequence[TextFragment],
    cfg: ReconstructConfig,
    trace_entry: Dict[str, object],
) -> Optional[str]:
    trace_entry.setdefault("candidates", 0)
    for frag in fragments:
        digits = extract_digits(strip_separators(frag.text))
        if not is_pan_length(digits):
            continue
        trace_entry["candidates"] += 1
        if _accept(digits):
            return _record_hit(trace_entry, digits)
    return None


@register_strategy("combinations")
def find_in_combinations(
    fragments: Sequence[TextFragment],
    cfg: ReconstructConfig,
    trace_entry: Dict[str, object],
) -> Optional[str]:
    """Try ordered pairs, then ordered triples, of distinct number fragments.

    Recovers numbers the recogniser split into two or three labels. Skipped
    entirely above ``cfg.max_combination_fragments`` candidates.
    """
    trace_entry.setdefault("candidates", 0)
    candidates = _number_fragments(fragments, cfg)
    if len(candidates) > cfg.max_combination_fragments:
        trace_entry["skipped"] = True
        LOGGER.warning(
            "Skipping combination search: %d fragments exceeds cap of %d",
            len(candidates),
            cfg.max_combination_fragments,
        )
        return None

    seen: set[str] = set()
    for size in (2, 3):
        for indices in permutations(range(len(candidates)), size):
            combined = "".join(candidates[idx].text for idx in indices)
            digits = extract_digits(combined)
            if digits in seen:
                continue
            seen.add(digits)
            if not is_pan_length(digits):
                continue
            trace_entry["candidates"] += 1
            if _accept(digits):
                trace_entry["window_size"] = size
                return _record_hit(trace_entry, digits)
    return None


@register_strategy("positional")
def find_by_position(
    fragments: Sequence[TextFragment],
    cfg: ReconstructConfig,
    trace_entry: Dict[str, object],
) -> Optional[str]:
    trace_entry.setdefault("candidates", 0)
    rows = group_rows(_number_fragments(fragments, cfg), cfg.row_tolerance)
    trace_entry["rows"] = len(rows)
    accumulated = ""
    for row in rows:
        for frag in row:
            accumulated += extract_digits(frag.text)
            if not is_pan_length(accumulated):
                continue
            trace_entry["candidates"] += 1
            if _accept(accumulated):
                return _record_hit(trace_entry, accumulated)
    return None


@register_strategy("vertical_groups")
def find_in_vertical_groups(
    fragments: Sequence[TextFragment],
    cfg: ReconstructConfig,
    trace_entry: Dict[str, object],
) -> Optional[str]:
    trace_entry.setdefault("candidates", 0)
    groups = [frag.text.strip() for frag in fragments if _FOUR_DIGIT_GROUP_RE.fullmatch(frag.text.strip())]
    size = cfg.vertical_group_size
    for start in range(0, len(groups) - size + 1):
        digits = "".join(groups[start : start + size])
        trace_entry["candidates"] += 1
        if _accept(digits):
            return _record_hit(trace_entry, digits)
    return None


def group_rows(fragments: Sequence[TextFragment], tolerance: float) -> List[List[TextFragment]]:
    """Group fragments into rows, top row first, each row left to right."""
    ordered = sorted(fragments, key=lambda f: (-f.y, f.x))
    rows: List[List[TextFragment]] = []
    current: List[TextFragment] = []
    current_center: float | None = None

    for frag in ordered:
        if not current:
            current = [frag]
            current_center = frag.y
            continue
        if abs(frag.y - current_center) <= tolerance:
            current.append(frag)
        else:
            rows.append(current)
            current = [frag]
            current_center = frag.y

    if current:
        rows.append(current)
    return [sorted(row, key=lambda f: f.x) for row in rows]


def find_card_number(
    fragments: Sequence[TextFragment],
    cfg: ReconstructConfig | None = None,
    trace: Dict[str, object] | None = None,
) -> Optional[str]:
    cfg = cfg or ReconstructConfig()
    card_trace: Dict[str, object] = {"strategy": None}
    found: Optional[str] = None

    for name, strategy in list_strategies().items():
        entry: Dict[str, object] = {"hit": False}
        card_trace[name] = entry
        found = strategy(fragments, cfg, entry)
        if found:
            card_trace["strategy"] = name
            LOGGER.debug("Card number found by %s strategy: %s", name, mask_card_number(found))
            break

    if trace is not None:
        trace.update(card_trace)
    return found


def find_vertical_card_number(
    fragments: Sequence[TextFragment],
    cfg: ReconstructConfig | None = None,
) -> Optional[str]:
    return find_in_vertical_groups(fragments, cfg or ReconstructConfig(), {})


__all__ = [
    "ReconstructConfig",
    "find_card_number",
    "find_vertical_card_number",
    "group_rows",
]
