from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence

from cardscan.models import ExpiryDate, TextFragment
from cardscan.primitives.card_expiry import find_expiry_date
from cardscan.primitives.card_number import ReconstructConfig, find_card_number
from cardscan.primitives.cardholder_name import find_cardholder_name

LOGGER = logging.getLogger(__name__)


@dataclass
class Reconstruction:
    card_number: Optional[str] = field(default=None, repr=False)
    expiry_date: Optional[ExpiryDate] = field(default=None, repr=False)
    cardholder_name: Optional[str] = field(default=None, repr=False)
    confidence: float = 0.0
    trace: Dict[str, object] = field(default_factory=dict)

    @property
    def is_complete(self) -> bool:
        return self.card_number is not None and self.expiry_date is not None


def average_confidence(fragments: Sequence[TextFragment]) -> float:
    if not fragments:
        return 0.0
    return sum(frag.confidence for frag in fragments) / len(fragments)


def reconstruct(
    fragments: Sequence[TextFragment],
    cfg: ReconstructConfig | None = None,
) -> Reconstruction:
    """Rebuild card number, expiry date and cardholder name from one recognition pass.

    Each field is searched independently; a field that cannot be found is left
    as ``None``. Confidence is the mean over every fragment in the pass, not
    only the fragments that contributed to a match.
    """
    cfg = cfg or ReconstructConfig()
    trace: Dict[str, object] = {"fragments": len(fragments), "card_number": {}, "expiry": {}, "name": {}}

    card_number = find_card_number(fragments, cfg, trace["card_number"])
    expiry_date = find_expiry_date(fragments, trace["expiry"])
    cardholder_name = find_cardholder_name(fragments, trace["name"])
    confidence = average_confidence(fragments)
    trace["confidence"] = round(confidence, 4)

    LOGGER.debug(
        "Reconstructed pass of %d fragments: number=%s expiry=%s name=%s",
        len(fragments),
        card_number is not None,
        expiry_date is not None,
        cardholder_name is not None,
    )
    return Reconstruction(
        card_number=card_number,
        expiry_date=expiry_date,
        cardholder_name=cardholder_name,
        confidence=confidence,
        trace=trace,
    )


__all__ = ["Reconstruction", "average_confidence", "reconstruct"]
