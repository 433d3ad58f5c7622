from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple


@dataclass(frozen=True)
class TextFragment:
    """One unit of recognised text.

    ``position`` is the normalised centre of the fragment's bounding box. The
    vertical axis follows the recognition engine: origin at the bottom-left,
    so a larger ``y`` is higher in the frame.
    """

    text: str
    confidence: float
    position: Tuple[float, float] = (0.5, 0.5)

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be within [0, 1], got {self.confidence}")

    @property
    def x(self) -> float:
        return self.position[0]

    @property
    def y(self) -> float:
        return self.position[1]


@dataclass(frozen=True)
class ExpiryDate:
    month: int
    year: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValueError(f"month must be within 1..12, got {self.month}")

    @classmethod
    def from_parts(cls, month: str, year: str) -> "ExpiryDate":
        if len(year) == 2:
            year = "20" + year
        return cls(month=int(month), year=int(year))

    @property
    def text(self) -> str:
        return f"{self.month:02d}/{self.year:04d}"

    def __str__(self) -> str:
        return self.text


class CardBrand(str, Enum):
    VISA = "Visa"
    MASTERCARD = "Mastercard"
    AMERICAN_EXPRESS = "American Express"
    DISCOVER = "Discover"
    UNKNOWN = "Unknown"


def supported_brands() -> List[CardBrand]:
    return [brand for brand in CardBrand if brand is not CardBrand.UNKNOWN]


__all__ = ["TextFragment", "ExpiryDate", "CardBrand", "supported_brands"]
