from __future__ import annotations

import re

from cardscan.models import CardBrand

MIN_PAN_LENGTH = 13
MAX_PAN_LENGTH = 19

_NON_DIGIT_RE = re.compile(r"[^0-9]")
_SEPARATOR_RE = re.compile(r"[ \-]")
_ASCII_DIGITS_RE = re.compile(r"[0-9]+")


def _luhn(digits: str) -> bool:
    total = 0
    parity = len(digits) % 2
    for idx, ch in enumerate(digits):
        value = int(ch)
        if idx % 2 == parity:
            value *= 2
            if value > 9:
                value -= 9
        total += value
    return total % 10 == 0


def strip_separators(text: str) -> str:
    return _SEPARATOR_RE.sub("", text or "")


def is_valid_card_number(text: str) -> bool:
    cleaned = strip_separators(text)
    if not _ASCII_DIGITS_RE.fullmatch(cleaned):
        return False
    if not MIN_PAN_LENGTH <= len(cleaned) <= MAX_PAN_LENGTH:
        return False
    return _luhn(cleaned)


def is_pan_length(digits: str) -> bool:
    return MIN_PAN_LENGTH <= len(digits) <= MAX_PAN_LENGTH


def extract_digits(text: str) -> str:
    return _NON_DIGIT_RE.sub("", text or "")


def format_card_number(digits: str) -> str:
    cleaned = extract_digits(digits)
    return " ".join(cleaned[i : i + 4] for i in range(0, len(cleaned), 4))


def identify_brand(digits: str) -> CardBrand:
    """Classify a card number by prefix and length.

    Rules are evaluated Visa, Mastercard, American Express, Discover; the
    first match wins and anything else is ``CardBrand.UNKNOWN``.
    """
    cleaned = extract_digits(digits)
    length = len(cleaned)

    if cleaned.startswith("4") and length in (13, 16, 19):
        return CardBrand.VISA
    if length == 16:
        if cleaned.startswith("5"):
            return CardBrand.MASTERCARD
        if 2221 <= int(cleaned[:4]) <= 2720:
            return CardBrand.MASTERCARD
    if length == 15 and cleaned.startswith(("34", "37")):
        return CardBrand.AMERICAN_EXPRESS
    if length == 16 and cleaned.startswith("6"):
        return CardBrand.DISCOVER
    return CardBrand.UNKNOWN


def mask_card_number(digits: str) -> str:
    cleaned = extract_digits(digits)
    if len(cleaned) >= 8:
        return cleaned[:4] + "*" * (len(cleaned) - 8) + cleaned[-4:]
    return "*" * len(cleaned)


__all__ = [
    "MIN_PAN_LENGTH",
    "MAX_PAN_LENGTH",
    "is_valid_card_number",
    "strip_separators",
    "is_pan_length",
    "extract_digits",
    "format_card_number",
    "identify_brand",
    "mask_card_number",
]
