import pytest

from cardscan.models import CardBrand, supported_brands
from cardscan.validator import (
    extract_digits,
    format_card_number,
    identify_brand,
    is_valid_card_number,
    mask_card_number,
    strip_separators,
)


@pytest.mark.parametrize(
    "number",
    [
        "4111111111111111",
        "4012888888881881",
        "5555555555554444",
        "378282246310005",
        "6011111111111117",
        "4222222222222",
        "4111 1111 1111 1111",
        "4111-1111-1111-1111",
    ],
)
def test_luhn_valid_numbers_pass(number):
    assert is_valid_card_number(number)


@pytest.mark.parametrize(
    "number",
    [
        "",
        "123",
        "12345678901234567890",
        "411a111111111111",
        "4111111111111112",
        "1234567890123456",
        "４１１１１１１１１１１１１１１１",
    ],
)
def test_invalid_numbers_are_rejected(number):
    assert not is_valid_card_number(number)


def test_extract_digits():
    assert extract_digits("abc123def456") == "123456"
    assert extract_digits("!@#$%^&*()") == ""
    assert extract_digits("카드 4111 ✓ 1111") == "41111111"


def test_format_card_number_groups_by_four():
    assert format_card_number("4111111111111111") == "4111 1111 1111 1111"
    assert format_card_number("378282246310005") == "3782 8224 6310 005"
    assert format_card_number("") == ""


def test_format_then_extract_round_trips():
    for digits in ("4", "12345", "4111111111111111", "6011000990139424123"):
        assert extract_digits(format_card_number(digits)) == digits


@pytest.mark.parametrize(
    "number,brand",
    [
        ("4111111111111111", CardBrand.VISA),
        ("4222222222222", CardBrand.VISA),
        ("5555555555554444", CardBrand.MASTERCARD),
        ("2221000000000009", CardBrand.MASTERCARD),
        ("2720990000000000", CardBrand.MASTERCARD),
        ("2721000000000000", CardBrand.UNKNOWN),
        ("378282246310005", CardBrand.AMERICAN_EXPRESS),
        ("371449635398431", CardBrand.AMERICAN_EXPRESS),
        ("6011111111111117", CardBrand.DISCOVER),
        ("1234567890123456", CardBrand.UNKNOWN),
        ("41111111111111", CardBrand.UNKNOWN),
        ("", CardBrand.UNKNOWN),
    ],
)
def test_identify_brand(number, brand):
    assert identify_brand(number) is brand


def test_supported_brands_excludes_unknown():
    assert CardBrand.UNKNOWN not in supported_brands()
    assert len(supported_brands()) == 4


def test_mask_keeps_first_and_last_four():
    assert mask_card_number("4111111111111111") == "4111********1111"
    assert mask_card_number("12345678") == "12345678"
    assert mask_card_number("1234567") == "*******"


def test_strip_separators_only_drops_spaces_and_hyphens():
    assert strip_separators("4111-1111 1111-1111") == "4111111111111111"
    assert strip_separators("4111.1111") == "4111.1111"
    assert strip_separators(None) == ""
