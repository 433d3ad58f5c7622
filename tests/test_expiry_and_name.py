import pytest

from cardscan.models import ExpiryDate, TextFragment
from cardscan.primitives.card_expiry import find_expiry_date, parse_expiry_from_text
from cardscan.primitives.cardholder_name import find_cardholder_name


def _frag(text: str) -> TextFragment:
    return TextFragment(text=text, confidence=0.9, position=(0.5, 0.5))


@pytest.mark.parametrize(
    "text,expected",
    [
        ("12/30", ExpiryDate(12, 2030)),
        ("12/2030", ExpiryDate(12, 2030)),
        ("07 / 28", ExpiryDate(7, 2028)),
        ("07 / 2028", ExpiryDate(7, 2028)),
        ("01 29", ExpiryDate(1, 2029)),
        ("01 2029", ExpiryDate(1, 2029)),
        ("valid thru 12/34", ExpiryDate(12, 2034)),
        ("VALID THRU 0931", ExpiryDate(9, 2031)),
        ("EXP: 03/27", ExpiryDate(3, 2027)),
        ("Expires 11/2030", ExpiryDate(11, 2030)),
    ],
)
def test_parse_expiry_shapes(text, expected):
    assert parse_expiry_from_text(text) == expected


def test_two_digit_pattern_does_not_truncate_four_digit_year():
    assert parse_expiry_from_text("05/2031") == ExpiryDate(5, 2031)


@pytest.mark.parametrize("text", ["", "13/30", "00/25", "no date here", "4111 1111 1111 1111"])
def test_parse_expiry_rejects(text):
    assert parse_expiry_from_text(text) is None


def test_invalid_month_falls_through_to_later_match():
    assert parse_expiry_from_text("MEMBER SINCE 99/99 GOOD THRU 04/30") == ExpiryDate(4, 2030)


def test_expiry_text_is_mm_yyyy():
    assert ExpiryDate(3, 2027).text == "03/2027"
    assert ExpiryDate.from_parts("03", "27") == ExpiryDate(3, 2027)


def test_expiry_month_out_of_range_raises():
    with pytest.raises(ValueError):
        ExpiryDate(month=13, year=2030)


def test_first_matching_fragment_wins():
    trace = {}
    fragments = [_frag("4111 1111 1111 1111"), _frag("02/29"), _frag("03/30")]

    found = find_expiry_date(fragments, trace)

    assert found == ExpiryDate(2, 2029)
    assert trace == {"hit": True, "pattern": "mm/yy", "fragment_index": 1}


def test_expiry_not_found():
    trace = {}
    assert find_expiry_date([_frag("JOHN SMITH")], trace) is None
    assert trace["hit"] is False


def test_cardholder_name_skips_label_words():
    trace = {}
    fragments = [_frag("VALID THRU"), _frag("MEMBER SINCE 2019"), _frag("VISA DEBIT"), _frag("JOHN SMITH")]

    name = find_cardholder_name(fragments, trace)

    assert name == "JOHN SMITH"
    assert trace["excluded"] == 3


def test_cardholder_name_first_match_wins():
    assert find_cardholder_name([_frag("JANE DOE"), _frag("JOHN SMITH")]) == "JANE DOE"


def test_cardholder_name_requires_uppercase_words():
    assert find_cardholder_name([_frag("Jane Doe"), _frag("A B")]) is None


def test_cardholder_name_may_share_words_with_expiry_labels():
    assert find_cardholder_name([_frag("GOOD THRU 04/30"), _frag("GOOD HOPE")]) == "GOOD HOPE"
