import pytest

from cardscan.models import ExpiryDate, TextFragment
from cardscan.primitives import get_strategy, list_strategies, register_strategy
from cardscan.primitives.card_number import (
    ReconstructConfig,
    find_card_number,
    find_vertical_card_number,
    group_rows,
)
from cardscan.reconstruct import average_confidence, reconstruct


def _frag(text: str, x: float = 0.5, y: float = 0.5, conf: float = 0.95) -> TextFragment:
    return TextFragment(text=text, confidence=conf, position=(x, y))


def test_strategies_registered_in_search_order():
    assert list(list_strategies()) == ["single_fragment", "combinations", "positional", "vertical_groups"]


def test_single_fragment_with_label_noise():
    trace = {}
    found = find_card_number([_frag("Card: 4111111111111111")], trace=trace)

    assert found == "4111111111111111"
    assert trace["strategy"] == "single_fragment"
    assert trace["single_fragment"]["preview"] == "4111********1111"


def test_single_fragment_with_spaces_and_hyphens():
    assert find_card_number([_frag("5555-5555 5555-4444")]) == "5555555555554444"


def test_pair_combination_recovers_split_number():
    fragments = [_frag("6011 1111"), _frag("JOHN SMITH"), _frag("1111 1117")]
    trace = {}

    found = find_card_number(fragments, trace=trace)

    assert found == "6011111111111117"
    assert trace["strategy"] == "combinations"
    assert trace["combinations"]["window_size"] == 2


def test_triple_combination_for_amex_layout():
    fragments = [_frag("3782"), _frag("822463"), _frag("10005")]
    trace = {}

    found = find_card_number(fragments, trace=trace)

    assert found == "378282246310005"
    assert trace["combinations"]["window_size"] == 3


def test_single_row_groups_found_positionally():
    fragments = [
        _frag("1111", x=0.8, y=0.5),
        _frag("4111", x=0.2, y=0.5),
        _frag("1111", x=0.6, y=0.52),
        _frag("1111", x=0.4, y=0.48),
    ]
    trace = {}

    found = find_card_number(fragments, trace=trace)

    assert found == "4111111111111111"
    assert trace["strategy"] == "positional"
    assert trace["positional"]["rows"] == 1


def test_stacked_rows_read_top_first():
    fragments = [
        _frag("1111", x=0.3, y=0.2),
        _frag("1111", x=0.7, y=0.2),
        _frag("4111", x=0.3, y=0.6),
        _frag("1111", x=0.7, y=0.6),
    ]
    assert find_card_number(fragments) == "4111111111111111"


def test_vertical_layout_window_of_four_groups():
    fragments = [_frag("4111"), _frag("1111"), _frag("1111"), _frag("1111")]
    assert find_vertical_card_number(fragments) == "4111111111111111"


def test_vertical_layout_slides_past_leading_noise():
    fragments = [_frag("9998"), _frag("4111"), _frag("1111"), _frag("1111"), _frag("1111")]
    assert find_vertical_card_number(fragments) == "4111111111111111"


def test_vertical_layout_ignores_non_group_fragments():
    fragments = [_frag("4111"), _frag("12/30"), _frag("1111"), _frag("41111"), _frag("1111")]
    assert find_vertical_card_number(fragments) is None


def test_combination_search_skipped_above_cap():
    fragments = [_frag("6011 1111"), _frag("1111 1117")]
    cfg = ReconstructConfig(max_combination_fragments=1)
    trace = {}

    find_card_number(fragments, cfg, trace)

    assert trace["combinations"]["skipped"] is True
    assert trace["combinations"]["hit"] is False


def test_no_number_found():
    trace = {}
    assert find_card_number([_frag("JOHN SMITH"), _frag("1234")], trace=trace) is None
    assert trace["strategy"] is None


def test_group_rows_tolerance():
    fragments = [_frag("a", x=0.9, y=0.55), _frag("b", x=0.1, y=0.5), _frag("c", x=0.5, y=0.3)]
    rows = group_rows(fragments, 0.1)
    assert [[f.text for f in row] for row in rows] == [["b", "a"], ["c"]]


def test_average_confidence_covers_all_fragments():
    fragments = [_frag("4111111111111111", conf=1.0), _frag("noise", conf=0.5)]
    assert average_confidence(fragments) == 0.75
    assert average_confidence([]) == 0.0


def test_reconstruct_full_card():
    fragments = [
        _frag("VISA", y=0.9, conf=0.99),
        _frag("4111 1111 1111 1111", y=0.5, conf=0.9),
        _frag("VALID THRU 08/29", y=0.3, conf=0.8),
        _frag("JANE DOE", y=0.1, conf=0.7),
    ]

    result = reconstruct(fragments)

    assert result.card_number == "4111111111111111"
    assert result.expiry_date == ExpiryDate(month=8, year=2029)
    assert result.cardholder_name == "JANE DOE"
    assert result.is_complete
    assert abs(result.confidence - 0.8475) < 1e-9
    assert result.trace["expiry"]["pattern"] == "labelled"
    assert "4111111111111111" not in repr(result)


def test_reconstruct_reports_missing_fields():
    result = reconstruct([_frag("hello world")])
    assert result.card_number is None
    assert result.expiry_date is None
    assert not result.is_complete


def test_registry_lookup_and_duplicates():
    assert get_strategy("positional") is list_strategies()["positional"]
    with pytest.raises(ValueError, match="Unknown strategy"):
        get_strategy("guess")
    with pytest.raises(ValueError):
        register_strategy("single_fragment")(lambda fragments, cfg, trace_entry: None)
