from cardscan.primitives.registry import get_strategy, list_strategies, register_strategy

from . import card_number  # noqa: F401
from cardscan.primitives.card_expiry import find_expiry_date, parse_expiry_from_text
from cardscan.primitives.card_number import ReconstructConfig, find_card_number, find_vertical_card_number
from cardscan.primitives.cardholder_name import find_cardholder_name

__all__ = [
    "ReconstructConfig",
    "find_card_number",
    "find_cardholder_name",
    "find_expiry_date",
    "find_vertical_card_number",
    "get_strategy",
    "list_strategies",
    "parse_expiry_from_text",
    "register_strategy",
]
