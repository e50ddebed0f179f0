# backend/utils/prices.py
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Union

TWO_PLACES = Decimal("0.01")
ONE_PLACE = Decimal("0.1")


def normalize_price(value: Any) -> str:
    """
    Turn a marketplace price into a plain decimal string.

    Accepts a string ("12,50 €"), a number (12.5) or an object carrying a
    minor-unit amount ({"amount": 1250, "currency_code": "EUR"}).
    Unknown shapes give "0". Normalizing an already normalized string
    returns it unchanged.
    """
    if isinstance(value, bool) or value is None:
        return "0"
    if isinstance(value, (int, float, Decimal)):
        try:
            return format(Decimal(str(value)), "f")
        except InvalidOperation:
            return "0"
    if isinstance(value, str):
        cleaned = (
            value.strip()
            .replace("\u00a0", "")
            .replace(" ", "")
            .replace("€", "")
            .replace(",", ".")
        )
        return cleaned or "0"
    if isinstance(value, dict) and value.get("amount") is not None:
        try:
            amount = Decimal(str(value["amount"]).strip().replace(",", "."))
        except InvalidOperation:
            return "0"
        return format((amount / 100).quantize(TWO_PLACES), "f")
    return "0"


def parse_money(value: Union[str, int, float, Decimal]) -> Decimal:
    """Parse user-entered money ("25", "25,50") into a non-negative Decimal."""
    try:
        amount = Decimal(normalize_price(value))
    except InvalidOperation:
        raise ValueError("must be a decimal number")
    if not amount.is_finite():
        raise ValueError("must be a decimal number")
    if amount < 0:
        raise ValueError("must be greater than or equal to 0")
    return amount.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def format_money(value: Union[Decimal, int, float, None]) -> str:
    return _fixed(value, TWO_PLACES)


def format_percent(value: Union[Decimal, int, float, None]) -> str:
    return _fixed(value, ONE_PLACE)


def _fixed(value, places: Decimal) -> str:
    amount = Decimal(str(value)) if value is not None else Decimal("0")
    amount = amount.quantize(places, rounding=ROUND_HALF_UP)
    # Avoid "-0.00" for values that round to zero
    if amount == 0:
        amount = abs(amount)
    return format(amount, "f")
