"""Parser turning raw provider output into structured quotes."""

import math

from src.models.data_models import DiscountCode, Quote
from src.models.errors import MalformedQuoteError
from src.quotes.provider import FIELD_SEPARATOR


def _parse_price(raw: str, token: str) -> float:
    try:
        price = float(token)
    except ValueError:
        raise MalformedQuoteError(raw, f"price {token!r} is not a number") from None
    if not math.isfinite(price) or price < 0:
        raise MalformedQuoteError(raw, f"price {token!r} must be finite and non-negative")
    return price


def _parse_code(raw: str, token: str) -> DiscountCode:
    try:
        return DiscountCode[token]
    except KeyError:
        raise MalformedQuoteError(raw, f"unknown discount code {token!r}") from None


def parse_quote(raw: str) -> Quote:
    """
    Parse a raw "name:price:code" quote.

    Args:
        raw: Raw quote produced by a provider

    Returns:
        Parsed Quote

    Raises:
        MalformedQuoteError: On wrong field count, blank shop name, padded fields,
            invalid price, or unknown discount code
    """
    if not isinstance(raw, str):
        raise MalformedQuoteError(repr(raw), "raw quote must be a string")

    fields = raw.split(FIELD_SEPARATOR)
    if len(fields) != 3:
        raise MalformedQuoteError(raw, f"expected 3 fields, got {len(fields)}")

    shop_name, price_token, code_token = fields
    if not shop_name.strip():
        raise MalformedQuoteError(raw, "shop name is blank")
    if any(field != field.strip() for field in fields):
        raise MalformedQuoteError(raw, "fields must not have surrounding whitespace")

    return Quote(
        shop_name=shop_name,
        price=_parse_price(raw, price_token),
        discount_code=_parse_code(raw, code_token),
    )
