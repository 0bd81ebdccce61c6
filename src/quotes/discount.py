"""Discount engine applying a quote's discount code to its price."""

import math

from src.models.data_models import DiscountCode, Quote
from src.models.errors import DiscountContractError
from src.quotes.latency import simulate_latency


def _check_quote(quote: Quote) -> None:
    if not isinstance(quote, Quote):
        raise DiscountContractError(f"expected Quote, got {type(quote).__name__}")
    if not isinstance(quote.discount_code, DiscountCode):
        raise DiscountContractError(f"unknown discount code {quote.discount_code!r}")
    if not isinstance(quote.price, (int, float)) or not math.isfinite(quote.price) or quote.price < 0:
        raise DiscountContractError(f"invalid price {quote.price!r} for {quote.shop_name}")


def discounted_price(quote: Quote) -> float:
    """Price after applying the quote's discount code."""
    _check_quote(quote)
    return quote.price * (1 - quote.discount_code.rate)


class DiscountService:
    """Slow remote-like discount service."""

    def __init__(self, min_delay_ms: int = 0, max_delay_ms: int = 0):
        if min_delay_ms < 0 or max_delay_ms < min_delay_ms:
            raise ValueError(f"invalid delay range: {min_delay_ms}..{max_delay_ms} ms")
        self.min_delay_ms = min_delay_ms
        self.max_delay_ms = max_delay_ms

    def apply_discount(self, quote: Quote) -> str:
        """
        Apply the discount and format the result line.

        Raises:
            DiscountContractError: If quote is not a valid Quote
        """
        final_price = discounted_price(quote)
        simulate_latency(self.min_delay_ms, self.max_delay_ms)
        return f"{quote.shop_name} price is {final_price:.2f} (code {quote.discount_code.name})"


_instant_service = DiscountService()


def apply_discount(quote: Quote) -> str:
    """Apply the discount without simulated latency."""
    return _instant_service.apply_discount(quote)
