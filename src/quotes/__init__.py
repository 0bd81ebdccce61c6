"""Quote sources and the parse and discount stages."""

from .discount import DiscountService, apply_discount
from .parser import parse_quote
from .provider import Provider, Shop

__all__ = ["DiscountService", "Provider", "Shop", "apply_discount", "parse_quote"]
