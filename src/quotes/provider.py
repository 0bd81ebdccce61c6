"""Simulated shops that quote prices after an artificial delay."""

import random
from typing import Iterable, Optional, Protocol, Tuple

from src.models.data_models import DiscountCode
from src.models.errors import ProviderFetchError
from src.quotes.latency import simulate_latency


FIELD_SEPARATOR = ":"


class Provider(Protocol):
    """Anything that can synchronously quote a price for a query."""

    name: str

    def fetch(self, query: str) -> str:
        """Return a raw quote formatted as name:price:code."""
        ...


class Shop:
    """
    Slow shop returning a raw quote with a random discount code.

    Every call builds its own random source, so concurrent calls on one
    shop share no mutable state. With a seed, a shop quotes the same
    price and code for the same query every time.
    """

    def __init__(
        self,
        name: str,
        min_delay_ms: int = 0,
        max_delay_ms: int = 0,
        seed: Optional[int] = None,
        unavailable: Iterable[str] = ()
    ):
        """
        Initialize shop.

        Args:
            name: Shop identity, embedded in every raw quote
            min_delay_ms: Minimum simulated latency per call
            max_delay_ms: Maximum simulated latency per call
            seed: Optional seed for reproducible quotes
            unavailable: Queries this shop refuses to price
        """
        if not name or FIELD_SEPARATOR in name:
            raise ValueError(f"invalid shop name: {name!r}")
        if min_delay_ms < 0 or max_delay_ms < min_delay_ms:
            raise ValueError(f"invalid delay range: {min_delay_ms}..{max_delay_ms} ms")
        self._name = name
        self._delay_range: Tuple[int, int] = (min_delay_ms, max_delay_ms)
        self._seed = seed
        self._unavailable = frozenset(unavailable)

    def __repr__(self) -> str:
        return f"Shop({self._name!r})"

    @property
    def name(self) -> str:
        return self._name

    def fetch(self, query: str) -> str:
        """
        Quote a price for query, blocking for the simulated latency.

        Raises:
            ProviderFetchError: If the product is not available here
        """
        rng = self._rng(query)
        price = self._calculate_price(query, rng)
        code = rng.choice(list(DiscountCode))
        return f"{self._name}{FIELD_SEPARATOR}{price:.2f}{FIELD_SEPARATOR}{code.name}"

    def get_price(self, query: str) -> float:
        """Quote only the price, without a discount code."""
        return self._calculate_price(query, self._rng(query))

    def _rng(self, query: str) -> random.Random:
        if self._seed is None:
            return random.Random()
        return random.Random(f"{self._seed}:{self._name}:{query}")

    def _calculate_price(self, query: str, rng: random.Random) -> float:
        simulate_latency(*self._delay_range, rng=rng)
        if len(query) < 2 or query in self._unavailable:
            raise ProviderFetchError(self._name, f"product {query!r} not available")
        return rng.random() * ord(query[0]) + ord(query[1])
