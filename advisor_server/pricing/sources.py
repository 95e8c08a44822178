"""Price source capability and its live, simulated and fixed implementations."""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Mapping, Sequence
from typing import Protocol

from advisor_server.engine.errors import PriceSourceUnavailable
from advisor_server.providers.coingecko import CoinGeckoClient
from advisor_server.providers.http import ProviderError
from advisor_server.providers.models import ProviderName
from advisor_server.providers.yahoo_finance import YahooFinanceClient

LOGGER = logging.getLogger(__name__)
MAX_SIMULATED_VOLATILITY = 0.5


class PriceSource(Protocol):
    """Fetches prices for one market; absent ids map to None.

    Raises ``PriceSourceUnavailable`` only when the whole batch failed.
    """

    name: ProviderName
    simulated: bool

    async def fetch_prices(self, ids: Sequence[str]) -> dict[str, float | None]: ...


class CryptoPriceSource:
    name: ProviderName = "coingecko"
    simulated = False

    def __init__(self, client: CoinGeckoClient) -> None:
        self.client = client

    async def fetch_prices(self, ids: Sequence[str]) -> dict[str, float | None]:
        try:
            return await asyncio.to_thread(self.client.get_prices, list(ids))
        except ProviderError as error:
            LOGGER.warning("crypto batch failed: provider=%s code=%s status=%s", error.provider, error.code, error.status)
            raise PriceSourceUnavailable("Live crypto prices could not be fetched.", market="crypto") from error


class EquityPriceSource:
    """Fetches each symbol concurrently; one failing symbol never affects the others."""

    name: ProviderName = "yahoo"
    simulated = False

    def __init__(self, client: YahooFinanceClient) -> None:
        self.client = client

    async def fetch_prices(self, ids: Sequence[str]) -> dict[str, float | None]:
        symbols = list(ids)
        if not symbols:
            return {}
        results = await asyncio.gather(
            *(asyncio.to_thread(self.client.get_price, symbol) for symbol in symbols),
            return_exceptions=True,
        )
        out: dict[str, float | None] = {}
        failures = 0
        for symbol, result in zip(symbols, results):
            if isinstance(result, ProviderError):
                failures += 1
                LOGGER.info("equity symbol unavailable: symbol=%s code=%s", symbol, result.code)
                out[symbol] = None
            elif isinstance(result, BaseException):
                failures += 1
                LOGGER.error("equity symbol unexpected failure: symbol=%s", symbol, exc_info=result)
                out[symbol] = None
            else:
                out[symbol] = result.price
        if failures == len(symbols):
            raise PriceSourceUnavailable("Live equity prices could not be fetched.", market="equity")
        return out


class SimulatedPriceSource:
    """Stand-in feed: perturbs a reference price by a bounded uniform factor.

    Every synthesized price lies within ``reference * (1 +/- volatility)``.
    Pass a seeded ``random.Random`` for reproducible output.
    """

    name: ProviderName = "simulated"
    simulated = True

    def __init__(
        self,
        reference_prices: Mapping[str, float] | None = None,
        volatility: float = 0.10,
        rng: random.Random | None = None,
    ) -> None:
        self.volatility = min(max(0.0, volatility), MAX_SIMULATED_VOLATILITY)
        self.rng = rng or random.Random()
        self._reference: dict[str, float] = {}
        self.replace_references(reference_prices or {})

    def replace_references(self, reference_prices: Mapping[str, float]) -> None:
        """Swap in a new reference table; symbols not listed are dropped."""
        self._reference = {
            symbol: float(price) for symbol, price in reference_prices.items() if price > 0
        }

    def reference_price(self, symbol: str) -> float | None:
        return self._reference.get(symbol)

    def synthesize(self, symbol: str) -> float | None:
        base = self._reference.get(symbol)
        if base is None:
            return None
        return base * (1 + self.rng.uniform(-self.volatility, self.volatility))

    async def fetch_prices(self, ids: Sequence[str]) -> dict[str, float | None]:
        return {symbol: self.synthesize(symbol) for symbol in ids}


class FixedPriceSource:
    """Deterministic source returning the same prices on every fetch."""

    name: ProviderName = "fixed"
    simulated = False

    def __init__(self, prices: Mapping[str, float | None] | None = None) -> None:
        self.prices = dict(prices or {})
        self.calls: list[list[str]] = []

    async def fetch_prices(self, ids: Sequence[str]) -> dict[str, float | None]:
        self.calls.append(list(ids))
        return {symbol: self.prices.get(symbol) for symbol in ids}
