"""Immutable point-in-time price snapshots."""

from __future__ import annotations

import math
import time
from collections.abc import Iterable, Iterator, Mapping
from enum import Enum
from types import MappingProxyType


class Unavailable(Enum):
    UNAVAILABLE = "unavailable"

    def __str__(self) -> str:
        return "N/A"


UNAVAILABLE = Unavailable.UNAVAILABLE
PriceValue = float | Unavailable


def normalize_price(value: object) -> PriceValue:
    """Coerce a raw provider value to a positive finite price or UNAVAILABLE."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return UNAVAILABLE
    price = float(value)
    if not math.isfinite(price) or price <= 0:
        return UNAVAILABLE
    return price


class PriceSnapshot(Mapping[str, PriceValue]):
    """Read-only mapping of instrument id to price or UNAVAILABLE.

    A refresh never mutates a published snapshot; each refresh cycle
    publishes a new object.
    """

    __slots__ = ("_prices", "_simulated", "_failed_markets", "_fetched_at")

    def __init__(
        self,
        prices: Mapping[str, object] | None = None,
        simulated: Iterable[str] = (),
        failed_markets: Iterable[str] = (),
        fetched_at: float | None = None,
    ) -> None:
        normalized = {key: normalize_price(value) for key, value in (prices or {}).items()}
        self._prices = MappingProxyType(normalized)
        self._simulated = frozenset(key for key in simulated if key in normalized)
        self._failed_markets = frozenset(failed_markets)
        self._fetched_at = time.time() if fetched_at is None else fetched_at

    @classmethod
    def empty(cls) -> PriceSnapshot:
        return cls({}, fetched_at=0.0)

    def __getitem__(self, key: str) -> PriceValue:
        return self._prices[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._prices)

    def __len__(self) -> int:
        return len(self._prices)

    def __setattr__(self, name: str, value: object) -> None:
        if hasattr(self, "_fetched_at"):
            raise AttributeError("PriceSnapshot is immutable")
        object.__setattr__(self, name, value)

    def __repr__(self) -> str:
        return f"PriceSnapshot({dict(self._prices)!r}, simulated={sorted(self._simulated)!r})"

    @property
    def simulated(self) -> frozenset[str]:
        return self._simulated

    @property
    def failed_markets(self) -> frozenset[str]:
        return self._failed_markets

    @property
    def fetched_at(self) -> float:
        return self._fetched_at

    def price_of(self, key: str) -> float | None:
        value = self._prices.get(key, UNAVAILABLE)
        return None if value is UNAVAILABLE else value

    def unavailable(self) -> list[str]:
        return sorted(key for key, value in self._prices.items() if value is UNAVAILABLE)
