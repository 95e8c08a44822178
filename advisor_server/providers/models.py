"""Normalized records shared across price providers and sources."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

ProviderName = Literal["coingecko", "yahoo", "simulated", "fixed"]
Market = Literal["equity", "crypto"]
MARKETS: tuple[Market, ...] = ("equity", "crypto")


@dataclass(frozen=True)
class SymbolPrice:
    symbol: str
    price: float | None
    source: ProviderName
