"""Domain errors raised or recorded by the allocation and valuation engine."""

from __future__ import annotations

from dataclasses import dataclass

from advisor_server.providers.models import Market


@dataclass
class AdvisorError(Exception):
    message: str
    code: str = "ADVISOR_ERROR"

    def __str__(self) -> str:
        return self.message


@dataclass
class InvalidAmount(AdvisorError, ValueError):
    value: object = None
    code: str = "INVALID_AMOUNT"


@dataclass
class PriceSourceUnavailable(AdvisorError):
    market: Market | None = None
    code: str = "PRICE_SOURCE_UNAVAILABLE"


@dataclass
class SymbolPriceUnavailable(AdvisorError):
    """Recorded per instrument; degrades one entry, never aborts a computation."""

    symbol: str = ""
    code: str = "SYMBOL_PRICE_UNAVAILABLE"


@dataclass
class EmptyPortfolioSelection(AdvisorError):
    message: str = "No portfolio is selected."
    code: str = "EMPTY_PORTFOLIO_SELECTION"
