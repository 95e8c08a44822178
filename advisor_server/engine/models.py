"""Typed value objects for allocation plans, holdings and valuations."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Literal

from advisor_server.engine.errors import EmptyPortfolioSelection, PriceSourceUnavailable, SymbolPriceUnavailable
from advisor_server.pricing.snapshot import UNAVAILABLE, PriceValue
from advisor_server.providers.models import Market

AssetType = Literal["stock", "crypto", "etf"]
ASSET_TYPES: tuple[str, ...] = ("stock", "crypto", "etf")


class RiskTier(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def parse(cls, value: str | RiskTier | None) -> RiskTier:
        if isinstance(value, RiskTier):
            return value
        if value is None or not str(value).strip():
            return cls.MEDIUM
        try:
            return cls(str(value).strip().lower())
        except ValueError as error:
            raise ValueError("Risk level must be one of: low, medium, high.") from error


@dataclass(frozen=True)
class AllocationEntry:
    identifier: str
    symbol: str
    display_name: str
    market: Market
    amount_to_invest: float
    reference_price: PriceValue = UNAVAILABLE

    @property
    def price_available(self) -> bool:
        return self.reference_price is not UNAVAILABLE


@dataclass
class AllocationPlan:
    amount: float
    tier: RiskTier
    stock_budget: float
    crypto_budget: float
    stock_plan: list[AllocationEntry] = field(default_factory=list)
    crypto_plan: list[AllocationEntry] = field(default_factory=list)
    market_errors: dict[str, PriceSourceUnavailable] = field(default_factory=dict)
    unavailable: list[SymbolPriceUnavailable] = field(default_factory=list)

    @property
    def total_invested(self) -> float:
        return sum(entry.amount_to_invest for entry in self.stock_plan + self.crypto_plan)

    @property
    def unallocated(self) -> float:
        return max(0.0, self.amount - self.total_invested)


@dataclass(frozen=True)
class Portfolio:
    id: str
    name: str
    description: str | None = None
    created_at: float = 0.0


@dataclass(frozen=True)
class Holding:
    id: str
    portfolio_id: str
    symbol: str
    display_name: str
    asset_type: str
    quantity: float
    purchase_price: float
    purchase_date: date = field(default_factory=date.today)
    notes: str | None = None
    created_at: float = 0.0

    @property
    def market(self) -> Market:
        return "crypto" if self.asset_type == "crypto" else "equity"


@dataclass(frozen=True)
class HoldingValuation:
    holding: Holding
    current_price: float
    market_value: float
    cost_basis: float
    gain: float
    gain_percent: float
    weight: float = 0.0
    price_is_fallback: bool = False


@dataclass
class ValuationResult:
    portfolio_id: str | None
    per_holding: list[HoldingValuation] = field(default_factory=list)
    total_value: float = 0.0
    total_cost: float = 0.0
    total_gain: float = 0.0
    total_gain_percent: float = 0.0
    by_asset_type: dict[str, float] = field(default_factory=dict)
    fallback_symbols: list[str] = field(default_factory=list)
    priced_at: float | None = None
    error: EmptyPortfolioSelection | None = None

    @classmethod
    def empty(cls, portfolio_id: str | None, priced_at: float | None = None) -> ValuationResult:
        error = EmptyPortfolioSelection() if portfolio_id is None else None
        return cls(portfolio_id=portfolio_id, priced_at=priced_at, error=error)
