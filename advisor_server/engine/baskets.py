"""Fixed per-tier instrument baskets and budget split fractions."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from types import MappingProxyType

from advisor_server.engine.models import RiskTier
from advisor_server.providers.models import Market

EQUITY_SUFFIX = ".NS"


@dataclass(frozen=True)
class TierProfile:
    equities: tuple[str, ...]
    cryptos: tuple[str, ...]
    equity_share: Decimal
    crypto_share: Decimal

    def __post_init__(self) -> None:
        if self.equity_share + self.crypto_share != Decimal(1):
            raise ValueError("Equity and crypto shares must sum to exactly 1.")
        if not self.equities or not self.cryptos:
            raise ValueError("Every tier needs at least one equity and one crypto instrument.")

    def basket(self, market: Market) -> tuple[str, ...]:
        return self.equities if market == "equity" else self.cryptos

    def share(self, market: Market) -> Decimal:
        return self.equity_share if market == "equity" else self.crypto_share


TIER_PROFILES = MappingProxyType(
    {
        RiskTier.LOW: TierProfile(
            equities=("RELIANCE.NS", "HDFCBANK.NS", "TCS.NS"),
            cryptos=("bitcoin", "ethereum"),
            equity_share=Decimal("0.7"),
            crypto_share=Decimal("0.3"),
        ),
        RiskTier.MEDIUM: TierProfile(
            equities=("INFY.NS", "ICICIBANK.NS", "TCS.NS"),
            cryptos=("bitcoin", "ethereum", "binancecoin"),
            equity_share=Decimal("0.6"),
            crypto_share=Decimal("0.4"),
        ),
        RiskTier.HIGH: TierProfile(
            equities=("ADANIENT.NS", "TATAMOTORS.NS", "ZOMATO.NS"),
            cryptos=("bitcoin", "ethereum", "solana"),
            equity_share=Decimal("0.5"),
            crypto_share=Decimal("0.5"),
        ),
    }
)


def profile_for(tier: RiskTier) -> TierProfile:
    return TIER_PROFILES[RiskTier.parse(tier)]


def display_name(identifier: str, market: Market) -> str:
    if market == "equity":
        return identifier.removesuffix(EQUITY_SUFFIX)
    return identifier[:1].upper() + identifier[1:]


def display_symbol(identifier: str, market: Market) -> str:
    return identifier if market == "equity" else identifier.upper()
