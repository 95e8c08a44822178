from decimal import Decimal

import pytest

from advisor_server.engine.baskets import TIER_PROFILES, profile_for
from advisor_server.engine.errors import InvalidAmount
from advisor_server.engine.models import RiskTier
from advisor_server.engine.planner import parse_amount, per_instrument_amount, plan
from advisor_server.pricing.snapshot import UNAVAILABLE, PriceSnapshot

MEDIUM_PRICES = {
    "INFY.NS": 1500.0,
    "ICICIBANK.NS": 1100.0,
    "TCS.NS": 3900.0,
    "bitcoin": 5_000_000.0,
    "ethereum": 250_000.0,
    "binancecoin": 50_000.0,
}


def test_tier_shares_sum_to_exactly_one() -> None:
    for profile in TIER_PROFILES.values():
        assert profile.equity_share + profile.crypto_share == Decimal(1)
        assert float(profile.equity_share) + float(profile.crypto_share) == 1.0


def test_medium_plan_for_ten_thousand() -> None:
    result = plan(10000, RiskTier.MEDIUM, PriceSnapshot(MEDIUM_PRICES))
    assert [entry.amount_to_invest for entry in result.stock_plan] == [2000.0, 2000.0, 2000.0]
    assert [entry.amount_to_invest for entry in result.crypto_plan] == [1333.0, 1333.0, 1333.0]
    assert result.stock_budget == 6000.0
    assert result.crypto_budget == 4000.0
    assert result.unallocated == 1.0
    assert result.market_errors == {}
    assert result.unavailable == []


def test_entries_carry_display_fields_and_prices() -> None:
    result = plan(10000, "medium", PriceSnapshot(MEDIUM_PRICES))
    infy = result.stock_plan[0]
    assert infy.identifier == "INFY.NS"
    assert infy.display_name == "INFY"
    assert infy.reference_price == 1500.0
    bitcoin = result.crypto_plan[0]
    assert bitcoin.display_name == "Bitcoin"
    assert bitcoin.symbol == "BITCOIN"
    assert bitcoin.market == "crypto"


def test_invested_total_stays_within_budget_for_every_tier() -> None:
    for tier in RiskTier:
        for amount in (1, 7, 99.99, 1234.56, 10000, 3333333.33):
            result = plan(amount, tier, PriceSnapshot({}))
            for entries, budget in ((result.stock_plan, result.stock_budget), (result.crypto_plan, result.crypto_budget)):
                invested = sum(entry.amount_to_invest for entry in entries)
                assert invested <= budget + 1e-9
                assert budget - invested < len(entries)


def test_missing_price_degrades_only_that_entry() -> None:
    prices = {key: value for key, value in MEDIUM_PRICES.items() if key != "bitcoin"}
    result = plan(10000, RiskTier.MEDIUM, PriceSnapshot(prices))
    bitcoin = result.crypto_plan[0]
    assert bitcoin.reference_price is UNAVAILABLE
    assert bitcoin.price_available is False
    assert bitcoin.amount_to_invest == 1333.0
    assert result.crypto_plan[1].reference_price == 250_000.0
    assert [item.symbol for item in result.unavailable] == ["bitcoin"]


def test_failed_market_still_returns_other_market() -> None:
    equities = {key: MEDIUM_PRICES[key] for key in ("INFY.NS", "ICICIBANK.NS", "TCS.NS")}
    snapshot = PriceSnapshot(equities, failed_markets={"crypto"})
    result = plan(10000, RiskTier.MEDIUM, snapshot)
    assert result.crypto_plan == []
    assert result.market_errors["crypto"].market == "crypto"
    assert len(result.stock_plan) == 3
    assert result.total_invested == 6000.0


def test_low_tier_uses_two_crypto_instruments() -> None:
    result = plan(10000, RiskTier.LOW, PriceSnapshot({}))
    assert [entry.identifier for entry in result.crypto_plan] == ["bitcoin", "ethereum"]
    assert [entry.amount_to_invest for entry in result.crypto_plan] == [1500.0, 1500.0]
    assert [entry.amount_to_invest for entry in result.stock_plan] == [2333.0, 2333.0, 2333.0]


def test_cent_unit_truncates_to_cents() -> None:
    result = plan(100, RiskTier.LOW, PriceSnapshot({}), unit=0.01)
    assert [entry.amount_to_invest for entry in result.stock_plan] == [23.33, 23.33, 23.33]
    assert [entry.amount_to_invest for entry in result.crypto_plan] == [15.0, 15.0]


def test_per_instrument_amount_floors() -> None:
    assert per_instrument_amount(Decimal(4000), 3) == Decimal(1333)
    assert per_instrument_amount(Decimal(6000), 3) == Decimal(2000)
    assert per_instrument_amount(Decimal(10), 0) == Decimal(0)


@pytest.mark.parametrize("bad", [0, -5, float("nan"), float("inf"), "100", True, None])
def test_plan_rejects_invalid_amounts(bad) -> None:
    with pytest.raises(InvalidAmount):
        plan(bad, RiskTier.MEDIUM, PriceSnapshot({}))


def test_parse_amount_accepts_numeric_input() -> None:
    assert parse_amount("10,000") == 10000.0
    assert parse_amount(" 250.5 ") == 250.5
    assert parse_amount(42) == 42.0


@pytest.mark.parametrize("raw", ["", "   ", "abc", None, "-1", "0", True, "nan", "inf"])
def test_parse_amount_rejects_bad_input(raw) -> None:
    with pytest.raises(InvalidAmount):
        parse_amount(raw)


def test_risk_tier_parse() -> None:
    assert RiskTier.parse(" HIGH ") is RiskTier.HIGH
    assert RiskTier.parse(None) is RiskTier.MEDIUM
    assert profile_for(RiskTier.HIGH).cryptos == ("bitcoin", "ethereum", "solana")
    with pytest.raises(ValueError):
        RiskTier.parse("extreme")
