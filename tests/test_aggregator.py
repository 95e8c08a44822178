import pytest

from advisor_server.engine.aggregator import aggregate, select_holdings
from advisor_server.engine.errors import EmptyPortfolioSelection
from advisor_server.engine.models import Holding
from advisor_server.pricing.snapshot import PriceSnapshot


def _holding(
    holding_id: str,
    symbol: str,
    quantity: float,
    purchase_price: float,
    portfolio_id: str = "p1",
    asset_type: str = "stock",
    created_at: float = 0.0,
) -> Holding:
    return Holding(
        id=holding_id,
        portfolio_id=portfolio_id,
        symbol=symbol,
        display_name=symbol.title(),
        asset_type=asset_type,
        quantity=quantity,
        purchase_price=purchase_price,
        created_at=created_at,
    )


def test_no_holdings_returns_zero_totals() -> None:
    result = aggregate([], PriceSnapshot({"AAPL": 10.0}), "p1")
    assert result.per_holding == []
    assert result.total_value == 0.0
    assert result.total_cost == 0.0
    assert result.total_gain == 0.0
    assert result.total_gain_percent == 0.0
    assert result.error is None


def test_no_selection_reports_empty_selection() -> None:
    holdings = [_holding("h1", "AAPL", 10, 100)]
    result = aggregate(holdings, PriceSnapshot({"AAPL": 110.0}), None)
    assert isinstance(result.error, EmptyPortfolioSelection)
    assert result.total_value == 0.0
    assert result.per_holding == []


def test_values_and_gains() -> None:
    holdings = [
        _holding("h1", "AAPL", 10, 100),
        _holding("h2", "BTC", 2, 1000, asset_type="crypto"),
    ]
    result = aggregate(holdings, PriceSnapshot({"AAPL": 110.0, "BTC": 900.0}), "p1")
    assert result.total_value == pytest.approx(2900.0)
    assert result.total_cost == pytest.approx(3000.0)
    assert result.total_gain == pytest.approx(-100.0)
    assert result.total_gain_percent == pytest.approx(-100.0 / 3000.0 * 100.0)
    by_id = {row.holding.id: row for row in result.per_holding}
    assert by_id["h1"].gain == pytest.approx(100.0)
    assert by_id["h1"].gain_percent == pytest.approx(10.0)
    assert by_id["h2"].gain == pytest.approx(-200.0)
    assert result.by_asset_type == {"crypto": pytest.approx(1800.0), "stock": pytest.approx(1100.0)}
    assert sum(row.weight for row in result.per_holding) == pytest.approx(1.0)


def test_unavailable_price_falls_back_to_purchase_price() -> None:
    holdings = [_holding("h1", "AAPL", 10, 100), _holding("h2", "MSFT", 1, 50)]
    result = aggregate(holdings, PriceSnapshot({"AAPL": None}), "p1")
    for row in result.per_holding:
        assert row.price_is_fallback is True
        assert row.current_price == row.holding.purchase_price
        assert row.gain == 0.0
    assert result.total_gain == 0.0
    assert result.fallback_symbols == ["AAPL", "MSFT"]


def test_same_symbol_in_two_holdings_is_not_merged() -> None:
    holdings = [_holding("h1", "AAPL", 10, 100), _holding("h2", "AAPL", 5, 200)]
    result = aggregate(holdings, PriceSnapshot({"AAPL": 150.0}), "p1")
    assert len(result.per_holding) == 2
    assert sorted(row.market_value for row in result.per_holding) == [750.0, 1500.0]
    assert result.total_value == 2250.0
    assert result.total_cost == 2000.0


def test_other_portfolios_are_excluded() -> None:
    holdings = [_holding("h1", "AAPL", 10, 100), _holding("h2", "AAPL", 99, 100, portfolio_id="p2")]
    result = aggregate(holdings, PriceSnapshot({"AAPL": 100.0}), "p1")
    assert [row.holding.id for row in result.per_holding] == ["h1"]
    assert result.total_value == 1000.0


def test_zero_cost_basis_has_zero_gain_percent() -> None:
    result = aggregate([_holding("h1", "AAPL", 0, 100)], PriceSnapshot({"AAPL": 120.0}), "p1")
    assert result.total_cost == 0.0
    assert result.total_gain_percent == 0.0
    assert result.per_holding[0].gain_percent == 0.0
    assert result.per_holding[0].weight == 0.0


def test_result_does_not_depend_on_input_order() -> None:
    holdings = [
        _holding("h1", "AAA", 0.1, 3.3, created_at=1.0),
        _holding("h2", "BBB", 0.2, 7.7, created_at=2.0),
        _holding("h3", "CCC", 0.3, 1.1, created_at=3.0),
        _holding("h4", "DDD", 1e-3, 123456.789, created_at=3.0),
    ]
    snapshot = PriceSnapshot({"AAA": 3.7, "BBB": 7.1, "CCC": 1.3, "DDD": 120000.01})
    forward = aggregate(holdings, snapshot, "p1")
    backward = aggregate(list(reversed(holdings)), snapshot, "p1")
    assert forward == backward
    assert [row.holding.id for row in forward.per_holding] == ["h3", "h4", "h2", "h1"]


def test_select_holdings_orders_newest_first() -> None:
    holdings = [_holding("a", "AAA", 1, 1, created_at=1.0), _holding("b", "BBB", 1, 1, created_at=5.0)]
    assert [holding.id for holding in select_holdings(holdings, "p1")] == ["b", "a"]
    assert select_holdings(holdings, None) == []
