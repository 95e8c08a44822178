import pytest

from advisor_server.portfolio.store import InMemoryPortfolioStore
from advisor_server.portfolio.validation import validate_holding_input, validate_portfolio_input


def test_listings_are_newest_first() -> None:
    store = InMemoryPortfolioStore()
    first = store.create_portfolio("First")
    second = store.create_portfolio("  Second  ", "  ")
    assert [portfolio.id for portfolio in store.list_portfolios()] == [second.id, first.id]
    assert second.name == "Second"
    assert second.description is None


def test_delete_portfolio_cascades_to_holdings() -> None:
    store = InMemoryPortfolioStore()
    portfolio = store.create_portfolio("Core")
    holding = store.create_holding(portfolio.id, " tcs.ns ", "TCS", "stock", 2, 3900)
    assert holding.symbol == "TCS.NS"
    assert store.delete_portfolio(portfolio.id) is True
    assert store.list_holdings(portfolio.id) == []
    assert store.delete_holding(holding.id) is False
    assert store.delete_portfolio(portfolio.id) is False


def test_create_holding_rejects_unknown_portfolio() -> None:
    with pytest.raises(KeyError):
        InMemoryPortfolioStore().create_holding("missing", "AAPL", "Apple", "stock", 1, 1)


def test_portfolio_validation() -> None:
    assert validate_portfolio_input("Core") == []
    assert validate_portfolio_input("   ")[0].code == "missing_value"
    assert validate_portfolio_input("x" * 101)[0].code == "too_long"


def test_holding_validation_accepts_numeric_strings() -> None:
    assert validate_holding_input("BRK-B", "Berkshire", "stock", "1.5", "300") == []
    assert validate_holding_input("AAPL", "Apple", "etf", 0, 1) == []


@pytest.mark.parametrize(
    ("quantity", "purchase_price", "field"),
    [(-1, 10, "quantity"), ("abc", 10, "quantity"), (1, 0, "purchase_price"), (1, float("nan"), "purchase_price")],
)
def test_holding_validation_rejects_bad_numbers(quantity, purchase_price, field) -> None:
    issues = validate_holding_input("AAPL", "Apple", "stock", quantity, purchase_price)
    assert [issue.field for issue in issues] == [field]
