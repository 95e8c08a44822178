"""Portfolio and holding storage capability with an in-memory implementation."""

from __future__ import annotations

import itertools
import time
import uuid
from datetime import date
from threading import Lock
from typing import Protocol

from advisor_server.engine.models import Holding, Portfolio


class PortfolioStore(Protocol):
    def list_portfolios(self) -> list[Portfolio]: ...

    def get_portfolio(self, portfolio_id: str) -> Portfolio | None: ...

    def create_portfolio(self, name: str, description: str | None = None) -> Portfolio: ...

    def delete_portfolio(self, portfolio_id: str) -> bool: ...

    def list_holdings(self, portfolio_id: str) -> list[Holding]: ...

    def create_holding(
        self,
        portfolio_id: str,
        symbol: str,
        name: str,
        asset_type: str,
        quantity: float,
        purchase_price: float,
        purchase_date: date | None = None,
        notes: str | None = None,
    ) -> Holding: ...

    def delete_holding(self, holding_id: str) -> bool: ...


class InMemoryPortfolioStore:
    """Thread-safe store; listings are newest first, deleting a portfolio cascades."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._portfolios: dict[str, Portfolio] = {}
        self._holdings: dict[str, Holding] = {}
        self._order: dict[str, int] = {}
        self._sequence = itertools.count()

    def _stamp(self, record_id: str) -> float:
        self._order[record_id] = next(self._sequence)
        return time.time()

    def _newest_first(self, records: list) -> list:
        return sorted(records, key=lambda record: self._order[record.id], reverse=True)

    def list_portfolios(self) -> list[Portfolio]:
        with self._lock:
            return self._newest_first(list(self._portfolios.values()))

    def get_portfolio(self, portfolio_id: str) -> Portfolio | None:
        with self._lock:
            return self._portfolios.get(portfolio_id)

    def create_portfolio(self, name: str, description: str | None = None) -> Portfolio:
        with self._lock:
            portfolio_id = str(uuid.uuid4())
            portfolio = Portfolio(
                id=portfolio_id,
                name=name.strip(),
                description=(description or "").strip() or None,
                created_at=self._stamp(portfolio_id),
            )
            self._portfolios[portfolio_id] = portfolio
            return portfolio

    def delete_portfolio(self, portfolio_id: str) -> bool:
        with self._lock:
            if self._portfolios.pop(portfolio_id, None) is None:
                return False
            self._order.pop(portfolio_id, None)
            for holding_id in [h.id for h in self._holdings.values() if h.portfolio_id == portfolio_id]:
                self._holdings.pop(holding_id)
                self._order.pop(holding_id, None)
            return True

    def list_holdings(self, portfolio_id: str) -> list[Holding]:
        with self._lock:
            return self._newest_first([h for h in self._holdings.values() if h.portfolio_id == portfolio_id])

    def create_holding(
        self,
        portfolio_id: str,
        symbol: str,
        name: str,
        asset_type: str,
        quantity: float,
        purchase_price: float,
        purchase_date: date | None = None,
        notes: str | None = None,
    ) -> Holding:
        with self._lock:
            if portfolio_id not in self._portfolios:
                raise KeyError(f"Unknown portfolio: {portfolio_id}")
            holding_id = str(uuid.uuid4())
            holding = Holding(
                id=holding_id,
                portfolio_id=portfolio_id,
                symbol=symbol.strip().upper(),
                display_name=name.strip(),
                asset_type=asset_type,
                quantity=float(quantity),
                purchase_price=float(purchase_price),
                purchase_date=purchase_date or date.today(),
                notes=notes,
                created_at=self._stamp(holding_id),
            )
            self._holdings[holding_id] = holding
            return holding

    def delete_holding(self, holding_id: str) -> bool:
        with self._lock:
            if self._holdings.pop(holding_id, None) is None:
                return False
            self._order.pop(holding_id, None)
            return True
