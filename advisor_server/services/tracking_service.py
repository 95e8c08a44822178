"""Portfolio tracking service: selection context, holdings and live valuation."""

from __future__ import annotations

import asyncio
import logging
from datetime import date

from advisor_server.engine.aggregator import aggregate
from advisor_server.engine.models import Holding, Portfolio, ValuationResult
from advisor_server.portfolio.store import PortfolioStore
from advisor_server.portfolio.validation import normalize_symbol, validate_holding_input, validate_portfolio_input
from advisor_server.pricing.scheduler import Instrument, PriceRefreshScheduler, Subscription
from advisor_server.pricing.sources import SimulatedPriceSource
from advisor_server.services.base import ServiceResult, not_found, validation_failure

LOGGER = logging.getLogger(__name__)


class TrackingService:
    """Owns the selected portfolio id and the holdings loaded for it.

    The selection is passed explicitly to ``aggregate`` on every
    valuation; the holdings subscription follows the loaded symbols and is
    closed when none remain.
    """

    def __init__(
        self,
        store: PortfolioStore,
        scheduler: PriceRefreshScheduler,
        simulator: SimulatedPriceSource | None = None,
    ) -> None:
        self.store = store
        self.scheduler = scheduler
        self.simulator = simulator
        self.selected_portfolio_id: str | None = None
        self._loaded: list[Holding] = []
        self._subscription: Subscription | None = None
        self._lock = asyncio.Lock()

    @property
    def loaded_holdings(self) -> list[Holding]:
        return list(self._loaded)

    def list_portfolios(self) -> ServiceResult[list[Portfolio]]:
        return ServiceResult(data=self.store.list_portfolios())

    def current_portfolio(self) -> Portfolio | None:
        if self.selected_portfolio_id is None:
            return None
        return self.store.get_portfolio(self.selected_portfolio_id)

    async def create_portfolio(self, name: str, description: str | None = None) -> ServiceResult[Portfolio]:
        issues = validate_portfolio_input(name, description)
        if issues:
            return validation_failure(issues)
        portfolio = self.store.create_portfolio(name, description)
        LOGGER.info("portfolio created: id=%s", portfolio.id)
        await self._select(portfolio.id)
        return ServiceResult(data=portfolio)

    async def delete_portfolio(self, portfolio_id: str) -> ServiceResult[dict[str, object]]:
        if not self.store.delete_portfolio(portfolio_id):
            return not_found(f"Portfolio not found: {portfolio_id}")
        LOGGER.info("portfolio deleted: id=%s was_selected=%s", portfolio_id, portfolio_id == self.selected_portfolio_id)
        if portfolio_id == self.selected_portfolio_id:
            remaining = self.store.list_portfolios()
            await self._select(remaining[0].id if remaining else None)
        return ServiceResult(data={"deleted": portfolio_id, "selected_portfolio_id": self.selected_portfolio_id})

    async def select_portfolio(self, portfolio_id: str) -> ServiceResult[Portfolio]:
        portfolio = self.store.get_portfolio(portfolio_id)
        if portfolio is None:
            return not_found(f"Portfolio not found: {portfolio_id}")
        await self._select(portfolio.id)
        return ServiceResult(data=portfolio)

    def list_holdings(self) -> ServiceResult[list[Holding]]:
        return ServiceResult(data=self.loaded_holdings)

    async def add_holding(
        self,
        symbol: str,
        name: str,
        asset_type: str = "stock",
        quantity: object = 0,
        purchase_price: object = 0,
        purchase_date: date | None = None,
        notes: str | None = None,
    ) -> ServiceResult[Holding]:
        if self.selected_portfolio_id is None:
            return not_found("No portfolio is selected.")
        issues = validate_holding_input(symbol, name, asset_type, quantity, purchase_price)
        if issues:
            return validation_failure(issues)
        holding = self.store.create_holding(
            self.selected_portfolio_id,
            normalize_symbol(symbol),
            name,
            asset_type,
            float(quantity),
            float(purchase_price),
            purchase_date=purchase_date,
            notes=notes,
        )
        LOGGER.info("holding added: portfolio=%s symbol=%s", holding.portfolio_id, holding.symbol)
        await self._reload()
        return ServiceResult(data=holding)

    async def delete_holding(self, holding_id: str) -> ServiceResult[dict[str, str]]:
        if not self.store.delete_holding(holding_id):
            return not_found(f"Holding not found: {holding_id}")
        await self._reload()
        return ServiceResult(data={"deleted": holding_id})

    def valuation(self) -> ServiceResult[ValuationResult]:
        snapshot = self.scheduler.snapshot
        result = aggregate(self._loaded, snapshot, self.selected_portfolio_id)
        warning = None
        if result.fallback_symbols:
            warning = "Using purchase price for: " + ", ".join(result.fallback_symbols)
        return ServiceResult(
            data=result,
            source="simulated" if snapshot.simulated else "live",
            warning=warning,
            fetched_at=snapshot.fetched_at or None,
        )

    async def refresh_prices(self) -> ServiceResult[ValuationResult]:
        if self._subscription is not None:
            await self.scheduler.refresh_now()
        return self.valuation()

    async def close(self) -> None:
        async with self._lock:
            await self._close_subscription()

    async def _select(self, portfolio_id: str | None) -> None:
        self.selected_portfolio_id = portfolio_id
        await self._reload()

    async def _reload(self) -> None:
        async with self._lock:
            portfolio_id = self.selected_portfolio_id
            self._loaded = self.store.list_holdings(portfolio_id) if portfolio_id else []
            if self.simulator is not None:
                # loaded holdings are newest first, so the newest purchase price wins
                references: dict[str, float] = {}
                for holding in self._loaded:
                    references.setdefault(holding.symbol, holding.purchase_price)
                self.simulator.replace_references(references)
            instruments = [Instrument(holding.market, holding.symbol) for holding in self._loaded]
            if not instruments:
                await self._close_subscription()
            elif self._subscription is None:
                self._subscription = await self.scheduler.subscribe(instruments)
            else:
                await self._subscription.update(instruments)

    async def _close_subscription(self) -> None:
        if self._subscription is not None:
            await self._subscription.close()
            self._subscription = None
