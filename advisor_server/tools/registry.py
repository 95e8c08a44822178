"""Tool service wiring and registration entrypoint."""

from __future__ import annotations

from dataclasses import dataclass

from mcp.server.fastmcp import FastMCP

from advisor_server.config.settings import Settings
from advisor_server.portfolio.store import InMemoryPortfolioStore, PortfolioStore
from advisor_server.pricing.scheduler import PriceRefreshScheduler
from advisor_server.pricing.sources import (
    CryptoPriceSource,
    EquityPriceSource,
    FixedPriceSource,
    PriceSource,
    SimulatedPriceSource,
)
from advisor_server.providers.coingecko import CoinGeckoClient
from advisor_server.providers.models import Market
from advisor_server.providers.yahoo_finance import YahooFinanceClient
from advisor_server.services.advisor_service import AdvisorService
from advisor_server.services.tracking_service import TrackingService
from advisor_server.tools.advisor_tools import register_advisor_tools
from advisor_server.tools.portfolio_tools import register_portfolio_tools


@dataclass
class ToolServices:
    advisor: AdvisorService
    tracking: TrackingService
    plan_scheduler: PriceRefreshScheduler
    holdings_scheduler: PriceRefreshScheduler


def build_plan_sources(settings: Settings) -> dict[Market, PriceSource]:
    if not settings.live_prices_enabled:
        # offline: amounts are still planned, reference prices are N/A
        offline = FixedPriceSource()
        return {"equity": offline, "crypto": offline}
    return {
        "equity": EquityPriceSource(
            YahooFinanceClient(settings.request_timeout_seconds, proxy_url=settings.yahoo_proxy_url)
        ),
        "crypto": CryptoPriceSource(
            CoinGeckoClient(
                settings.coingecko_base_url,
                vs_currency=settings.quote_currency,
                timeout_seconds=settings.request_timeout_seconds,
            )
        ),
    }


def build_tool_services(settings: Settings, store: PortfolioStore | None = None) -> ToolServices:
    plan_scheduler = PriceRefreshScheduler(
        build_plan_sources(settings), interval_seconds=settings.plan_refresh_seconds, name="plans"
    )
    # Holdings have no market feed: their prices come from the bounded simulator.
    simulator = SimulatedPriceSource(volatility=settings.simulated_volatility)
    holdings_scheduler = PriceRefreshScheduler(
        {"equity": simulator, "crypto": simulator},
        interval_seconds=settings.holdings_refresh_seconds,
        name="holdings",
    )
    return ToolServices(
        advisor=AdvisorService(plan_scheduler, allocation_unit=settings.allocation_unit),
        tracking=TrackingService(store or InMemoryPortfolioStore(), holdings_scheduler, simulator=simulator),
        plan_scheduler=plan_scheduler,
        holdings_scheduler=holdings_scheduler,
    )


def register_all_tools(mcp: FastMCP, services: ToolServices) -> None:
    register_advisor_tools(mcp, services)
    register_portfolio_tools(mcp, services)
