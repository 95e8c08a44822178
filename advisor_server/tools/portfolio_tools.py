"""Portfolio tracking MCP tools."""

from __future__ import annotations

from typing import TYPE_CHECKING

from mcp.server.fastmcp import FastMCP

from advisor_server.lib.formatters import format_response, valuation_lines
from advisor_server.runtime.response import to_response

if TYPE_CHECKING:
    from advisor_server.tools.registry import ToolServices


def _valuation_title(services: ToolServices) -> str:
    portfolio = services.tracking.current_portfolio()
    return f"Portfolio valuation: {portfolio.name}" if portfolio else "Portfolio valuation"


def register_portfolio_tools(mcp: FastMCP, services: ToolServices) -> None:
    @mcp.tool(description="List portfolios, newest first, with the currently selected portfolio id.")
    def list_portfolios() -> str:
        result = services.tracking.list_portfolios()
        return to_response(result, selected_portfolio_id=services.tracking.selected_portfolio_id)

    @mcp.tool(description="Create a portfolio and select it.")
    async def create_portfolio(name: str, description: str | None = None) -> str:
        return to_response(await services.tracking.create_portfolio(name, description))

    @mcp.tool(description="Delete a portfolio and all of its holdings.")
    async def delete_portfolio(portfolio_id: str) -> str:
        return to_response(await services.tracking.delete_portfolio(portfolio_id))

    @mcp.tool(description="Select the portfolio that holdings and valuation tools operate on.")
    async def select_portfolio(portfolio_id: str) -> str:
        return to_response(await services.tracking.select_portfolio(portfolio_id))

    @mcp.tool(description="List holdings of the selected portfolio.")
    def list_holdings() -> str:
        result = services.tracking.list_holdings()
        return to_response(result, selected_portfolio_id=services.tracking.selected_portfolio_id)

    @mcp.tool(description="Add a holding (stock, crypto or etf) to the selected portfolio.")
    async def add_holding(
        symbol: str,
        name: str,
        quantity: float,
        purchase_price: float,
        asset_type: str = "stock",
        notes: str | None = None,
    ) -> str:
        result = await services.tracking.add_holding(
            symbol=symbol,
            name=name,
            asset_type=asset_type,
            quantity=quantity,
            purchase_price=purchase_price,
            notes=notes,
        )
        return to_response(result)

    @mcp.tool(description="Delete a holding by id.")
    async def delete_holding(holding_id: str) -> str:
        return to_response(await services.tracking.delete_holding(holding_id))

    @mcp.tool(description="Value the selected portfolio against the latest refreshed prices.")
    def portfolio_valuation() -> str:
        result = services.tracking.valuation()
        if result.data is None:
            return to_response(result)
        summary = format_response(_valuation_title(services), valuation_lines(result.data), warning=result.warning)
        return to_response(result, summary=summary)

    @mcp.tool(description="Refresh prices of the selected portfolio now and return its valuation.")
    async def refresh_prices() -> str:
        result = await services.tracking.refresh_prices()
        if result.data is None:
            return to_response(result)
        summary = format_response(_valuation_title(services), valuation_lines(result.data), warning=result.warning)
        return to_response(result, summary=summary)
