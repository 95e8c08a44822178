"""Investment suggestion MCP tools."""

from __future__ import annotations

from typing import TYPE_CHECKING

from mcp.server.fastmcp import FastMCP

from advisor_server.lib.formatters import format_response, plan_lines
from advisor_server.runtime.response import to_response

if TYPE_CHECKING:
    from advisor_server.tools.registry import ToolServices


def register_advisor_tools(mcp: FastMCP, services: ToolServices) -> None:
    @mcp.tool(description="Suggest how to split an amount across stocks and cryptocurrencies for a risk level (low, medium, high).")
    async def suggest_investments(amount: float | str, risk_level: str = "medium") -> str:
        result = await services.advisor.suggest(amount, risk_level)
        if result.data is None:
            return to_response(result)
        summary = format_response("Suggested investments (live prices)", plan_lines(result.data), warning=result.warning)
        return to_response(
            result,
            summary=summary,
            total_invested=result.data.total_invested,
            unallocated=result.data.unallocated,
        )
