"""Human-readable summary lines; unavailable values render as N/A."""

from __future__ import annotations

from datetime import datetime, timezone

from advisor_server.engine.models import AllocationEntry, AllocationPlan, HoldingValuation, ValuationResult
from advisor_server.pricing.snapshot import UNAVAILABLE

FINANCIAL_DISCLAIMER = (
    "Simulated investment advice for informational use only. Always consult a financial advisor before investing."
)
NOT_AVAILABLE = "N/A"


def _fmt_money(value: object, currency: str = "₹") -> str:
    if value is None or value is UNAVAILABLE or not isinstance(value, (int, float)):
        return NOT_AVAILABLE
    sign = "-" if value < 0 else ""
    return f"{sign}{currency}{abs(value):,.2f}"


def _fmt_signed_percent(value: float | None) -> str:
    if value is None:
        return NOT_AVAILABLE
    return f"{'+' if value >= 0 else ''}{value:.2f}%"


def _fmt_date_from_unix(timestamp: float | None) -> str:
    if not timestamp:
        return NOT_AVAILABLE
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat().replace("+00:00", "Z")


def format_response(
    title: str,
    lines: list[str],
    warning: str | None = None,
    include_disclaimer: bool = True,
) -> str:
    chunks: list[str] = [title]
    if warning:
        chunks.append(f"Warning: {warning}")
    chunks.extend(lines)
    if include_disclaimer:
        chunks.extend(["---", FINANCIAL_DISCLAIMER])
    return "\n".join(chunks)


def line_money(label: str, value: object, currency: str = "₹") -> str:
    return f"{label}: {_fmt_money(value, currency)}"


def line_percent(label: str, value: float | None) -> str:
    return f"{label}: {_fmt_signed_percent(value)}"


def line_date(label: str, timestamp: float | None) -> str:
    return f"{label}: {_fmt_date_from_unix(timestamp)}"


def entry_line(entry: AllocationEntry) -> str:
    return (
        f"{entry.display_name} ({entry.symbol}): price {_fmt_money(entry.reference_price)}"
        f", invest {_fmt_money(entry.amount_to_invest)}"
    )


def plan_lines(result: AllocationPlan) -> list[str]:
    lines = [line_money("Amount", result.amount), f"Risk level: {result.tier.value}", "Stock investment plan:"]
    lines.extend(f"  {entry_line(entry)}" for entry in result.stock_plan)
    if "equity" in result.market_errors:
        lines.append(f"  {NOT_AVAILABLE}: {result.market_errors['equity'].message}")
    lines.append("Crypto investment plan:")
    lines.extend(f"  {entry_line(entry)}" for entry in result.crypto_plan)
    if "crypto" in result.market_errors:
        lines.append(f"  {NOT_AVAILABLE}: {result.market_errors['crypto'].message}")
    lines.append(line_money("Unallocated", result.unallocated))
    return lines


def holding_line(row: HoldingValuation, currency: str = "$") -> str:
    holding = row.holding
    price = _fmt_money(row.current_price, currency) + (" (purchase price)" if row.price_is_fallback else "")
    return (
        f"{holding.display_name} ({holding.symbol}, {holding.asset_type}): {holding.quantity:g} @ {price}"
        f" = {_fmt_money(row.market_value, currency)} [{_fmt_signed_percent(row.gain_percent)}]"
    )


def valuation_lines(result: ValuationResult, currency: str = "$") -> list[str]:
    lines = [
        line_money("Total value", result.total_value, currency),
        line_money("Total cost", result.total_cost, currency),
        line_money("Total gain/loss", result.total_gain, currency),
        line_percent("Total gain/loss %", result.total_gain_percent),
        line_date("Priced at", result.priced_at),
    ]
    lines.extend(holding_line(row, currency) for row in result.per_holding)
    return lines
