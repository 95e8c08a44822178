"""Holdings valuation against a (possibly partial) price snapshot."""

from __future__ import annotations

import math
from collections.abc import Iterable

import numpy as np
import pandas as pd

from advisor_server.engine.models import Holding, HoldingValuation, ValuationResult
from advisor_server.pricing.snapshot import PriceSnapshot


def select_holdings(holdings: Iterable[Holding], portfolio_id: str | None) -> list[Holding]:
    """Holdings of ``portfolio_id`` only, newest first, independent of input order."""
    if portfolio_id is None:
        return []
    selected = [holding for holding in holdings if holding.portfolio_id == portfolio_id]
    return sorted(selected, key=lambda holding: (-holding.created_at, holding.id))


def build_valuation_frame(holdings: list[Holding], snapshot: PriceSnapshot) -> pd.DataFrame:
    current = [snapshot.price_of(holding.symbol) for holding in holdings]
    data = pd.DataFrame(
        {
            "symbol": [holding.symbol for holding in holdings],
            "asset_type": [holding.asset_type for holding in holdings],
            "quantity": [float(holding.quantity) for holding in holdings],
            "purchase_price": [float(holding.purchase_price) for holding in holdings],
            "price_is_fallback": [price is None for price in current],
            "current_price": [
                holding.purchase_price if price is None else price for holding, price in zip(holdings, current)
            ],
        }
    )
    data["current_price"] = data["current_price"].astype(float)
    data["market_value"] = data["quantity"] * data["current_price"]
    data["cost_basis"] = data["quantity"] * data["purchase_price"]
    data["gain"] = data["market_value"] - data["cost_basis"]
    positive_cost = data["cost_basis"].where(data["cost_basis"] > 0)
    data["gain_percent"] = np.where(data["cost_basis"] > 0, data["gain"] / positive_cost * 100.0, 0.0)
    return data


def aggregate(
    holdings: Iterable[Holding],
    snapshot: PriceSnapshot,
    portfolio_id: str | None,
) -> ValuationResult:
    """Value the selected portfolio's holdings.

    Pure: no network, no randomness. A symbol that is missing or
    unavailable in the snapshot is valued at its purchase price (gain 0).
    Totals use ``math.fsum`` so the result does not depend on input order.
    """
    priced_at = snapshot.fetched_at or None
    if portfolio_id is None:
        return ValuationResult.empty(None, priced_at)
    selected = select_holdings(holdings, portfolio_id)
    if not selected:
        return ValuationResult.empty(portfolio_id, priced_at)

    frame = build_valuation_frame(selected, snapshot)
    total_value = math.fsum(frame["market_value"])
    total_cost = math.fsum(frame["cost_basis"])
    total_gain = total_value - total_cost
    total_gain_percent = (total_gain / total_cost) * 100.0 if total_cost > 0 else 0.0

    per_holding: list[HoldingValuation] = []
    for holding, row in zip(selected, frame.itertuples(index=False)):
        market_value = float(row.market_value)
        per_holding.append(
            HoldingValuation(
                holding=holding,
                current_price=float(row.current_price),
                market_value=market_value,
                cost_basis=float(row.cost_basis),
                gain=float(row.gain),
                gain_percent=float(row.gain_percent),
                weight=market_value / total_value if total_value > 0 else 0.0,
                price_is_fallback=bool(row.price_is_fallback),
            )
        )

    by_asset_type = {
        str(asset_type): math.fsum(values) for asset_type, values in frame.groupby("asset_type")["market_value"]
    }
    fallback_symbols = sorted(set(frame.loc[frame["price_is_fallback"], "symbol"]))
    return ValuationResult(
        portfolio_id=portfolio_id,
        per_holding=per_holding,
        total_value=total_value,
        total_cost=total_cost,
        total_gain=total_gain,
        total_gain_percent=total_gain_percent,
        by_asset_type=by_asset_type,
        fallback_symbols=fallback_symbols,
        priced_at=priced_at,
    )
