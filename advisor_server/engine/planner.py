"""Budget-exact allocation of a cash amount across a tier's baskets."""

from __future__ import annotations

import logging
import math
from decimal import ROUND_FLOOR, Decimal, InvalidOperation

from advisor_server.engine.baskets import display_name, display_symbol, profile_for
from advisor_server.engine.errors import InvalidAmount, PriceSourceUnavailable, SymbolPriceUnavailable
from advisor_server.engine.models import AllocationEntry, AllocationPlan, RiskTier
from advisor_server.pricing.snapshot import UNAVAILABLE, PriceSnapshot
from advisor_server.providers.models import MARKETS, Market

LOGGER = logging.getLogger(__name__)
DEFAULT_UNIT = Decimal(1)


def parse_amount(raw: object) -> float:
    """Parse user input into a positive amount, raising InvalidAmount otherwise."""
    if isinstance(raw, bool) or raw is None:
        raise InvalidAmount("Please enter a valid investment amount.", value=raw)
    if isinstance(raw, (int, float)):
        value = float(raw)
    else:
        text = str(raw).strip().replace(",", "")
        if not text:
            raise InvalidAmount("Please enter a valid investment amount.", value=raw)
        try:
            value = float(text)
        except ValueError as error:
            raise InvalidAmount("Please enter a valid investment amount.", value=raw) from error
    if not math.isfinite(value) or value <= 0:
        raise InvalidAmount("Please enter a valid investment amount.", value=raw)
    return value


def _as_decimal(value: float | Decimal) -> Decimal:
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(repr(float(value)))
    except (InvalidOperation, TypeError, ValueError) as error:
        raise InvalidAmount("Amount must be numeric.", value=value) from error


def per_instrument_amount(budget: Decimal, count: int, unit: Decimal = DEFAULT_UNIT) -> Decimal:
    """Even split of ``budget`` over ``count`` instruments, truncated to ``unit``.

    The truncation remainder is left unallocated, so the invested total
    never exceeds ``budget`` and falls short by less than ``count * unit``.
    """
    if count <= 0:
        return Decimal(0)
    return (budget / count / unit).to_integral_value(rounding=ROUND_FLOOR) * unit


def _market_entries(
    market: Market,
    identifiers: tuple[str, ...],
    amount_each: Decimal,
    snapshot: PriceSnapshot,
    unavailable: list[SymbolPriceUnavailable],
) -> list[AllocationEntry]:
    entries: list[AllocationEntry] = []
    for identifier in identifiers:
        price = snapshot.get(identifier, UNAVAILABLE)
        if price is UNAVAILABLE:
            unavailable.append(
                SymbolPriceUnavailable(f"No live price for {identifier}.", symbol=identifier)
            )
        entries.append(
            AllocationEntry(
                identifier=identifier,
                symbol=display_symbol(identifier, market),
                display_name=display_name(identifier, market),
                market=market,
                amount_to_invest=float(amount_each),
                reference_price=price,
            )
        )
    return entries


def plan(
    amount: float,
    tier: RiskTier | str,
    snapshot: PriceSnapshot,
    unit: float | Decimal = DEFAULT_UNIT,
) -> AllocationPlan:
    """Split ``amount`` across the tier's equity and crypto baskets.

    Pure and synchronous: reads the given snapshot, never fetches. A
    missing price only degrades its own entry; a market listed in
    ``snapshot.failed_markets`` yields an empty plan for that market and a
    ``PriceSourceUnavailable`` record, while the other market is planned.
    """
    if isinstance(amount, bool) or not isinstance(amount, (int, float, Decimal)):
        raise InvalidAmount("Amount must be numeric.", value=amount)
    total = _as_decimal(amount)
    if not total.is_finite() or total <= 0:
        raise InvalidAmount("Amount must be greater than zero.", value=amount)
    step = _as_decimal(unit)
    if not step.is_finite() or step <= 0:
        raise ValueError("Allocation unit must be positive.")

    resolved = RiskTier.parse(tier)
    profile = profile_for(resolved)
    budgets = {market: total * profile.share(market) for market in MARKETS}
    result = AllocationPlan(
        amount=float(total),
        tier=resolved,
        stock_budget=float(budgets["equity"]),
        crypto_budget=float(budgets["crypto"]),
    )

    for market in MARKETS:
        if market in snapshot.failed_markets:
            result.market_errors[market] = PriceSourceUnavailable(
                f"Live {market} prices could not be fetched.", market=market
            )
            LOGGER.warning("plan market skipped: tier=%s market=%s reason=source_unavailable", resolved.value, market)
            continue
        basket = profile.basket(market)
        amount_each = per_instrument_amount(budgets[market], len(basket), step)
        entries = _market_entries(market, basket, amount_each, snapshot, result.unavailable)
        if market == "equity":
            result.stock_plan = entries
        else:
            result.crypto_plan = entries

    LOGGER.info(
        "plan computed: tier=%s amount=%s invested=%s unavailable=%s",
        resolved.value,
        result.amount,
        result.total_invested,
        len(result.unavailable),
    )
    return result
