"""Investment suggestion service: live basket prices in, allocation plan out."""

from __future__ import annotations

import asyncio
import logging

from advisor_server.engine.baskets import profile_for
from advisor_server.engine.errors import InvalidAmount
from advisor_server.engine.models import AllocationPlan, RiskTier
from advisor_server.engine.planner import DEFAULT_UNIT, parse_amount, plan
from advisor_server.pricing.scheduler import Instrument, PriceRefreshScheduler, Subscription
from advisor_server.providers.models import MARKETS
from advisor_server.services.base import ErrorEnvelope, ServiceResult, envelope_from_error

LOGGER = logging.getLogger(__name__)


def basket_instruments(tier: RiskTier) -> list[Instrument]:
    profile = profile_for(tier)
    return [Instrument(market, identifier) for market in MARKETS for identifier in profile.basket(market)]


class AdvisorService:
    """Keeps the baskets of the last requested plan subscribed for refresh."""

    def __init__(self, scheduler: PriceRefreshScheduler, allocation_unit: float = float(DEFAULT_UNIT)) -> None:
        self.scheduler = scheduler
        self.allocation_unit = allocation_unit
        self._subscription: Subscription | None = None
        self._lock = asyncio.Lock()

    async def _track(self, instruments: list[Instrument]) -> None:
        async with self._lock:
            if self._subscription is None or not self._subscription.active:
                self._subscription = await self.scheduler.subscribe(instruments)
            else:
                await self._subscription.update(instruments)

    async def suggest(self, amount: object, risk_level: str | None = "medium") -> ServiceResult[AllocationPlan]:
        try:
            value = parse_amount(amount)
            tier = RiskTier.parse(risk_level)
        except InvalidAmount as error:
            LOGGER.info("suggestion rejected: reason=invalid_amount value=%r", amount)
            return ServiceResult(data=None, error=envelope_from_error(error))
        except ValueError as error:
            LOGGER.info("suggestion rejected: reason=invalid_risk_level value=%r", risk_level)
            return ServiceResult(
                data=None,
                error=ErrorEnvelope(code="INVALID_RISK_LEVEL", message=str(error), retriable=False),
            )

        await self._track(basket_instruments(tier))
        snapshot = self.scheduler.snapshot
        result = plan(value, tier, snapshot, unit=self.allocation_unit)

        warnings: list[str] = [error.message for error in result.market_errors.values()]
        if result.unavailable:
            warnings.append("Live price unavailable for: " + ", ".join(item.symbol for item in result.unavailable))
        if snapshot.simulated:
            warnings.append("Some prices are simulated, not live market data.")
        return ServiceResult(
            data=result,
            source="simulated" if snapshot.simulated else "live",
            warning=" ".join(warnings) or None,
            fetched_at=snapshot.fetched_at,
        )

    async def close(self) -> None:
        async with self._lock:
            if self._subscription is not None:
                await self._subscription.close()
                self._subscription = None
