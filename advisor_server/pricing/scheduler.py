"""Periodic price refresh for the instruments consumers currently care about."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass

from advisor_server.engine.errors import PriceSourceUnavailable
from advisor_server.pricing.snapshot import PriceSnapshot
from advisor_server.pricing.sources import PriceSource
from advisor_server.providers.models import Market

LOGGER = logging.getLogger(__name__)
SnapshotCallback = Callable[[PriceSnapshot], None]


@dataclass(frozen=True)
class Instrument:
    market: Market
    identifier: str


class Subscription:
    def __init__(
        self,
        scheduler: PriceRefreshScheduler,
        instruments: Iterable[Instrument],
        on_snapshot: SnapshotCallback | None = None,
    ) -> None:
        self._scheduler = scheduler
        self.instruments: tuple[Instrument, ...] = tuple(dict.fromkeys(instruments))
        self.on_snapshot = on_snapshot
        self.active = True

    async def update(self, instruments: Iterable[Instrument]) -> PriceSnapshot:
        return await self._scheduler.resubscribe(self, instruments)

    async def close(self) -> None:
        await self._scheduler.unsubscribe(self)


class PriceRefreshScheduler:
    """Keeps one current PriceSnapshot for the union of all subscriptions.

    A subscription triggers an immediate fetch; after that a background
    task refreshes every ``interval_seconds`` until the last subscription
    closes. Cycles never overlap, and markets within a cycle are fetched
    concurrently and joined with ``gather`` before the new snapshot is
    published. A market that fails is marked unavailable for that cycle
    only; it is retried on the next scheduled cycle.
    """

    def __init__(
        self,
        sources: Mapping[Market, PriceSource],
        interval_seconds: float = 60.0,
        name: str = "prices",
    ) -> None:
        self.sources = dict(sources)
        self.interval_seconds = max(0.01, float(interval_seconds))
        self.name = name
        self._snapshot = PriceSnapshot.empty()
        self._subscriptions: list[Subscription] = []
        self._cycle_lock = asyncio.Lock()
        self._task: asyncio.Task[None] | None = None
        self.cycles = 0
        self.last_cycle_latency_ms: float | None = None

    @property
    def snapshot(self) -> PriceSnapshot:
        return self._snapshot

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def subscription_count(self) -> int:
        return len(self._subscriptions)

    def interesting(self) -> list[Instrument]:
        seen: dict[Instrument, None] = {}
        for subscription in self._subscriptions:
            seen.update(dict.fromkeys(subscription.instruments))
        return list(seen)

    async def subscribe(
        self,
        instruments: Iterable[Instrument],
        on_snapshot: SnapshotCallback | None = None,
    ) -> Subscription:
        subscription = Subscription(self, instruments, on_snapshot)
        self._subscriptions.append(subscription)
        await self.refresh_now()
        self._ensure_loop()
        return subscription

    async def resubscribe(self, subscription: Subscription, instruments: Iterable[Instrument]) -> PriceSnapshot:
        if not subscription.active:
            raise RuntimeError("Subscription is closed.")
        subscription.instruments = tuple(dict.fromkeys(instruments))
        return await self.refresh_now()

    async def unsubscribe(self, subscription: Subscription) -> None:
        subscription.active = False
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)
        if not self._subscriptions:
            await self.stop()

    async def refresh_now(self) -> PriceSnapshot:
        async with self._cycle_lock:
            return await self._run_cycle()

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None or task.done():
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        LOGGER.info("refresh loop stopped: scheduler=%s cycles=%s", self.name, self.cycles)

    def _ensure_loop(self) -> None:
        if self.running or not self._subscriptions:
            return
        self._task = asyncio.create_task(self._loop(), name=f"price-refresh-{self.name}")
        LOGGER.info("refresh loop started: scheduler=%s interval_s=%s", self.name, self.interval_seconds)

    async def _loop(self) -> None:
        while self._subscriptions:
            await asyncio.sleep(self.interval_seconds)
            if not self._subscriptions:
                break
            try:
                await self.refresh_now()
            except Exception:
                LOGGER.exception("refresh cycle crashed: scheduler=%s", self.name)

    async def _fetch_market(self, market: Market, ids: list[str]) -> dict[str, float | None]:
        source = self.sources.get(market)
        if source is None:
            raise PriceSourceUnavailable(f"No {market} price source is configured.", market=market)
        return await source.fetch_prices(ids)

    async def _run_cycle(self) -> PriceSnapshot:
        started = time.perf_counter()
        by_market: dict[Market, list[str]] = {}
        for instrument in self.interesting():
            by_market.setdefault(instrument.market, []).append(instrument.identifier)

        markets = list(by_market)
        results = await asyncio.gather(
            *(self._fetch_market(market, by_market[market]) for market in markets),
            return_exceptions=True,
        )

        prices: dict[str, float | None] = {}
        simulated: set[str] = set()
        failed: set[str] = set()
        for market, result in zip(markets, results):
            ids = by_market[market]
            if isinstance(result, BaseException):
                if isinstance(result, asyncio.CancelledError):
                    raise result
                failed.add(market)
                if isinstance(result, PriceSourceUnavailable):
                    LOGGER.warning("market fetch failed: scheduler=%s market=%s reason=%s", self.name, market, result)
                else:
                    LOGGER.error(
                        "market fetch unexpected failure: scheduler=%s market=%s", self.name, market, exc_info=result
                    )
                prices.update(dict.fromkeys(ids))
                continue
            for identifier in ids:
                prices[identifier] = result.get(identifier)
            source = self.sources.get(market)
            if source is not None and source.simulated:
                simulated.update(identifier for identifier in ids if result.get(identifier) is not None)

        snapshot = PriceSnapshot(prices, simulated=simulated, failed_markets=failed)
        self._snapshot = snapshot
        self.cycles += 1
        self.last_cycle_latency_ms = round((time.perf_counter() - started) * 1000, 2)
        LOGGER.info(
            "refresh cycle complete: scheduler=%s instruments=%s unavailable=%s failed_markets=%s latency_ms=%s",
            self.name,
            len(prices),
            len(snapshot.unavailable()),
            sorted(failed),
            self.last_cycle_latency_ms,
        )
        for subscription in list(self._subscriptions):
            if subscription.on_snapshot is None:
                continue
            try:
                subscription.on_snapshot(snapshot)
            except Exception:
                LOGGER.exception("snapshot callback failed: scheduler=%s", self.name)
        return snapshot
