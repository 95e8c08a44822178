"""Application entrypoint for the Local Invest Advisor MCP server."""

from __future__ import annotations

import asyncio
import logging
import os
import sys

from mcp.server.fastmcp import FastMCP
from starlette.responses import JSONResponse, Response

from advisor_server.config.settings import Settings, get_settings
from advisor_server.tools.registry import ToolServices, build_tool_services, register_all_tools

LOGGER = logging.getLogger(__name__)


def resolve_transport_mode(configured_mode: str) -> str:
    if os.getenv("RENDER") and configured_mode == "stdio":
        return "http"
    if configured_mode in {"stdio", "http"}:
        return configured_mode
    if os.getenv("RENDER") or os.getenv("PORT"):
        return "http"
    return "stdio"


def resolve_http_transport(configured_transport: str) -> str:
    if configured_transport in {"sse", "streamable"}:
        return configured_transport
    return "sse"


def configure_logging(level: str) -> None:
    # stdout carries the stdio transport, so logs go to stderr
    logging.basicConfig(
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def health_payload(settings: Settings, services: ToolServices, mode: str) -> dict[str, object]:
    schedulers = {}
    for scheduler in (services.plan_scheduler, services.holdings_scheduler):
        schedulers[scheduler.name] = {
            "running": scheduler.running,
            "subscriptions": scheduler.subscription_count,
            "interval_seconds": scheduler.interval_seconds,
            "cycles": scheduler.cycles,
            "last_cycle_latency_ms": scheduler.last_cycle_latency_ms,
            "snapshot_fetched_at": scheduler.snapshot.fetched_at or None,
        }
    return {
        "status": "ok",
        "service": settings.app_name,
        "version": settings.app_version,
        "mode": mode,
        "live_prices": settings.live_prices_enabled,
        "selected_portfolio_id": services.tracking.selected_portfolio_id,
        "schedulers": schedulers,
    }


async def run() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    services = build_tool_services(settings)
    mcp = FastMCP(
        name=settings.app_name,
        host=settings.host,
        port=settings.port,
        streamable_http_path=settings.mcp_path,
    )
    register_all_tools(mcp, services)
    resolved_mode = resolve_transport_mode(settings.transport_mode)
    resolved_http_transport = resolve_http_transport(settings.http_transport)

    @mcp.custom_route(settings.health_path, methods=["GET"])
    async def health_check(_: object) -> Response:
        return JSONResponse(health_payload(settings, services, resolved_mode))

    if not settings.live_prices_enabled:
        LOGGER.warning("live prices disabled: suggestions will show N/A reference prices")
    LOGGER.info("server starting: mode=%s http_transport=%s", resolved_mode, resolved_http_transport)
    try:
        if resolved_mode == "stdio":
            await mcp.run_stdio_async()
        elif resolved_http_transport == "streamable":
            await mcp.run_streamable_http_async()
        else:
            await mcp.run_sse_async()
    finally:
        await services.advisor.close()
        await services.tracking.close()


def main() -> None:
    asyncio.run(run())


if __name__ == "__main__":
    main()
