"""Environment-driven settings."""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv


@dataclass(frozen=True)
class Settings:
    """Runtime settings for local/stdio and HTTP-hosted modes."""

    app_name: str = "local-invest-advisor"
    app_version: str = "1.0.0"
    transport_mode: str = "auto"
    http_transport: str = "sse"
    host: str = "0.0.0.0"
    port: int = 8000
    mcp_path: str = "/mcp"
    health_path: str = "/health"
    log_level: str = "INFO"
    request_timeout_seconds: float = 15.0
    quote_currency: str = "inr"
    coingecko_base_url: str = "https://api.coingecko.com/api/v3"
    yahoo_proxy_url: str | None = "https://api.allorigins.win/get?url="
    live_prices_enabled: bool = True
    holdings_refresh_seconds: float = 60.0
    plan_refresh_seconds: float = 300.0
    simulated_volatility: float = 0.10
    allocation_unit: float = 1.0


def _as_int(value: str | None, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _as_float(value: str | None, default: float) -> float:
    if value is None or value == "":
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _as_bool(value: str | None, default: bool) -> bool:
    if value is None or value == "":
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _positive(value: float, default: float) -> float:
    return value if value > 0 else default


def get_settings() -> Settings:
    """Load runtime settings from environment variables."""
    load_dotenv()

    proxy = os.getenv("YAHOO_PROXY_URL")
    return Settings(
        transport_mode=os.getenv("TRANSPORT_MODE", "auto").strip().lower(),
        http_transport=os.getenv("HTTP_TRANSPORT", "sse").strip().lower(),
        host=os.getenv("HOST", "0.0.0.0"),
        port=_as_int(os.getenv("PORT"), 8000),
        mcp_path=os.getenv("MCP_PATH", "/mcp"),
        health_path=os.getenv("HEALTH_PATH", "/health"),
        log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO",
        request_timeout_seconds=_positive(_as_float(os.getenv("REQUEST_TIMEOUT_SECONDS"), 15.0), 15.0),
        quote_currency=os.getenv("QUOTE_CURRENCY", "inr").strip().lower() or "inr",
        coingecko_base_url=os.getenv("COINGECKO_BASE_URL", "https://api.coingecko.com/api/v3"),
        yahoo_proxy_url=(proxy.strip() or None) if proxy is not None else "https://api.allorigins.win/get?url=",
        live_prices_enabled=_as_bool(os.getenv("LIVE_PRICES_ENABLED"), True),
        holdings_refresh_seconds=_positive(_as_float(os.getenv("HOLDINGS_REFRESH_SECONDS"), 60.0), 60.0),
        plan_refresh_seconds=_positive(_as_float(os.getenv("PLAN_REFRESH_SECONDS"), 300.0), 300.0),
        simulated_volatility=min(max(_as_float(os.getenv("SIMULATED_VOLATILITY"), 0.10), 0.0), 0.5),
        allocation_unit=_positive(_as_float(os.getenv("ALLOCATION_UNIT"), 1.0), 1.0),
    )
