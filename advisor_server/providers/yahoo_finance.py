"""Yahoo Finance chart adapter, optionally routed through a CORS-style proxy."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote, quote_plus

from advisor_server.providers.http import ProviderError, fetch_json, parse_json_body
from advisor_server.providers.models import SymbolPrice

YAHOO_CHART_URL = "https://query1.finance.yahoo.com/v8/finance/chart/{symbol}?interval=1d"


def extract_market_price(data: Any) -> float | None:
    chart = data.get("chart") if isinstance(data, dict) else None
    result = chart.get("result") if isinstance(chart, dict) else None
    if not isinstance(result, list) or not result or not isinstance(result[0], dict):
        return None
    meta = result[0].get("meta")
    price = meta.get("regularMarketPrice") if isinstance(meta, dict) else None
    if isinstance(price, bool) or not isinstance(price, (int, float)) or price <= 0:
        return None
    return float(price)


class YahooFinanceClient:
    def __init__(self, timeout_seconds: float = 15.0, proxy_url: str | None = None) -> None:
        self.timeout_seconds = timeout_seconds
        self.proxy_url = proxy_url or None

    def _chart_url(self, symbol: str) -> str:
        url = YAHOO_CHART_URL.format(symbol=quote_plus(symbol))
        if self.proxy_url:
            return f"{self.proxy_url}{quote(url, safe='')}"
        return url

    def _unwrap(self, data: Any) -> Any:
        if not self.proxy_url:
            return data
        # The proxy wraps the upstream body as a string under "contents".
        contents = data.get("contents") if isinstance(data, dict) else None
        if not isinstance(contents, str):
            return None
        try:
            return parse_json_body(contents, "yahoo")
        except ProviderError:
            return None

    def get_price(self, symbol: str) -> SymbolPrice:
        data = fetch_json(self._chart_url(symbol), provider="yahoo", timeout_seconds=self.timeout_seconds)
        return SymbolPrice(symbol=symbol, price=extract_market_price(self._unwrap(data)), source="yahoo")
