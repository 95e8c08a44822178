"""CoinGecko simple-price adapter."""

from __future__ import annotations

from urllib.parse import urlencode

from advisor_server.providers.http import ProviderError, fetch_json

COINGECKO_BASE_URL = "https://api.coingecko.com/api/v3"


def _to_price(value: object) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    price = float(value)
    return price if price > 0 else None


class CoinGeckoClient:
    def __init__(
        self,
        base_url: str = COINGECKO_BASE_URL,
        vs_currency: str = "inr",
        timeout_seconds: float = 15.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.vs_currency = vs_currency.lower()
        self.timeout_seconds = timeout_seconds

    def get_prices(self, ids: list[str]) -> dict[str, float | None]:
        """Return one entry per requested id; ids the upstream omits map to None."""
        if not ids:
            return {}
        query = urlencode({"ids": ",".join(ids), "vs_currencies": self.vs_currency})
        data = fetch_json(f"{self.base_url}/simple/price?{query}", provider="coingecko", timeout_seconds=self.timeout_seconds)
        if not isinstance(data, dict):
            raise ProviderError("coingecko", "BAD_RESPONSE", "CoinGecko returned an unexpected payload shape.")
        status = data.get("status")
        if isinstance(status, dict) and status.get("error_code"):
            code = status.get("error_code")
            message = str(status.get("error_message") or "CoinGecko upstream error.")
            raise ProviderError("coingecko", "RATE_LIMIT" if code == 429 else "UPSTREAM", message)
        out: dict[str, float | None] = {}
        for coin_id in ids:
            row = data.get(coin_id)
            out[coin_id] = _to_price(row.get(self.vs_currency)) if isinstance(row, dict) else None
        return out
