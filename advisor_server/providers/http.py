"""HTTP utilities and normalized provider errors."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Literal

import requests
from requests.adapters import HTTPAdapter

from advisor_server.providers.models import ProviderName

ProviderErrorCode = Literal["RATE_LIMIT", "AUTH", "NOT_FOUND", "UPSTREAM", "NETWORK", "BAD_RESPONSE"]

_SESSION = requests.Session()
_SESSION.mount("https://", HTTPAdapter(pool_connections=10, pool_maxsize=20))
_SESSION.mount("http://", HTTPAdapter(pool_connections=10, pool_maxsize=20))


@dataclass
class ProviderError(Exception):
    provider: ProviderName
    code: ProviderErrorCode
    message: str
    status: int | None = None

    def __str__(self) -> str:
        return self.message


def map_status_to_code(status: int) -> ProviderErrorCode:
    if status in {401, 403}:
        return "AUTH"
    if status == 404:
        return "NOT_FOUND"
    if status == 429:
        return "RATE_LIMIT"
    return "UPSTREAM"


def parse_json_body(raw: str, provider: ProviderName, status: int | None = None) -> Any:
    """Parse a response body, mapping HTML or garbage payloads to BAD_RESPONSE."""
    if not raw or not raw.strip():
        return {}
    try:
        return json.loads(raw)
    except json.JSONDecodeError as error:
        raise ProviderError(provider, "BAD_RESPONSE", "Provider returned non-JSON content.", status) from error


def fetch_json(
    url: str,
    provider: ProviderName,
    timeout_seconds: float = 15.0,
    headers: dict[str, str] | None = None,
) -> Any:
    """Fetch JSON once with uniform provider/network error mapping.

    There is no retry here; a failed request is picked up again by the
    next scheduled refresh cycle.
    """
    try:
        response = _SESSION.get(url, timeout=timeout_seconds, headers=headers)
    except requests.RequestException as error:
        raise ProviderError(provider, "NETWORK", "Provider request failed due to network error.") from error

    parsed = parse_json_body(response.text or "", provider, response.status_code)
    if not response.ok:
        raise ProviderError(
            provider,
            map_status_to_code(response.status_code),
            f"Provider request failed with status {response.status_code}.",
            response.status_code,
        )
    return parsed
