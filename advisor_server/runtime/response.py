"""Response shaping helpers for MCP tools."""

from __future__ import annotations

import json
import math
import time
from dataclasses import fields, is_dataclass
from datetime import date
from enum import Enum
from typing import Any

from advisor_server.pricing.snapshot import Unavailable
from advisor_server.services.base import ServiceResult

DISCLAIMER = "Data is for informational purposes only and does not constitute financial advice."


def _convert_data(data: Any) -> Any:
    if isinstance(data, Unavailable):
        return None
    if isinstance(data, Enum):
        return data.value
    if isinstance(data, date):
        return data.isoformat()
    if isinstance(data, float) and not math.isfinite(data):
        return None
    if isinstance(data, BaseException):
        return {"code": getattr(data, "code", type(data).__name__), "message": str(data)}
    if is_dataclass(data) and not isinstance(data, type):
        return {item.name: _convert_data(getattr(data, item.name)) for item in fields(data)}
    if isinstance(data, (list, tuple)):
        return [_convert_data(item) for item in data]
    if isinstance(data, dict):
        return {str(key): _convert_data(value) for key, value in data.items()}
    return data


def _freshness(fetched_at: float | None) -> dict[str, Any]:
    ts = fetched_at or time.time()
    age_seconds = max(0.0, time.time() - ts)
    return {"timestamp": int(ts), "age_seconds": round(age_seconds, 3)}


def success_response(result: ServiceResult[Any], summary: str | None = None, **extra: Any) -> str:
    payload: dict[str, Any] = {
        "ok": True,
        "data": _convert_data(result.data),
        "data_freshness": _freshness(result.fetched_at),
        "disclaimer": DISCLAIMER,
    }
    if result.source:
        payload["source"] = result.source
    if result.warning:
        payload["warning"] = result.warning
    if summary:
        payload["summary"] = summary
    payload.update({key: _convert_data(value) for key, value in extra.items()})
    return json.dumps(payload, ensure_ascii=True)


def error_response(result: ServiceResult[Any]) -> str:
    error = result.error
    payload: dict[str, Any] = {
        "ok": False,
        "error": {
            "code": error.code if error else "UNKNOWN",
            "message": error.message if error else "Request failed.",
            "retriable": error.retriable if error else False,
        },
        "timestamp": int(time.time()),
    }
    if error and error.details:
        payload["error"]["errors"] = error.details
    return json.dumps(payload, ensure_ascii=True)


def to_response(result: ServiceResult[Any], summary: str | None = None, **extra: Any) -> str:
    if result.error is not None:
        return error_response(result)
    return success_response(result, summary=summary, **extra)
